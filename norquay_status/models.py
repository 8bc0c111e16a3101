from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Status(str, Enum):
    """Open/closed state of a run or lift.

    ``UNKNOWN`` is the safe default whenever no definitive signal was found.
    """

    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Any) -> "Status":
        if isinstance(value, Status):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN


@dataclass
class RunStatus:
    """One trail or lift row as scraped from the conditions page."""

    name: str
    status: Status = Status.UNKNOWN
    groomed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "groomed": self.groomed}


@dataclass
class NewSnow:
    overnight_cm: Optional[int] = None
    last24_cm: Optional[int] = None
    last7_days_cm: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "overnightCm": self.overnight_cm,
            "last24Cm": self.last24_cm,
            "last7DaysCm": self.last7_days_cm,
        }


@dataclass
class SnowBase:
    lower_cm: Optional[int] = None
    upper_cm: Optional[int] = None
    ytd_snowfall_cm: Optional[int] = None
    ytd_snowfall2_cm: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "lowerCm": self.lower_cm,
            "upperCm": self.upper_cm,
            "ytdSnowfallCm": self.ytd_snowfall_cm,
            "ytdSnowfall2Cm": self.ytd_snowfall2_cm,
        }


@dataclass
class ConditionsSnapshot:
    """Scalar weather and snow report for a single scrape.

    Every metric is ``None`` when it could not be extracted; consumers must
    read ``None`` as "unknown", never as zero. ``updated_at`` is the time of
    the scrape, not of the upstream report.
    """

    source: str
    updated_at: datetime
    temp_c: Optional[int] = None
    note: Optional[str] = None
    new_snow: NewSnow = field(default_factory=NewSnow)
    snow_base: SnowBase = field(default_factory=SnowBase)
    lifts: Optional[Dict[str, Dict[str, str]]] = None

    def display_note(self, max_length: int = 260) -> str:
        note = self.note or ""
        if len(note) > max_length:
            return note[:max_length] + "…"
        return note

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source": self.source,
            "tempC": self.temp_c,
            "note": self.note,
            "newSnow": self.new_snow.to_dict(),
            "snowBase": self.snow_base.to_dict(),
        }
        if self.lifts is not None:
            data["lifts"] = self.lifts
        data["updated"] = self.updated_at.isoformat()
        return data


@dataclass
class RunsReport:
    """Per-run statuses from one scrape, keyed by raw display name."""

    source: str
    updated_at: datetime
    runs: Dict[str, RunStatus] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": self.updated_at.isoformat(),
            "source": self.source,
            "runs": {name: run.to_dict() for name, run in self.runs.items()},
        }
