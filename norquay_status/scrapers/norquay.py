"""Extraction rules for the Banff Norquay conditions page.

Source: https://banffnorquay.com/winter/conditions/

Every rule is a small named function so that a markup change on the resort
site breaks one field, not the whole report. Rules never raise for missing
data: a row without a status icon or a name is skipped, a label that is not
on the page yields ``None``.
"""
from __future__ import annotations

import html as html_lib
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, MutableMapping, Optional, Tuple

from ..models import ConditionsSnapshot, NewSnow, RunStatus, SnowBase, Status
from ..normalization import normalize
from .base import find_all_ints, iter_rows, page_text, search_int

RESORT_ID = "norquay"
DEFAULT_REPORT_URL = "https://banffnorquay.com/winter/conditions/"

# Regular expressions searched for inside each <tr> of the run status table.
# Configured overrides are regexes too; escape literal metacharacters.
DEFAULT_MARKERS: MutableMapping[str, str] = {
    "open": "open-icon",
    "closed": "close-icon",
    "groomed": r"icons-snow-plow-truck\.svg|snow-plow-truck",
    "name_class": "trail_name",
}

_TEMP = re.compile(r"Current Temp\s*([-+]?\d+)\s*°\s*C", re.IGNORECASE)
_NOTE = re.compile(r"Weather Note:\s*(.*?)\s*(?:New Snow|Snow Base)", re.IGNORECASE | re.DOTALL)
_OVERNIGHT = re.compile(r"New Snow\s*(\d+)\s*cm\s*Overnight", re.IGNORECASE)
_LAST_24 = re.compile(r"Overnight\s*\d+\s*cm\s*Last 24 hours\s*(\d+)\s*cm", re.IGNORECASE)
_LAST_7 = re.compile(r"Last 24 hours\s*\d+\s*cm\s*Last 7 days\s*(\d+)\s*cm", re.IGNORECASE)
_LOWER_BASE = re.compile(r"Snow Base\s*(\d+)\s*cm\s*Lower Mountain", re.IGNORECASE)
_UPPER_BASE = re.compile(r"Upper Mountain\s*(\d+)\s*cm", re.IGNORECASE)
_YTD = re.compile(r"Year to Date Snowfall\s*(\d+)\s*cm", re.IGNORECASE)


def _active_markers(markers: Mapping[str, str] | None) -> Dict[str, str]:
    return {**DEFAULT_MARKERS, **(markers or {})}


def _name_patterns(name_class: str) -> Tuple[re.Pattern, re.Pattern]:
    cls = re.escape(name_class)
    return (
        re.compile(rf'class="{cls}"[\s\S]*?<div[^>]*>([^<]+)</div>', re.IGNORECASE),
        re.compile(rf'class="{cls}"[\s\S]*?>([^<]+)</td>', re.IGNORECASE),
    )


def row_status(row: str, markers: Mapping[str, str] | None = None) -> Optional[Status]:
    """Open/closed state of one table row, or None when it has no status icon.

    ``<i class="bi bi-check-circle-fill open-icon"></i>`` -> ``Status.OPEN``
    ``<i class="bi bi-x-circle-fill close-icon"></i>`` -> ``Status.CLOSED``

    The open icon wins when a row somehow carries both.
    """
    active = _active_markers(markers)
    if re.search(active["open"], row):
        return Status.OPEN
    if re.search(active["closed"], row):
        return Status.CLOSED
    return None


def row_groomed(row: str, markers: Mapping[str, str] | None = None) -> bool:
    """``<img src=".../icons-snow-plow-truck.svg">`` anywhere in the row."""
    active = _active_markers(markers)
    return re.search(active["groomed"], row, re.IGNORECASE) is not None


def row_name(row: str, markers: Mapping[str, str] | None = None) -> Optional[str]:
    """Display name from the labelled name cell.

    ``<td class="trail_name"><div class="trail_open_status_icon"><i ...></i></div>
    <div>Valley of 10</div></td>`` -> ``"Valley of 10"``
    """
    active = _active_markers(markers)
    for pattern in _name_patterns(active["name_class"]):
        match = pattern.search(row)
        if match:
            name = html_lib.unescape(match.group(1)).replace("\u00a0", " ").strip()
            return name or None
    return None


def extract_run_statuses(html: str, markers: Mapping[str, str] | None = None) -> Dict[str, RunStatus]:
    """Map each named run on the page to its status.

    When two rows carry the same name the later row wins.
    """
    runs: Dict[str, RunStatus] = {}
    for row in iter_rows(html):
        status = row_status(row, markers)
        if status is None:
            continue
        name = row_name(row, markers)
        if not name:
            continue
        runs[name] = RunStatus(name=name, status=status, groomed=row_groomed(row, markers))
    return runs


def extract_lift_statuses(
    html: str,
    lift_names: Iterable[str],
    markers: Mapping[str, str] | None = None,
) -> Dict[str, Dict[str, str]]:
    """Status rows whose name is one of the configured lifts.

    Lifts share the status table with runs but carry no grooming flag.
    """
    wanted = {normalize(name) for name in lift_names}
    lifts: Dict[str, Dict[str, str]] = {}
    for name, run in extract_run_statuses(html, markers).items():
        if normalize(name) in wanted:
            lifts[name] = {"status": run.status.value}
    return lifts


def extract_temperature(text: str) -> Optional[int]:
    """``"Current Temp -5 °C"`` -> ``-5``"""
    return search_int(_TEMP, text)


def extract_note(text: str) -> Optional[str]:
    """``"Weather Note: Flurries easing. New Snow ..."`` -> ``"Flurries easing."``"""
    match = _NOTE.search(text or "")
    if not match:
        return None
    note = " ".join(match.group(1).split())
    return note or None


def extract_new_snow(text: str) -> NewSnow:
    """``"New Snow 2 cm Overnight 5 cm Last 24 hours 14 cm Last 7 days"``"""
    return NewSnow(
        overnight_cm=search_int(_OVERNIGHT, text),
        last24_cm=search_int(_LAST_24, text),
        last7_days_cm=search_int(_LAST_7, text),
    )


def extract_ytd_snowfall(text: str) -> List[int]:
    """Every ``"Year to Date Snowfall 212 cm"`` figure, in page order.

    The page sometimes repeats the figure; callers keep the first two as-is.
    """
    return find_all_ints(_YTD, text)


def extract_snow_base(text: str) -> SnowBase:
    """``"Snow Base 85 cm Lower Mountain 120 cm Upper Mountain"``"""
    ytd = extract_ytd_snowfall(text)
    return SnowBase(
        lower_cm=search_int(_LOWER_BASE, text),
        upper_cm=search_int(_UPPER_BASE, text),
        ytd_snowfall_cm=ytd[0] if ytd else None,
        ytd_snowfall2_cm=ytd[1] if len(ytd) > 1 else None,
    )


def extract_conditions(
    html_or_text: str,
    *,
    source: str = DEFAULT_REPORT_URL,
    lifts: Optional[Dict[str, Dict[str, str]]] = None,
    timestamp: Optional[datetime] = None,
) -> ConditionsSnapshot:
    """Parse the weather and snow panels into a :class:`ConditionsSnapshot`."""
    text = page_text(html_or_text)
    return ConditionsSnapshot(
        source=source,
        updated_at=timestamp or datetime.now(timezone.utc),
        temp_c=extract_temperature(text),
        note=extract_note(text),
        new_snow=extract_new_snow(text),
        snow_base=extract_snow_base(text),
        lifts=lifts,
    )
