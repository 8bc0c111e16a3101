from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from .config import LiftConfig
from .models import RunStatus, Status
from .normalization import normalize
from .resolver import IdentifierMap, resolve

LIFT_RUNNING = "running"
LIFT_STOPPED = "stopped"

_OPEN_WORDS = {"open", "running", "1", "yes"}


@dataclass
class ReconciledRun:
    identifier: str
    status: Status
    groomed: bool = False

    @property
    def groom_marker_id(self) -> str:
        return f"grm-{self.identifier}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "groomed": self.groomed,
            "groomMarker": self.groom_marker_id,
        }


@dataclass
class ReconcileResult:
    """Final ``{identifier -> state}`` view handed to the map renderer."""

    states: Dict[str, ReconciledRun] = field(default_factory=dict)
    applied: int = 0
    not_found: int = 0
    missing: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {identifier: run.to_dict() for identifier, run in self.states.items()}


def reconcile_runs(runs: Mapping[str, Any], identifier_map: IdentifierMap) -> ReconcileResult:
    """Key each scraped run by the map element it should colour.

    ``runs`` values may be :class:`RunStatus` objects or the
    ``{"status": ..., "groomed": ...}`` dicts served by the runs endpoint.
    Anything other than open/closed is shown as unknown. Names that resolve to
    no element are counted in ``not_found`` and do not affect other runs.
    """
    result = ReconcileResult()
    for name, data in runs.items():
        if isinstance(data, RunStatus):
            status, groomed = data.status, data.groomed
        elif isinstance(data, Mapping):
            status, groomed = Status.coerce(data.get("status")), bool(data.get("groomed"))
        else:
            status, groomed = Status.coerce(data), False

        identifier = resolve(name, identifier_map)
        if identifier is None:
            result.not_found += 1
            result.missing.append(name)
            continue

        result.states[identifier] = ReconciledRun(identifier=identifier, status=status, groomed=groomed)
        result.applied += 1
    return result


def lift_is_open(raw: Any) -> bool:
    """Accepts ``True``, ``"open"``, ``"running"``, ``"1"``, ``"yes"``,
    ``{"status": "open"}`` and ``{"open": True}``."""
    if raw is True:
        return True
    if isinstance(raw, Mapping):
        return raw.get("status") == "open" or raw.get("open") is True
    if raw is None or isinstance(raw, bool):
        return False
    return str(raw).strip().lower() in _OPEN_WORDS


def reconcile_lifts(lifts: Mapping[str, Any] | None, lift_config: Sequence[LiftConfig]) -> Dict[str, str]:
    """Badge and lift-line element states for every configured lift.

    A configured lift missing from ``lifts`` is shown as stopped.
    """
    by_key = {normalize(name): value for name, value in (lifts or {}).items()}
    states: Dict[str, str] = {}
    for lift in lift_config:
        state = LIFT_RUNNING if lift_is_open(by_key.get(normalize(lift.name))) else LIFT_STOPPED
        states[lift.badge_id] = state
        states[lift.path_id] = state
    return states
