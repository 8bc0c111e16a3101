"""One scrape-and-reconcile refresh cycle.

A cycle fetches the conditions page once, extracts run, lift and weather data
from the same HTML, and reconciles everything against the identifier map.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import AppConfig, LiftConfig, app_config
from .logging import get_logger
from .models import ConditionsSnapshot
from .reconcile import reconcile_lifts, reconcile_runs
from .resolver import IdentifierMap
from .scrapers import fetch_page, parse_conditions, parse_runs

logger = get_logger(__name__)


@dataclass
class Overlay:
    updated_at: datetime
    runs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    lifts: Dict[str, str] = field(default_factory=dict)
    conditions: Optional[ConditionsSnapshot] = None
    applied: int = 0
    not_found: int = 0
    missing: List[str] = field(default_factory=list)

    @property
    def status_line(self) -> str:
        return f"Updated: {self.updated_at.isoformat()} Applied: {self.applied} Not found: {self.not_found}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": self.updated_at.isoformat(),
            "applied": self.applied,
            "notFound": self.not_found,
            "missing": list(self.missing),
            "runs": self.runs,
            "lifts": self.lifts,
            "conditions": self.conditions.to_dict() if self.conditions else None,
        }


def build_overlay(
    html: str,
    identifier_map: IdentifierMap,
    *,
    lift_config: Sequence[LiftConfig] = (),
    config: AppConfig | None = None,
) -> Overlay:
    """Turn one downloaded page into the overlay the trail map applies."""
    config = config or app_config
    report = parse_runs(html, settings=config.source)
    conditions = parse_conditions(
        html,
        settings=config.source,
        lift_names=[lift.name for lift in lift_config],
    )
    result = reconcile_runs(report.runs, identifier_map)
    return Overlay(
        updated_at=report.updated_at,
        runs=result.to_dict(),
        lifts=reconcile_lifts(conditions.lifts, lift_config),
        conditions=conditions,
        applied=result.applied,
        not_found=result.not_found,
        missing=result.missing,
    )


def refresh_overlay(
    identifier_map: IdentifierMap,
    *,
    lift_config: Sequence[LiftConfig] | None = None,
    client: httpx.Client | None = None,
    config: AppConfig | None = None,
    trace_id: str | None = None,
) -> Overlay:
    config = config or app_config
    lift_config = config.lifts if lift_config is None else lift_config
    html = fetch_page(client=client, settings=config.source, trace_id=trace_id)
    overlay = build_overlay(html, identifier_map, lift_config=lift_config, config=config)
    logger.info(
        "refresh.overlay",
        trace_id=trace_id,
        applied=overlay.applied,
        not_found=overlay.not_found,
        missing=overlay.missing,
    )
    return overlay


class OverlayState:
    """Holds the last overlay that was built successfully.

    A failed refresh leaves the previous overlay in place until a later cycle
    succeeds.
    """

    def __init__(self) -> None:
        self._overlay: Optional[Overlay] = None
        self.last_error: Optional[str] = None
        self.last_attempt: Optional[datetime] = None

    @property
    def overlay(self) -> Optional[Overlay]:
        return self._overlay

    def refresh(self, identifier_map: IdentifierMap, **kwargs: Any) -> Optional[Overlay]:
        self.last_attempt = datetime.now(timezone.utc)
        try:
            overlay = refresh_overlay(identifier_map, **kwargs)
        except Exception as exc:
            self.last_error = str(exc)
            logger.error("refresh.error", trace_id=kwargs.get("trace_id"), error=str(exc))
            return None
        self._overlay = overlay
        self.last_error = None
        logger.info("refresh.complete", status=overlay.status_line)
        return overlay
