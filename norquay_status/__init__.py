"""Norquay run, lift and snow conditions scraper."""

from .models import ConditionsSnapshot, RunStatus, Status
from .normalization import identify, normalize
from .reconcile import reconcile_lifts, reconcile_runs
from .resolver import IdentifierMap, resolve
from .scrapers import fetch_conditions, fetch_runs

__all__ = [
    "ConditionsSnapshot",
    "IdentifierMap",
    "RunStatus",
    "Status",
    "fetch_conditions",
    "fetch_runs",
    "identify",
    "normalize",
    "reconcile_lifts",
    "reconcile_runs",
    "resolve",
]
