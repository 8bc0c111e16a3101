from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

import httpx

from norquay_status.config import SourceConfig, app_config
from norquay_status.logging import get_logger

from ..http_client import HttpFetcher
from ..models import ConditionsSnapshot, RunsReport
from . import norquay

logger = get_logger(__name__)


def fetch_page(
    *,
    client: httpx.Client | None = None,
    settings: SourceConfig | None = None,
    trace_id: str | None = None,
) -> str:
    """Download the conditions page once. Raises ``UpstreamFetchError``."""
    settings = settings or app_config.source
    trace_id = trace_id or uuid.uuid4().hex
    url = settings.conditions_url or norquay.DEFAULT_REPORT_URL
    logger.info("scrape.request", trace_id=trace_id, resort_id=norquay.RESORT_ID, url=url)
    try:
        with HttpFetcher(client=client, settings=settings) as fetcher:
            html = fetcher.fetch_text(url, trace_id=trace_id)
    except Exception as exc:
        logger.error(
            "scrape.failure",
            trace_id=trace_id,
            resort_id=norquay.RESORT_ID,
            url=url,
            error=str(exc),
        )
        raise
    logger.info("scrape.success", trace_id=trace_id, resort_id=norquay.RESORT_ID, url=url, size=len(html))
    return html


def parse_runs(html: str, *, settings: SourceConfig | None = None) -> RunsReport:
    settings = settings or app_config.source
    runs = norquay.extract_run_statuses(html, settings.markers)
    return RunsReport(
        source=settings.conditions_url,
        updated_at=datetime.now(timezone.utc),
        runs=runs,
    )


def parse_conditions(
    html: str,
    *,
    settings: SourceConfig | None = None,
    lift_names: Optional[Iterable[str]] = None,
) -> ConditionsSnapshot:
    settings = settings or app_config.source
    lifts = None
    if lift_names:
        lifts = norquay.extract_lift_statuses(html, lift_names, settings.markers)
    return norquay.extract_conditions(html, source=settings.conditions_url, lifts=lifts)


def fetch_runs(
    *,
    client: httpx.Client | None = None,
    settings: SourceConfig | None = None,
    trace_id: str | None = None,
) -> RunsReport:
    html = fetch_page(client=client, settings=settings, trace_id=trace_id)
    report = parse_runs(html, settings=settings)
    logger.info("scrape.runs", trace_id=trace_id, count=len(report.runs))
    return report


def fetch_conditions(
    *,
    client: httpx.Client | None = None,
    settings: SourceConfig | None = None,
    lift_names: Optional[Iterable[str]] = None,
    trace_id: str | None = None,
) -> ConditionsSnapshot:
    html = fetch_page(client=client, settings=settings, trace_id=trace_id)
    return parse_conditions(html, settings=settings, lift_names=lift_names)
