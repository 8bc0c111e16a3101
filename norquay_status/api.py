from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from norquay_status.config import app_config
from norquay_status.http_client import UpstreamFetchError
from norquay_status.logging import bind_trace, get_logger, setup_logging
from norquay_status.pipeline import OverlayState, refresh_overlay
from norquay_status.resolver import IdentifierMap
from norquay_status.scheduler import build_scheduler
from norquay_status.scrapers import fetch_conditions, fetch_runs

setup_logging(app_config.logging)
logger = get_logger(__name__)

app = FastAPI(title="Norquay Run Status API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RunPayload(_CamelModel):
    status: str
    groomed: bool = False


class RunsResponse(_CamelModel):
    updated_at: datetime = Field(alias="updatedAt")
    source: str
    runs: Dict[str, RunPayload]


class NewSnowPayload(_CamelModel):
    overnight_cm: Optional[int] = Field(None, alias="overnightCm")
    last24_cm: Optional[int] = Field(None, alias="last24Cm")
    last7_days_cm: Optional[int] = Field(None, alias="last7DaysCm")


class SnowBasePayload(_CamelModel):
    lower_cm: Optional[int] = Field(None, alias="lowerCm")
    upper_cm: Optional[int] = Field(None, alias="upperCm")
    ytd_snowfall_cm: Optional[int] = Field(None, alias="ytdSnowfallCm")
    ytd_snowfall2_cm: Optional[int] = Field(None, alias="ytdSnowfall2Cm")


class ConditionsResponse(_CamelModel):
    source: str
    temp_c: Optional[int] = Field(None, alias="tempC")
    note: Optional[str] = None
    new_snow: NewSnowPayload = Field(alias="newSnow")
    snow_base: SnowBasePayload = Field(alias="snowBase")
    lifts: Optional[Dict[str, Dict[str, str]]] = None
    updated: datetime


class OverlayRunPayload(_CamelModel):
    status: str
    groomed: bool = False
    groom_marker: str = Field(alias="groomMarker")


class OverlayResponse(_CamelModel):
    updated_at: datetime = Field(alias="updatedAt")
    applied: int
    not_found: int = Field(alias="notFound")
    missing: List[str] = Field(default_factory=list)
    runs: Dict[str, OverlayRunPayload]
    lifts: Dict[str, str]
    conditions: Optional[ConditionsResponse] = None
    display_note: Optional[str] = Field(None, alias="displayNote")


identifier_map = IdentifierMap.load(app_config.map.run_map_path, app_config.map.svg_path)
overlay_state = OverlayState()
client = None  # replaced with a stub httpx.Client in tests


def _error_response(exc: Exception, *, endpoint: str, trace_id: str) -> JSONResponse:
    if isinstance(exc, UpstreamFetchError):
        logger.warning(
            "api.upstream_error",
            trace_id=trace_id,
            endpoint=endpoint,
            status_code=exc.status_code,
            error=str(exc),
        )
        return JSONResponse(status_code=502, content={"error": str(exc), "status": exc.status_code})

    logger.error("api.error", trace_id=trace_id, endpoint=endpoint, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


def _cache_control(max_age: int) -> str:
    return f"public, max-age={max_age}"


def _serve(
    endpoint: str, build: Callable[[str], BaseModel], response: Response, max_age: int
) -> Union[BaseModel, JSONResponse]:
    trace_id = bind_trace()
    try:
        payload = build(trace_id)
    except Exception as exc:
        return _error_response(exc, endpoint=endpoint, trace_id=trace_id)
    response.headers["Cache-Control"] = _cache_control(max_age)
    return payload


@app.get("/api/norquay-runs", response_model=RunsResponse)
def get_runs(response: Response):
    def build(trace_id: str) -> RunsResponse:
        report = fetch_runs(client=client, settings=app_config.source, trace_id=trace_id)
        return RunsResponse.model_validate(report.to_dict())

    return _serve("runs", build, response, app_config.cache.runs_max_age)


@app.get("/api/conditions", response_model=ConditionsResponse, response_model_exclude_unset=True)
def get_conditions(response: Response):
    def build(trace_id: str) -> ConditionsResponse:
        snapshot = fetch_conditions(
            client=client,
            settings=app_config.source,
            lift_names=[lift.name for lift in app_config.lifts],
            trace_id=trace_id,
        )
        return ConditionsResponse.model_validate(snapshot.to_dict())

    return _serve("conditions", build, response, app_config.cache.conditions_max_age)


@app.get("/api/overlay", response_model=OverlayResponse)
def get_overlay(response: Response):
    def build(trace_id: str) -> OverlayResponse:
        overlay = overlay_state.overlay
        if overlay is None:
            overlay = refresh_overlay(identifier_map, client=client, config=app_config, trace_id=trace_id)
        payload = OverlayResponse.model_validate(overlay.to_dict())
        if overlay.conditions is not None:
            payload.display_note = overlay.conditions.display_note(app_config.map.note_max_length)
        return payload

    return _serve("overlay", build, response, app_config.cache.runs_max_age)


def refresh_job() -> None:
    overlay_state.refresh(identifier_map, client=client, config=app_config, trace_id=bind_trace())


_scheduler = build_scheduler(refresh_job, app_config.scheduler)


@app.on_event("startup")
async def _start_scheduler() -> None:
    if _scheduler and not _scheduler.running:
        logger.info("scheduler.start")
        _scheduler.start()


@app.on_event("shutdown")
async def _stop_scheduler() -> None:
    if _scheduler and _scheduler.running:
        logger.info("scheduler.stop")
        _scheduler.shutdown()
