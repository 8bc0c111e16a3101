from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "defaults.yaml"
load_dotenv()


def _bool_from_env(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _merge_dicts(base: Dict, overrides: Mapping) -> Dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


@dataclass
class SchedulerConfig:
    cron: str = "*/20 * * * *"
    enabled: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class SourceConfig:
    conditions_url: str = "https://banffnorquay.com/winter/conditions/"
    user_agent: str = "Mozilla/5.0 (compatible; NorquayStatus/1.0)"
    timeout: float = 20.0
    markers: Dict[str, str] = field(default_factory=dict)


@dataclass
class CacheConfig:
    """Max-age advisories sent with each endpoint's ``Cache-Control`` header."""

    runs_max_age: int = 60
    conditions_max_age: int = 600


@dataclass
class MapConfig:
    run_map_path: str = "public/runMap.json"
    svg_path: Optional[str] = "public/norquay-map.svg"
    note_max_length: int = 260


@dataclass
class LiftConfig:
    name: str
    letter: str
    badge_id: str
    path_id: str


@dataclass
class AppConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    map: MapConfig = field(default_factory=MapConfig)
    lifts: List[LiftConfig] = field(default_factory=list)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(*, config_path: str | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = dict(os.environ if env is None else env)
    data = _load_yaml(_DEFAULT_CONFIG_PATH)

    explicit_path = config_path or env.get("NORQUAY_CONFIG_PATH")
    if explicit_path:
        data = _merge_dicts(data, _load_yaml(Path(explicit_path)))

    scheduler_data = data.get("scheduler", {})
    cron_override = env.get("NORQUAY_SCHEDULER_CRON")
    if cron_override:
        scheduler_data["cron"] = cron_override
    enabled_override = _bool_from_env(env.get("NORQUAY_SCHEDULER_ENABLED"))
    if enabled_override is not None:
        scheduler_data["enabled"] = enabled_override

    logging_data = data.get("logging", {})
    level_override = env.get("NORQUAY_LOG_LEVEL")
    if level_override:
        logging_data["level"] = level_override
    json_override = _bool_from_env(env.get("NORQUAY_LOG_JSON"))
    if json_override is not None:
        logging_data["json"] = json_override

    source_data = data.get("source", {})
    url_override = env.get("NORQUAY_SOURCE_URL")
    if url_override:
        source_data["conditions_url"] = url_override

    map_data = data.get("map", {})
    run_map_override = env.get("NORQUAY_RUN_MAP_PATH")
    if run_map_override:
        map_data["run_map_path"] = run_map_override
    svg_override = env.get("NORQUAY_SVG_PATH")
    if svg_override is not None:
        # An empty value disables SVG id harvesting.
        map_data["svg_path"] = svg_override or None

    lifts = [LiftConfig(**lift) for lift in data.get("lifts", [])]

    return AppConfig(
        source=SourceConfig(**source_data) if source_data else SourceConfig(),
        cache=CacheConfig(**data["cache"]) if data.get("cache") else CacheConfig(),
        map=MapConfig(**map_data) if map_data else MapConfig(),
        lifts=lifts,
        scheduler=SchedulerConfig(**scheduler_data) if scheduler_data else SchedulerConfig(),
        logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
    )


app_config = load_config()
