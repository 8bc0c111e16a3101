"""Offline builder for ``runMap.json``.

Fetches the current run names from the conditions page, harvests element ids
from the trail map SVG and writes the name-key -> element-id mapping the
resolver loads at run time::

    norquay-runmap --svg public/norquay-map.svg --out public/runMap.json
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import app_config
from .logging import get_logger
from .normalization import loose_key, normalize
from .resolver import extract_svg_ids
from .scrapers import fetch_page, norquay

logger = get_logger(__name__)


def harvest_run_names(html: str, markers: Mapping[str, str] | None = None) -> List[str]:
    """Run names from rows whose status icon is open or closed.

    Uses the same row rules as the runs endpoint, so every run served at
    request time is a candidate for the map.
    """
    return [name for name in norquay.extract_run_statuses(html, markers) if normalize(name)]


def index_svg_ids(svg_ids: Iterable[str]) -> Dict[str, str]:
    """Name key -> element id; the first id seen wins on a key collision."""
    by_key: Dict[str, str] = {}
    for svg_id in svg_ids:
        key = normalize(svg_id)
        if key and key not in by_key:
            by_key[key] = svg_id
    return by_key


def build_run_map(run_names: Iterable[str], svg_ids: Iterable[str]) -> Tuple[Dict[str, str], List[str]]:
    """Match run names to SVG ids.

    An exact key match is tried first, then a match that ignores apostrophes
    (``Wiegele's`` against ``wiegeles``). Returns the mapping and the names
    that matched nothing.
    """
    by_key = index_svg_ids(svg_ids)
    by_loose_key: Dict[str, str] = {}
    for key, svg_id in by_key.items():
        by_loose_key.setdefault(key.replace("'", ""), svg_id)

    run_map: Dict[str, str] = {}
    missing: List[str] = []
    for name in run_names:
        key = normalize(name)
        if key in by_key:
            run_map[key] = by_key[key]
            continue
        loose = loose_key(name)
        if loose in by_loose_key:
            run_map[key] = by_loose_key[loose]
            continue
        missing.append(name)
    return run_map, missing


def write_run_map(path: Path | str, run_map: Mapping[str, str]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(run_map, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Regenerate the run name -> SVG id map.")
    parser.add_argument("--svg", default=app_config.map.svg_path, help="trail map SVG to harvest ids from")
    parser.add_argument("--out", default=app_config.map.run_map_path, help="where to write runMap.json")
    parser.add_argument("--url", default=app_config.source.conditions_url, help="conditions page URL")
    parser.add_argument("--html", help="read the conditions page from a saved file instead of fetching")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if not args.svg:
        print("No SVG path given (use --svg).", file=sys.stderr)
        return 2

    svg_ids = extract_svg_ids(Path(args.svg).read_text(encoding="utf-8"))
    if args.html:
        html = Path(args.html).read_text(encoding="utf-8")
    else:
        html = fetch_page(settings=replace(app_config.source, conditions_url=args.url))

    run_map, missing = build_run_map(harvest_run_names(html, app_config.source.markers), svg_ids)
    out = write_run_map(args.out, run_map)
    logger.info("runmap.written", path=str(out), mappings=len(run_map), missing=len(missing))

    print(f"Wrote {len(run_map)} mappings to {out}")
    if missing:
        print("\nMissing (need SVG IDs that match these names):")
        print("\n".join(missing))
    return 0


if __name__ == "__main__":
    sys.exit(main())
