from __future__ import annotations

import json
import re
from pathlib import Path
from types import MappingProxyType
from typing import AbstractSet, Iterable, List, Mapping, Optional

from .logging import get_logger
from .normalization import identify, normalize

logger = get_logger(__name__)

_SVG_ID = re.compile(r'\bid="([^"]+)"')


def extract_svg_ids(svg_text: str) -> List[str]:
    """Every distinct ``id="..."`` in an SVG document, in first-seen order."""
    seen: dict = {}
    for match in _SVG_ID.finditer(svg_text or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


class IdentifierMap:
    """Read-only lookup from a name key to a trail map element id.

    ``identifiers`` is the set of element ids that exist in the map asset.
    When it is not supplied the mapped ids themselves are the known set.
    """

    def __init__(
        self,
        entries: Optional[Mapping[str, str]] = None,
        identifiers: Optional[Iterable[str]] = None,
    ) -> None:
        normalized = {}
        for key, value in (entries or {}).items():
            value = str(value or "").strip()
            if value:
                normalized[normalize(key)] = value
        self._entries = MappingProxyType(normalized)
        if identifiers is not None:
            self._identifiers: AbstractSet[str] = frozenset(identifiers)
        else:
            self._identifiers = frozenset(normalized.values())

    @property
    def identifiers(self) -> AbstractSet[str]:
        return self._identifiers

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identifiers

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def load(cls, map_path: Path | str, svg_path: Path | str | None = None) -> "IdentifierMap":
        """Load the offline-built JSON map and, optionally, the SVG's ids.

        Missing files are logged and treated as empty so the service can still
        serve raw run statuses.
        """
        map_path = Path(map_path)
        entries: Mapping[str, str] = {}
        if map_path.exists():
            entries = json.loads(map_path.read_text(encoding="utf-8")) or {}
        else:
            logger.warning("identifier_map.missing", path=str(map_path))

        identifiers = None
        if svg_path:
            svg_path = Path(svg_path)
            if svg_path.exists():
                identifiers = extract_svg_ids(svg_path.read_text(encoding="utf-8"))
            else:
                logger.warning("identifier_map.svg_missing", path=str(svg_path))

        identifier_map = cls(entries, identifiers)
        logger.info(
            "identifier_map.loaded",
            entries=len(identifier_map),
            identifiers=len(identifier_map.identifiers),
        )
        return identifier_map


def candidate_identifiers(name: str, identifier_map: IdentifierMap) -> List[str]:
    """Ordered element ids to try for a scraped name, without duplicates."""
    key = normalize(name)
    mapped = identifier_map.get(key)
    candidates = [
        mapped,
        identify(mapped) if mapped else None,
        identify(name),
        re.sub(r"\s+", "-", key),
        re.sub(r"\s+", "_", key),
    ]
    ordered: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in ordered:
            ordered.append(candidate)
    return ordered


def resolve(name: str, identifier_map: IdentifierMap) -> Optional[str]:
    """First candidate id that exists in the map asset, or None."""
    for candidate in candidate_identifiers(name, identifier_map):
        if candidate in identifier_map:
            return candidate
    return None
