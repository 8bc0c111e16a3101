import json
from pathlib import Path

from norquay_status.resolver import IdentifierMap, candidate_identifiers, extract_svg_ids, resolve

SVG = """<svg xmlns="http://www.w3.org/2000/svg">
  <g id="runs">
    <path id="valley-of-10" d="M0 0"/>
    <path id="Wiegeles" d="M1 1"/>
    <path id="lone_pine" d="M2 2"/>
    <path id="valley-of-10" d="M3 3"/>
  </g>
</svg>"""


def test_extract_svg_ids_dedupes_in_order():
    assert extract_svg_ids(SVG) == ["runs", "valley-of-10", "Wiegeles", "lone_pine"]


def test_exact_key_match_wins():
    identifier_map = IdentifierMap({"Wiegele’s": "Wiegeles"}, extract_svg_ids(SVG))

    assert resolve("Wiegele's", identifier_map) == "Wiegeles"


def test_slug_fallbacks():
    identifier_map = IdentifierMap({}, extract_svg_ids(SVG))

    assert resolve("Valley of 10", identifier_map) == "valley-of-10"
    assert resolve("Lone Pine", identifier_map) == "lone_pine"


def test_mapped_id_in_slug_form():
    identifier_map = IdentifierMap({"upper gun run": "Upper Gun Run"}, ["upper-gun-run"])

    assert candidate_identifiers("Upper Gun Run", identifier_map)[:2] == ["Upper Gun Run", "upper-gun-run"]
    assert resolve("Upper Gun Run", identifier_map) == "upper-gun-run"


def test_unmatched_name_returns_none():
    identifier_map = IdentifierMap({"valley of 10": "valley-of-10"})

    assert resolve("Memorial Bowl", identifier_map) is None
    assert resolve("", identifier_map) is None


def test_known_ids_default_to_mapped_values():
    identifier_map = IdentifierMap({"valley of 10": "valley-of-10", "blank": "  "})

    assert identifier_map.identifiers == {"valley-of-10"}
    assert len(identifier_map) == 1


def test_load_reads_map_and_svg(tmp_path: Path):
    map_path = tmp_path / "runMap.json"
    map_path.write_text(json.dumps({"Lone-Pine": " lone_pine "}, indent=2))
    svg_path = tmp_path / "map.svg"
    svg_path.write_text(SVG)

    identifier_map = IdentifierMap.load(map_path, svg_path)

    assert identifier_map.get("lone pine") == "lone_pine"
    assert "valley-of-10" in identifier_map
    assert resolve("Valley of 10", identifier_map) == "valley-of-10"


def test_load_missing_files_gives_empty_map(tmp_path: Path):
    identifier_map = IdentifierMap.load(tmp_path / "nope.json", tmp_path / "nope.svg")

    assert len(identifier_map) == 0
    assert resolve("Valley of 10", identifier_map) is None
