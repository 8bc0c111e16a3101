import json

from norquay_status.runmap import build_run_map, harvest_run_names, index_svg_ids, main, write_run_map
from norquay_status.scrapers import norquay

SVG = """<svg xmlns="http://www.w3.org/2000/svg">
  <path id="valley-of-10" d="M0 0"/>
  <path id="wiegeles" d="M1 1"/>
  <path id="lone_pine" d="M2 2"/>
  <path id="Lone-Pine" d="M3 3"/>
</svg>"""


def test_harvest_skips_rows_without_name(conditions_html):
    names = harvest_run_names(conditions_html)

    assert names == ["Valley of 10", "Wiegele’s", "Lone Pine", "North American Chair", "Mystic Chair"]


def test_first_svg_id_wins_per_key():
    assert index_svg_ids(["lone_pine", "Lone-Pine"]) == {"lone pine": "lone_pine"}


def test_apostrophe_insensitive_fallback():
    run_map, missing = build_run_map(
        ["Valley of 10", "Wiegele’s", "Memorial Bowl"], ["valley-of-10", "wiegeles"]
    )

    assert run_map == {"valley of 10": "valley-of-10", "wiegele's": "wiegeles"}
    assert missing == ["Memorial Bowl"]


def test_write_run_map_keeps_unicode(tmp_path):
    path = write_run_map(tmp_path / "public" / "runMap.json", {"café run": "cafe-run"})

    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert '"café run": "cafe-run"' in text


def test_main_from_saved_page(tmp_path, conditions_html, capsys):
    html_path = tmp_path / "conditions.html"
    html_path.write_text(conditions_html, encoding="utf-8")
    svg_path = tmp_path / "map.svg"
    svg_path.write_text(SVG, encoding="utf-8")
    out_path = tmp_path / "runMap.json"

    code = main(["--html", str(html_path), "--svg", str(svg_path), "--out", str(out_path)])

    assert code == 0
    assert json.loads(out_path.read_text(encoding="utf-8")) == {
        "valley of 10": "valley-of-10",
        "wiegele's": "wiegeles",
        "lone pine": "lone_pine",
    }
    output = capsys.readouterr().out
    assert "Wrote 3 mappings" in output
    assert "North American Chair" in output


def test_main_requires_svg(capsys):
    assert main(["--svg", ""]) == 2
    assert "--svg" in capsys.readouterr().err


def test_custom_markers_match_the_runs_endpoint():
    markers = {"open": "open-now|is-open", "closed": r"shut\b"}
    html = (
        '<tr><td class="trail_name"><div class="trail_open_status_icon">'
        '<i class="bi open-now"></i></div><div>Gun Run</div></td></tr>'
        '<tr><td class="trail_name"><div class="trail_open_status_icon">'
        '<i class="bi shut"></i></div><div>Excalibur</div></td></tr>'
        '<tr><td class="trail_name"><div class="trail_open_status_icon">'
        '<i class="bi open-icon"></i></div><div>Old Marker</div></td></tr>'
    )

    runtime = norquay.extract_run_statuses(html, markers)

    assert list(runtime) == ["Gun Run", "Excalibur"]
    assert harvest_run_names(html, markers) == list(runtime)
