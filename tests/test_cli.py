import json

import pytest

import seekarea.__main__ as cli
from seekarea.script import ScriptError, build_session, run_script


SCRIPT = {
    "label": "Test square",
    "area": {"type": "Polygon", "coordinates": [[[-1, -1], [1, -1], [1, 1], [-1, 1], [-1, -1]]]},
    "config": {"matching_strategy": "voronoi"},
    "pois": {
        "hospital": [
            {"id": 1, "lon": -0.5, "lat": 0.0, "name": "West"},
            {"id": 2, "lon": 0.5, "lat": 0.0, "name": "East"},
        ]
    },
    "regions": [
        {"bbox": [-2, -2, 2, 0], "address": {"state": "West"}},
        {"bbox": [-2, 0, 2, 2], "address": {"state": "East"}},
    ],
    "steps": [
        {"op": "seeker", "lon": -0.4, "lat": 0.1},
        {"op": "radar", "radius_miles": 80, "hit": True},
        {"op": "matching", "kind": "hospital", "answer": True},
        {"op": "region", "level": "state", "answer": True},
        {"op": "undo"},
        {"op": "redo"},
        {"op": "measuring", "kind": "museum", "closer": True},
    ],
}


def test_main_replays_script_and_writes_geojson(tmp_path, capsys):
    script_path = tmp_path / "game.json"
    script_path.write_text(json.dumps(SCRIPT), encoding="utf-8")
    output = tmp_path / "out.geojson"

    cli.main([str(script_path), "--output", str(output), "--log-level", "WARNING"])

    printed = capsys.readouterr().out
    assert "1. Area: Test square" in printed
    assert "Radar: Hit 80 mi" in printed
    assert "Matching hospital: Yes" in printed
    assert "Refused:" in printed
    assert "State: active" in printed
    data = json.loads(output.read_text(encoding="utf-8"))
    assert [f["properties"]["role"] for f in data["features"]] == ["candidate", "seeker"]


def test_main_exits_on_bad_script(tmp_path):
    script_path = tmp_path / "bad.json"
    script_path.write_text(json.dumps({"steps": [{"op": "dance"}]}), encoding="utf-8")
    with pytest.raises(SystemExit):
        cli.main([str(script_path)])


def test_run_script_results_follow_steps():
    session = build_session(SCRIPT)
    results = run_script(session, SCRIPT["steps"])

    assert [r.ok for r in results] == [True, True, True, True, True, True, False]
    assert len(session.history) == 4
    assert session.candidate.bounds[2] <= 0.0 + 1e-9


def test_build_session_rejects_unknown_config():
    with pytest.raises(ScriptError):
        build_session({"config": {"warp_speed": 9}})


def test_run_script_reports_missing_fields():
    session = build_session(SCRIPT)
    with pytest.raises(ScriptError, match="missing"):
        run_script(session, [{"op": "radar", "hit": True}])


def test_run_script_reports_malformed_fields():
    session = build_session(SCRIPT)
    with pytest.raises(ScriptError, match=r"step 0 \(radar\) is malformed"):
        run_script(session, [{"op": "radar", "radius_miles": "far", "hit": True}])


def test_main_exits_on_malformed_step(tmp_path, caplog):
    script = dict(SCRIPT, steps=[{"op": "seeker", "lon": "east", "lat": 0.0}])
    script_path = tmp_path / "malformed.json"
    script_path.write_text(json.dumps(script), encoding="utf-8")
    with pytest.raises(SystemExit):
        cli.main([str(script_path)])
    assert "malformed" in caplog.text


def test_build_session_from_country_file(tmp_path):
    countries = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"iso_a2": "SQ", "name": "Squareland"},
                "geometry": SCRIPT["area"],
            }
        ],
    }
    (tmp_path / "countries.geojson").write_text(json.dumps(countries), encoding="utf-8")

    session = build_session({"countries": "countries.geojson", "country": "sq"}, base_dir=tmp_path)

    assert session.selected_iso == "SQ"
    assert session.state == "active"
