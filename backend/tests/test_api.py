from __future__ import annotations

import os

from fastapi.testclient import TestClient

from backend.app.core.config import get_settings
from backend.app.main import create_app


def _client() -> TestClient:
    os.environ.pop("BLOCKSCORE_INDENT_UNIT", None)
    get_settings.cache_clear()
    app = create_app()
    return TestClient(app)


def _scenario_graph() -> dict:
    return {
        "nodes": [
            {"id": "tempo", "kind": "set_tempo", "inputs": {"TEMPO": {"literal": 120}}, "next": "play"},
            {
                "id": "play",
                "kind": "play_synth",
                "inputs": {"NOTES": {"node_id": "chord"}, "BEATS": {"literal": 2}},
                "next": "stop",
            },
            {"id": "chord", "kind": "chord", "inputs": {"Note1": {"literal": "C4"}, "Note2": {"literal": "E4"}}},
            {"id": "stop", "kind": "stop_sound"},
        ]
    }


def test_health_endpoint() -> None:
    with _client() as client:
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["block_kinds"] > 0


def test_block_catalogue_endpoints() -> None:
    with _client() as client:
        listed = client.get("/api/blocks", params={"category": "motif"})
        assert listed.status_code == 200
        assert [item["kind"] for item in listed.json()] == ["defmotif"]

        categories = client.get("/api/blocks/categories")
        assert categories.status_code == 200
        assert categories.json()["motif"] == 1

        single = client.get("/api/blocks/with_fx")
        assert single.status_code == 200
        assert single.json()["scope"] == "music"

        missing = client.get("/api/blocks/kazoo")
        assert missing.status_code == 404


def test_compile_endpoint_returns_program() -> None:
    with _client() as client:
        response = client.post("/api/programs/compile", json={"graph": _scenario_graph(), "root_id": "tempo"})
        assert response.status_code == 200
        body = response.json()
        assert body["program"] == 'set_tempo(120)\nplay_synth(["C4","E4"], 2)\nstop_sound()\n'
        assert body["macros"] == []
        assert body["diagnostics"] == []


def test_compile_endpoint_reports_hoisted_macros() -> None:
    graph = {
        "nodes": [
            {
                "id": "motif",
                "kind": "defmotif",
                "inputs": {"NAME": {"literal": "riff"}},
                "statements": {"DO": "drum"},
                "next": "loop",
            },
            {"id": "drum", "kind": "trigger_drum", "fields": {"SAMPLE": ":drum_bass_soft", "STYLE": "soft"}},
            {"id": "loop", "kind": "loop", "inputs": {"MOTIF": {"literal": "riff"}}},
        ]
    }
    with _client() as client:
        response = client.post("/api/programs/compile", json={"graph": graph})
        assert response.status_code == 200
        body = response.json()
        assert body["macros"] == ['defmotif "riff" do\n  trigger_sample(:drum_bass_soft)\nend\n']
        assert body["body"] == 'loop("riff")\n'
        assert body["program"] == body["macros"][0] + "\n" + body["body"]


def test_compile_endpoint_maps_fatal_errors_to_422() -> None:
    graph = {"nodes": [{"id": "odd", "kind": "theremin"}]}
    with _client() as client:
        response = client.post("/api/programs/compile", json={"graph": graph, "root_id": "odd"})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "UnknownKind"
        assert detail["node_id"] == "odd"
        assert detail["kind"] == "theremin"
        assert "theremin" in detail["diagnostics"][0]


def test_compile_endpoint_validates_graph_shape() -> None:
    graph = {"nodes": [{"id": "a", "kind": "stop_sound"}, {"id": "a", "kind": "stop_sound"}]}
    with _client() as client:
        response = client.post("/api/programs/compile", json={"graph": graph})
        assert response.status_code == 422

        both = {"nodes": [{"id": "v", "kind": "set_volume", "inputs": {"VOLUME": {"literal": 1, "node_id": "x"}}}]}
        response = client.post("/api/programs/compile", json={"graph": both})
        assert response.status_code == 422
