"""Tests for the Flask JSON API."""

import csv
import io
import random

import pytest

from pelada.services import AiBalancingClient, ServiceFactory
from pelada.ui.web_app import WebAppState, apply_settings_update, create_app
from pelada.models import Settings
from pelada.services.errors import SettingsValidationError


@pytest.fixture
def state(tmp_path):
    factory = ServiceFactory(
        data_dir=str(tmp_path / "data"),
        rng=random.Random(4),
        ai_client=AiBalancingClient(api_key="", model="m", timeout=1),
    )
    return WebAppState(factory)


@pytest.fixture
def client(state):
    app = create_app(state)
    app.config["TESTING"] = True
    return app.test_client()


def register(client, name, positions=("Midfielder",), membership="Monthly"):
    response = client.post("/api/players", json={"name": name, "positions": list(positions), "membership": membership})
    assert response.status_code == 201
    return response.get_json()["player"]["id"]


def test_player_crud(client):
    player_id = register(client, "Ana", ["Defender"])

    players = client.get("/api/players").get_json()["players"]
    assert [p["name"] for p in players] == ["Ana"]

    response = client.put(f"/api/players/{player_id}", json={"name": "Ana Clara"})
    assert response.get_json()["player"]["name"] == "Ana Clara"

    assert client.delete(f"/api/players/{player_id}").status_code == 200
    assert client.delete(f"/api/players/{player_id}").status_code == 404
    assert client.put("/api/players/ghost", json={"name": "X"}).status_code == 404


def test_invalid_player_is_rejected(client):
    response = client.post("/api/players", json={"name": "", "positions": []})
    assert response.status_code == 400
    assert response.get_json()["success"] is False

    register(client, "Ana")
    assert client.post("/api/players", json={"name": "ANA", "positions": ["Forward"]}).status_code == 400


def test_full_session_flow(client, state):
    ids = [register(client, f"Player {i}") for i in range(4)]
    for player_id in ids:
        assert client.post(f"/api/attendance/{player_id}").get_json()["present"] is True

    body = client.get("/api/state").get_json()
    assert body["phase"] == "no_match"
    assert body["can_start"] is True
    assert body["ai_available"] is False
    assert [p["id"] for p in body["present"]] == ids

    started = client.post("/api/match/start", json={}).get_json()
    assert started["used_ai"] is False
    assert client.post("/api/match/start", json={}).status_code == 409

    assert client.post("/api/match/score", json={"team": "a", "delta": 1}).status_code == 200
    assert client.post("/api/match/score", json={"team": "C", "delta": 1}).status_code == 400

    plans = client.get("/api/match/suggestions").get_json()["plans"]
    assert set(plans) == {"A", "B"}
    assert client.post("/api/match/halftime").status_code == 200

    finished = client.post("/api/match/finish").get_json()
    assert finished["result"]["winner"] == "A"

    body = client.get("/api/state").get_json()
    assert body["phase"] == "no_match"
    assert body["present"] == []
    assert body["current_match"] is None

    ranking = client.get("/api/ranking").get_json()["ranking"]
    assert ranking[0]["player"]["stats"]["points"] == 3

    report = client.get(f"/api/players/{ranking[0]['player']['id']}/report").get_json()
    assert report["win_rate"] == 100
    assert report["matches"][0]["score"] == "1 x 0"


def test_match_actions_without_match_conflict(client):
    assert client.post("/api/match/start", json={}).status_code == 409
    assert client.post("/api/match/halftime").status_code == 409
    assert client.post("/api/match/finish").status_code == 409
    assert client.post("/api/match/reset").status_code == 409
    assert client.get("/api/match/suggestions").status_code == 409
    assert client.post("/api/match/swap", json={"starter_id": "a", "reserve_id": "b"}).status_code == 409


def test_ai_start_falls_back_with_warning(client):
    for i in range(2):
        client.post(f"/api/attendance/{register(client, f'Player {i}')}")

    body = client.post("/api/match/start", json={"use_ai": True}).get_json()

    assert body["success"] is True
    assert body["used_ai"] is False
    assert body["warning"]


def test_roster_edits(client, state):
    for i in range(2):
        client.post(f"/api/attendance/{register(client, f'Player {i}')}")
    client.post("/api/match/start", json={})
    late = register(client, "Late")

    assert client.post("/api/match/roster", json={"player_id": late, "team": "B"}).status_code == 200
    assert state.match_session.current.team_of(late).value == "B"
    assert client.post("/api/match/roster", json={"player_id": late}).status_code == 409

    starters = state.match_session.current.starters
    assert client.delete(f"/api/match/roster/{starters[0]}").status_code == 409


def test_settings_update(client):
    response = client.put("/api/settings", json={"players_per_team": 7})
    assert response.get_json()["settings"]["tactical_schema"] == "1-2-2-1"

    response = client.put("/api/settings", json={"players_per_team": 12})
    assert response.status_code == 400
    assert client.get("/api/settings").get_json()["settings"]["players_per_team"] == 7


def test_apply_settings_update_keeps_explicit_schema():
    settings = apply_settings_update(Settings(), {"players_per_team": 9, "tactical_schema": "3-0-3-2", "theme": "dark"})
    assert (settings.players_per_team, settings.tactical_schema, settings.theme) == (9, "3-0-3-2", "dark")

    with pytest.raises(SettingsValidationError):
        apply_settings_update(Settings(), {"players_per_team": "many"})


def test_export_and_import(client):
    register(client, "Ana", ["Goalkeeper"])
    exported = client.get("/api/export/json").get_data(as_text=True)

    rows = list(csv.reader(io.StringIO(client.get("/api/export/players.csv").get_data(as_text=True))))
    assert rows[1][0] == "Ana"
    assert client.get("/api/export/history.csv").status_code == 200

    assert client.post("/api/reset").status_code == 200
    assert client.get("/api/players").get_json()["players"] == []

    assert client.post("/api/import", data=exported, content_type="application/json").status_code == 200
    assert [p["name"] for p in client.get("/api/players").get_json()["players"]] == ["Ana"]

    response = client.post("/api/import", data="{}", content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Version not found"


def test_demo_roster(client):
    assert client.post("/api/demo").get_json()["players"] == 30
    assert len(client.get("/api/state").get_json()["absent"]) == 30


def test_auto_balance_must_be_boolean(client):
    assert apply_settings_update(Settings(), {"auto_balance": False}).auto_balance is False

    with pytest.raises(SettingsValidationError):
        apply_settings_update(Settings(), {"auto_balance": "false"})

    assert client.put("/api/settings", json={"auto_balance": "false"}).status_code == 400
    assert client.put("/api/settings", json={"auto_balance": True}).get_json()["settings"]["auto_balance"] is True
