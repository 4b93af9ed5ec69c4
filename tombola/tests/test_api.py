"""
Tests for the REST API.

Tests:
- Game lifecycle over HTTP
- Error code and status mapping
- Queries and config endpoints
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..config import Settings
from .conftest import ADMIN

ADMIN_HEADERS = {"X-Caller": ADMIN}


class TestGameEndpoints:
    """Tests for game transitions over HTTP."""

    @pytest.fixture
    def client(self, orchestrator):
        return TestClient(create_app(orchestrator=orchestrator, settings=Settings()))

    @pytest.fixture
    def game_id(self, client):
        response = client.post("/api/v1/games", json={"now": 0}, headers=ADMIN_HEADERS)
        return response.json()["game_id"]

    def test_create_game(self, client):
        response = client.post("/api/v1/games", json={"now": 0}, headers=ADMIN_HEADERS)

        assert response.status_code == 201
        body = response.json()
        assert body["game_id"] == 1
        assert body["phase"] == "joining"
        assert body["pot"] == 0
        assert body["players"] == []

    def test_create_without_admin(self, client):
        response = client.post("/api/v1/games", json={"now": 0})

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_ADMINISTRATOR"

    def test_create_without_body_uses_server_clock(self, client):
        response = client.post("/api/v1/games", headers=ADMIN_HEADERS)
        assert response.status_code == 201
        assert response.json()["created_at"] > 0

    def test_join(self, client, game_id):
        client.post(f"/api/v1/games/{game_id}/join", json={"player": "p1", "now": 10})
        response = client.post(f"/api/v1/games/{game_id}/join", json={"player": "p2", "now": 50})

        assert response.status_code == 200
        assert response.json()["pot"] == 200
        assert response.json()["players"] == ["p1", "p2"]

    def test_join_errors(self, client, game_id):
        client.post(f"/api/v1/games/{game_id}/join", json={"player": "p1", "now": 10})

        again = client.post(f"/api/v1/games/{game_id}/join", json={"player": "p1", "now": 20})
        late = client.post(f"/api/v1/games/{game_id}/join", json={"player": "p2", "now": 121})
        wrong_fee = client.post(
            f"/api/v1/games/{game_id}/join", json={"player": "p3", "now": 20, "amount": 5}
        )
        missing = client.post("/api/v1/games/99/join", json={"player": "p1", "now": 0})

        assert (again.status_code, again.json()["error_code"]) == (409, "ALREADY_JOINED")
        assert (late.status_code, late.json()["error_code"]) == (409, "WINDOW_CLOSED")
        assert (wrong_fee.status_code, wrong_fee.json()["error_code"]) == (400, "INCORRECT_FEE")
        assert (missing.status_code, missing.json()["error_code"]) == (404, "GAME_NOT_FOUND")

    def test_insufficient_funds(self, client, game_id, ledger):
        ledger.deposit("poor", -1000)
        response = client.post(f"/api/v1/games/{game_id}/join", json={"player": "poor", "now": 10})
        assert response.status_code == 402
        assert response.json()["error_code"] == "INSUFFICIENT_FUNDS"

    def test_draw_and_too_soon(self, client, game_id, entropy):
        client.post(f"/api/v1/games/{game_id}/join", json={"player": "p1", "now": 10})
        entropy.push(3, 4)

        first = client.post(f"/api/v1/games/{game_id}/draw", json={"now": 20}, headers=ADMIN_HEADERS)
        early = client.post(f"/api/v1/games/{game_id}/draw", json={"now": 49}, headers=ADMIN_HEADERS)

        assert first.status_code == 200
        assert first.json()["number"] == 3
        assert first.json()["newly_marked"] == [
            {"player": "p1", "cells": [{"row": 0, "col": 3}]}
        ]
        assert early.status_code == 409
        assert early.json()["error_code"] == "TOO_SOON"

    def test_declare_winner_and_reset(self, client, game_id, entropy):
        client.post(f"/api/v1/games/{game_id}/join", json={"player": "p1", "now": 10})

        pending = client.post(f"/api/v1/games/{game_id}/declare-winner", headers=ADMIN_HEADERS)
        assert pending.json() == {"game_id": game_id, "declared": False, "winner": None, "pot_paid": 0}

        entropy.push(0, 1, 2, 3, 4)
        for now in (20, 50, 80, 110, 140):
            client.post(f"/api/v1/games/{game_id}/draw", json={"now": now}, headers=ADMIN_HEADERS)

        declared = client.post(f"/api/v1/games/{game_id}/declare-winner", headers=ADMIN_HEADERS)
        assert declared.json()["winner"] == "p1"
        assert declared.json()["pot_paid"] == 100

        reset = client.post(f"/api/v1/games/{game_id}/reset", json={"now": 1000}, headers=ADMIN_HEADERS)
        assert reset.status_code == 200
        assert reset.json()["phase"] == "joining"
        assert reset.json()["round_number"] == 2
        assert reset.json()["game_id"] == game_id

    def test_reset_open_game(self, client, game_id):
        response = client.post(f"/api/v1/games/{game_id}/reset", json={"now": 10}, headers=ADMIN_HEADERS)
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_PHASE_FOR_RESET"

    def test_declare_without_players(self, client, game_id):
        response = client.post(f"/api/v1/games/{game_id}/declare-winner", headers=ADMIN_HEADERS)
        assert response.json()["error_code"] == "NO_PLAYERS"


class TestQueryEndpoints:
    """Tests for read-only endpoints."""

    @pytest.fixture
    def client(self, orchestrator):
        client = TestClient(create_app(orchestrator=orchestrator, settings=Settings()))
        client.post("/api/v1/games", json={"now": 0}, headers=ADMIN_HEADERS)
        client.post("/api/v1/games/1/join", json={"player": "p1", "now": 10})
        return client

    def test_list_games(self, client):
        client.post("/api/v1/games", json={"now": 0}, headers=ADMIN_HEADERS)
        response = client.get("/api/v1/games")
        assert response.json() == {"games": [1, 2], "count": 2}

    def test_list_active_games(self, client):
        response = client.get("/api/v1/games", params={"active": "true"})
        assert response.json()["games"] == [1]

    def test_get_game(self, client):
        response = client.get("/api/v1/games/1")
        assert response.json()["players"] == ["p1"]
        assert client.get("/api/v1/games/7").status_code == 404

    def test_players(self, client):
        assert client.get("/api/v1/games/1/players").json() == {"game_id": 1, "players": ["p1"]}

    def test_board(self, client):
        body = client.get("/api/v1/games/1/boards/p1").json()
        assert body["numbers"][0] == [0, 1, 2, 3, 4]
        assert body["numbers"][2][2] is None
        assert body["marked"][2][2] is True
        assert body["is_winner"] is False

    def test_unknown_board(self, client):
        response = client.get("/api/v1/games/1/boards/nobody")
        assert response.status_code == 404
        assert response.json()["error_code"] == "BOARD_NOT_FOUND"

    def test_number_drawn(self, client, entropy):
        entropy.push(12)
        client.post("/api/v1/games/1/draw", json={"now": 20}, headers=ADMIN_HEADERS)
        assert client.get("/api/v1/games/1/numbers/12").json()["drawn"] is True
        assert client.get("/api/v1/games/1/numbers/13").json()["drawn"] is False

    def test_events(self, client):
        body = client.get("/api/v1/games/1/events").json()
        types = [e["event_type"] for e in body["events"]]
        assert types == ["game_created", "board_generated", "player_joined"]

        since = body["events"][0]["sequence"]
        later = client.get("/api/v1/games/1/events", params={"since": since}).json()
        assert len(later["events"]) == 2

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["games"] == 1


class TestConfigEndpoints:
    """Tests for config endpoints."""

    @pytest.fixture
    def client(self, orchestrator):
        return TestClient(create_app(orchestrator=orchestrator, settings=Settings()))

    def test_get_config(self, client):
        assert client.get("/api/v1/config").json() == {
            "entry_fee": 100,
            "join_window": 120,
            "turn_window": 30,
        }

    def test_update_config(self, client):
        response = client.put("/api/v1/config", json={"entry_fee": 10}, headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["entry_fee"] == 10
        assert response.json()["join_window"] == 120

    def test_update_config_requires_admin(self, client):
        response = client.put("/api/v1/config", json={"entry_fee": 10}, headers={"X-Caller": "p1"})
        assert response.status_code == 403

    def test_update_config_validation(self, client):
        response = client.put("/api/v1/config", json={"entry_fee": -1}, headers=ADMIN_HEADERS)
        assert response.status_code == 422
