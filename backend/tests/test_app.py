"""
Tests for the Flask API in app.py.

Each test gets its own app and store; background tickers are disabled so
games only advance through the tick endpoint.
"""

import pytest
import random
import sys
import os
from dataclasses import replace
from unittest.mock import patch

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from data_access import create_store
from domain.constants import GAME_OVER, IDLE, PASS_THROUGH, PAUSED, PLAYING, WALLS


@pytest.fixture
def app(monkeypatch):
    monkeypatch.delenv("SCORE_WEBHOOK_URL", raising=False)
    store = create_store(seed=True, rng=random.Random(5))
    app = create_app(store=store, AUTO_TICK=False, START_WATCH=False, RANDOM_SEED=5, GRID_SIZE=20)
    yield app
    app.extensions["snake"]["sessions"].close_all()
    app.extensions["snake"]["watch"].stop()
    app.extensions["snake"]["leaderboard"].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email="neon@example.com", password="pw"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.get_json()["token"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok", "sessions": 0, "watching": False}

    def test_unknown_route_is_404(self, client):
        assert client.get("/api/nothing-here").status_code == 404


class TestAuthRoutes:

    def test_signup_login_me_logout(self, client):
        response = client.post("/api/auth/signup", json={
            "username": "NewPlayer", "email": "new@example.com", "password": "secret"
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data["user"]["username"] == "NewPlayer"
        assert "created_at" in data["user"]

        token = login(client, "new@example.com", "secret")
        me = client.get("/api/auth/me", headers=auth_header(token)).get_json()
        assert me["user"]["email"] == "new@example.com"

        assert client.post("/api/auth/logout", headers=auth_header(token)).get_json() == {"success": True}
        assert client.get("/api/auth/me", headers=auth_header(token)).get_json() == {"user": None}

    def test_signup_duplicate(self, client):
        response = client.post("/api/auth/signup", json={
            "username": "SnakeMaster", "email": "x@example.com", "password": "pw"
        })
        assert response.status_code == 401
        assert response.get_json() == {"error": "User already exists"}

    def test_signup_missing_fields(self, client):
        response = client.post("/api/auth/signup", json={"username": "x"})
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"username": 123, "email": "n@example.com", "password": "pw"},
        {"username": "Numbers", "email": ["n@example.com"], "password": "pw"},
        {"username": "Numbers", "email": "n@example.com", "password": 5},
    ])
    def test_signup_rejects_non_string_fields(self, client, body):
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Username, email and password are required"}

    def test_login_rejects_non_string_fields(self, client):
        response = client.post("/api/auth/login", json={"email": 42, "password": "pw"})
        assert response.status_code == 401
        response = client.post("/api/auth/login", json={"email": "neon@example.com", "password": 5})
        assert response.status_code == 401

    def test_login_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "pw"})
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid email or password"

    def test_me_without_token(self, client):
        assert client.get("/api/auth/me").get_json() == {"user": None}


class TestLeaderboardRoutes:

    def test_get_leaderboard(self, client):
        entries = client.get("/api/leaderboard").get_json()["entries"]
        assert len(entries) == 10
        assert entries[0]["username"] == "SnakeMaster"
        assert entries[0]["date"].startswith("2024-12-01")

    def test_filter_and_limit(self, client):
        entries = client.get(f"/api/leaderboard?mode={PASS_THROUGH}&limit=2").get_json()["entries"]
        assert [entry["username"] for entry in entries] == ["PixelPro", "ArcadeQueen"]

    def test_bad_mode(self, client):
        response = client.get("/api/leaderboard?mode=maze")
        assert response.status_code == 400
        assert "maze" in response.get_json()["error"]

    def test_submit_requires_login(self, client):
        response = client.post("/api/leaderboard", json={"score": 100, "mode": WALLS})
        assert response.status_code == 401
        assert response.get_json() == {"error": "Must be logged in to submit score"}

    def test_submit_score(self, client):
        token = login(client)
        response = client.post(
            "/api/leaderboard", json={"score": 3000, "mode": WALLS}, headers=auth_header(token)
        )
        assert response.status_code == 201
        assert response.get_json()["entry"]["username"] == "NeonGamer"
        top = client.get("/api/leaderboard?limit=1").get_json()["entries"][0]
        assert top["score"] == 3000

    def test_submit_invalid_score(self, client):
        token = login(client)
        response = client.post(
            "/api/leaderboard", json={"score": -1, "mode": WALLS}, headers=auth_header(token)
        )
        assert response.status_code == 400


class TestPlayerRoutes:

    def test_list_players(self, client):
        players = client.get("/api/players").get_json()["players"]
        assert [player["username"] for player in players] == ["LivePlayer1", "StreamSnake", "ProGamer99"]
        assert players[0]["snake"][0] == {"x": 10, "y": 10}
        assert "started_at" in players[0]

    def test_get_player(self, client):
        player = client.get("/api/players/active-2").get_json()["player"]
        assert player["mode"] == PASS_THROUGH

    def test_unknown_player(self, client):
        response = client.get("/api/players/active-42")
        assert response.status_code == 404
        assert "active-42" in response.get_json()["error"]

    def test_variants(self, client):
        variants = client.get("/api/players/variants").get_json()["variants"]
        assert [variant["key"] for variant in variants] == ["greedy", "random"]

    def test_unexpected_error_is_500(self, app, client):
        watch = app.extensions["snake"]["watch"]
        with patch.object(watch, "list_players", side_effect=RuntimeError("boom")):
            response = client.get("/api/players")
        assert response.status_code == 500
        assert response.get_json() == {"error": "Internal server error"}


class TestGameRoutes:

    def create_game(self, client, **kwargs):
        response = client.post("/api/games", **kwargs)
        assert response.status_code == 201
        return response.get_json()["game"]

    def test_create_game(self, client):
        game = self.create_game(client, json={"mode": PASS_THROUGH})
        assert game["status"] == IDLE
        assert game["mode"] == PASS_THROUGH
        assert game["score"] == 0
        assert len(game["snake"]) == 3

    def test_create_game_defaults_to_walls(self, client):
        assert self.create_game(client)["mode"] == WALLS

    def test_create_game_bad_mode(self, client):
        assert client.post("/api/games", json={"mode": "maze"}).status_code == 400

    def test_play_a_game(self, client):
        game_id = self.create_game(client)["session_id"]

        game = client.post(f"/api/games/{game_id}/start").get_json()["game"]
        assert game["status"] == PLAYING

        game = client.post(f"/api/games/{game_id}/direction", json={"direction": "down"}).get_json()["game"]
        assert game["next_direction"] == "DOWN"

        game = client.post(f"/api/games/{game_id}/tick").get_json()["game"]
        assert game["snake"][0] == {"x": 10, "y": 11}

        game = client.post(f"/api/games/{game_id}/pause").get_json()["game"]
        assert game["status"] == PAUSED

        details = client.get(f"/api/games/{game_id}").get_json()["game"]
        assert "H" in details["board"]
        assert details["projected_final_score"] == details["score"] * 3 // 2

        game = client.post(f"/api/games/{game_id}/reset").get_json()["game"]
        assert game["status"] == IDLE

    def test_bad_direction(self, client):
        game_id = self.create_game(client)["session_id"]
        response = client.post(f"/api/games/{game_id}/direction", json={"direction": "NORTH"})
        assert response.status_code == 400

    def test_change_mode(self, client):
        game_id = self.create_game(client)["session_id"]
        game = client.post(f"/api/games/{game_id}/mode", json={"mode": PASS_THROUGH}).get_json()["game"]
        assert game["mode"] == PASS_THROUGH
        assert client.post(f"/api/games/{game_id}/mode", json={"mode": "maze"}).status_code == 400

    def test_delete_game(self, client):
        game_id = self.create_game(client)["session_id"]
        assert client.delete(f"/api/games/{game_id}").get_json() == {"success": True}
        assert client.get(f"/api/games/{game_id}").status_code == 404
        assert client.delete(f"/api/games/{game_id}").status_code == 404

    def test_finished_game_reaches_leaderboard(self, app, client):
        token = login(client)
        game_id = self.create_game(client, headers=auth_header(token))["session_id"]
        client.post(f"/api/games/{game_id}/start")

        session = app.extensions["snake"]["sessions"].get(game_id)
        session._state = replace(session.state, food=(11, 10))
        client.post(f"/api/games/{game_id}/tick")
        session._state = replace(session.state, food=(0, 0))

        game = None
        for _ in range(20):
            game = client.post(f"/api/games/{game_id}/tick").get_json()["game"]
            if game["status"] == GAME_OVER:
                break

        assert game["status"] == GAME_OVER
        assert game["final_score"] == 15
        entries = client.get(f"/api/leaderboard?mode={WALLS}").get_json()["entries"]
        assert any(entry["username"] == "NeonGamer" and entry["score"] == 15 for entry in entries)
