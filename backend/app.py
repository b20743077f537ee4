import logging
import random

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from data_access import LeaderboardRepository, PlayerRepository, UserRepository, create_store
from domain.constants import VALID_MODES, WALLS
from domain.rules import calculate_final_score
from players import get_player_class, list_variants
from services import (
    AuthError,
    AuthService,
    LeaderboardService,
    NotFoundError,
    SessionManager,
    WatchService,
)


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def _serialize_user(user):
    return {
        "id": user["id"],
        "username": user["username"],
        "email": user["email"],
        "created_at": user["created_at"].isoformat(),
    }


def _serialize_entry(entry):
    return {
        "id": entry["id"],
        "username": entry["username"],
        "score": entry["score"],
        "mode": entry["mode"],
        "date": entry["date"].isoformat(),
    }


def _error(message, status):
    return jsonify({"error": message}), status


def create_app(store=None, **overrides):
    """
    Build the Flask app and its services.

    Settings come from config.py; keyword overrides (e.g. AUTO_TICK=False,
    START_WATCH=False) win. A store can be passed in, otherwise one is
    created and seeded per SEED_DEMO_DATA.
    """
    app = Flask(__name__)
    app.config.update(config.as_dict())
    app.config.update(overrides)

    seed = app.config["RANDOM_SEED"]
    rng = random.Random(seed) if seed is not None else None

    if store is None:
        store = create_store(
            seed=app.config["SEED_DEMO_DATA"],
            grid_size=app.config["GRID_SIZE"],
            rng=rng,
        )

    auth_service = AuthService(UserRepository(store))
    leaderboard_service = LeaderboardService(LeaderboardRepository(store), auth_service)
    sessions = SessionManager(
        grid_size=app.config["GRID_SIZE"],
        auto_tick=app.config["AUTO_TICK"],
        submit_score=leaderboard_service.submit_score,
        rng=rng,
        session_ttl=app.config["SESSION_TTL_SECONDS"] or None,
    )
    watch_service = WatchService(
        PlayerRepository(store),
        tick_ms=app.config["WATCH_TICK_MS"],
        agent=get_player_class(app.config["WATCH_PLAYER_VARIANT"])(rng),
        rng=rng,
    )

    app.extensions["snake"] = {
        "store": store,
        "auth": auth_service,
        "leaderboard": leaderboard_service,
        "sessions": sessions,
        "watch": watch_service,
    }

    # Enable CORS for API routes so the browser frontend (different origin) can call Flask
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ALLOWED_ORIGINS"]}})

    @app.errorhandler(AuthError)
    def handle_auth_error(error):
        return _error(str(error), 401)

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return _error(str(error), 404)

    @app.errorhandler(ValueError)
    def handle_value_error(error):
        return _error(str(error), 400)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        # Let Flask render its own HTTP errors (404 for unknown routes, 405, ...)
        if isinstance(error, HTTPException):
            return error
        logging.error(f"Unhandled error on {request.method} {request.path}: {error}", exc_info=True)
        return _error("Internal server error", 500)

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "ok",
            "sessions": len(sessions),
            "watching": watch_service.is_running,
        })

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    @app.route("/api/auth/signup", methods=["POST"])
    def signup():
        body = _json_body()
        result = auth_service.signup(
            username=body.get("username"),
            email=body.get("email"),
            password=body.get("password"),
        )
        return jsonify({"user": _serialize_user(result["user"]), "token": result["token"]}), 201

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        body = _json_body()
        result = auth_service.login(email=body.get("email"), password=body.get("password"))
        return jsonify({"user": _serialize_user(result["user"]), "token": result["token"]})

    @app.route("/api/auth/logout", methods=["POST"])
    def logout():
        auth_service.logout(_bearer_token())
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"])
    def current_user():
        user = auth_service.get_current_user(_bearer_token())
        return jsonify({"user": _serialize_user(user) if user else None})

    # -------------------------------------------------------------------------
    # Leaderboard
    # -------------------------------------------------------------------------

    @app.route("/api/leaderboard", methods=["GET"])
    def get_leaderboard():
        """
        Query parameters:
        - mode: walls or pass-through (default: all modes)
        - limit: maximum number of entries
        """
        mode = request.args.get("mode", default=None, type=str) or None
        limit = request.args.get("limit", default=None, type=int)
        entries = leaderboard_service.get_leaderboard(mode=mode, limit=limit)
        return jsonify({"entries": [_serialize_entry(entry) for entry in entries]})

    @app.route("/api/leaderboard", methods=["POST"])
    def submit_score():
        body = _json_body()
        entry = leaderboard_service.submit_score(
            _bearer_token(), body.get("score"), body.get("mode")
        )
        return jsonify({"entry": _serialize_entry(entry)}), 201

    # -------------------------------------------------------------------------
    # Watch mode
    # -------------------------------------------------------------------------

    @app.route("/api/players", methods=["GET"])
    def get_active_players():
        players = watch_service.list_players()
        return jsonify({"players": [player.to_dict() for player in players]})

    @app.route("/api/players/<player_id>", methods=["GET"])
    def get_active_player(player_id):
        return jsonify({"player": watch_service.get_player(player_id).to_dict()})

    @app.route("/api/players/variants", methods=["GET"])
    def get_player_variants():
        return jsonify({"variants": list_variants()})

    # -------------------------------------------------------------------------
    # Game sessions
    # -------------------------------------------------------------------------

    @app.route("/api/games", methods=["POST"])
    def create_game():
        body = _json_body()
        mode = body.get("mode") or WALLS
        if mode not in VALID_MODES:
            raise ValueError(f"Unknown game mode '{mode}'")
        session = sessions.create(mode=mode, user_token=_bearer_token())
        return jsonify({"game": session.snapshot()}), 201

    @app.route("/api/games/<game_id>", methods=["GET"])
    def get_game(game_id):
        session = sessions.get(game_id)
        state = session.state
        data = session.snapshot()
        data["board"] = state.print_board()
        data["projected_final_score"] = calculate_final_score(state.score, state.mode)
        return jsonify({"game": data})

    @app.route("/api/games/<game_id>", methods=["DELETE"])
    def delete_game(game_id):
        sessions.get(game_id)
        sessions.remove(game_id)
        return jsonify({"success": True})

    @app.route("/api/games/<game_id>/start", methods=["POST"])
    def start_game(game_id):
        session = sessions.get(game_id)
        session.start()
        return jsonify({"game": session.snapshot()})

    @app.route("/api/games/<game_id>/pause", methods=["POST"])
    def pause_game(game_id):
        session = sessions.get(game_id)
        session.toggle_pause()
        return jsonify({"game": session.snapshot()})

    @app.route("/api/games/<game_id>/reset", methods=["POST"])
    def reset_game(game_id):
        session = sessions.get(game_id)
        session.reset()
        return jsonify({"game": session.snapshot()})

    @app.route("/api/games/<game_id>/tick", methods=["POST"])
    def tick_game(game_id):
        session = sessions.get(game_id)
        session.tick()
        return jsonify({"game": session.snapshot()})

    @app.route("/api/games/<game_id>/direction", methods=["POST"])
    def change_direction(game_id):
        session = sessions.get(game_id)
        direction = str(_json_body().get("direction", "")).upper()
        session.set_direction(direction)
        return jsonify({"game": session.snapshot()})

    @app.route("/api/games/<game_id>/mode", methods=["POST"])
    def change_mode(game_id):
        session = sessions.get(game_id)
        session.set_mode(_json_body().get("mode"))
        return jsonify({"game": session.snapshot()})

    if app.config["START_WATCH"]:
        watch_service.start()

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    create_app().run(host="0.0.0.0", port=config.PORT)
