"""
Web application module for the Pelada session manager.

This module contains the Flask server exposing the session services as a
JSON API: player registry, attendance, the live match, ranking, settings
and backups.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from ..models import Settings, Team
from ..services import ServiceFactory
from ..services.errors import SettingsValidationError, ValidationError
from ..services.match_service import MatchPhase

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Every service is created by one ServiceFactory so they share the store.
    """

    def __init__(self, service_factory: Optional[ServiceFactory] = None):
        self.service_factory = service_factory or ServiceFactory()
        self.reset_services()

    def reset_services(self):
        """Recreate the services, reloading the in-progress match from the store."""
        services = self.service_factory.create_complete_service_suite()
        self.store = services['store']
        self.player_service = services['players']
        self.attendance_service = services['attendance']
        self.match_session = services['match']
        self.ranking = services['ranking']
        self.export_service = services['export']


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _parse_team(value: Any) -> Team:
    try:
        return Team(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown team: {value}")


def _plan_to_dict(plan) -> Dict[str, Any]:
    return {
        "team": plan.team.value,
        "queue": [
            {"player_id": item.player_id, "score": item.score, "reason": item.reason, "eligible": item.eligible}
            for item in plan.queue
        ],
        "should_leave": [item.player_id for item in plan.should_leave],
    }


def _match_to_dict(match) -> Optional[Dict[str, Any]]:
    if match is None:
        return None
    data = match.to_json()
    for team in Team:
        key = team.value.lower()
        data[f"starters_{key}"] = [p.id for p in match.starters_of(team)]
        data[f"reserves_{key}"] = [p.id for p in match.reserves_of(team)]
    return data


def apply_settings_update(current: Settings, data: Dict[str, Any]) -> Settings:
    """
    Merge a settings payload over the current settings.

    A new team size re-selects a schema valid for it unless the payload also
    names a schema.

    Raises:
        SettingsValidationError: If the merged settings are invalid
    """
    settings = current
    if "players_per_team" in data:
        try:
            size = int(data["players_per_team"])
        except (TypeError, ValueError):
            raise SettingsValidationError("Players per team must be an integer")
        if size != settings.players_per_team:
            settings = settings.with_players_per_team(size)
    if "tactical_schema" in data:
        settings = replace(settings, tactical_schema=str(data["tactical_schema"]))
    if "theme" in data:
        settings = replace(settings, theme=str(data["theme"]))
    if "auto_balance" in data:
        if not isinstance(data["auto_balance"], bool):
            raise SettingsValidationError("Auto balance must be true or false")
        settings = replace(settings, auto_balance=data["auto_balance"])

    errors = settings.validate()
    if errors:
        raise SettingsValidationError("; ".join(errors))
    return settings


def create_app(state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        state: Service state to serve (defaults to one built from the environment)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = state or WebAppState()
    app.config["APP_STATE"] = app_state

    def _payload() -> Dict[str, Any]:
        return request.get_json(silent=True) or {}

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return _error(str(e), 400)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return _error(str(e), 500)

    # ==================== Session ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Get the whole session state for the client."""
        view = app_state.attendance_service.ordered_view()
        arrivals = app_state.attendance_service.arrival_map()
        session = app_state.match_session
        return jsonify({
            "success": True,
            "phase": session.phase.value,
            "can_start": session.can_start(),
            "ai_available": session.ai_client is not None and session.ai_client.available,
            "settings": app_state.store.get_settings().to_dict(),
            "present": [dict(p.to_dict(), arrival_ts=arrivals[p.id]) for p in view.present],
            "absent": [p.to_dict() for p in view.absent],
            "current_match": _match_to_dict(session.current),
        })

    # ==================== Players ==================== #

    @app.route("/api/players", methods=["GET"])
    def list_players():
        players = app_state.player_service.list_players()
        return jsonify({"success": True, "players": [p.to_dict() for p in players]})

    @app.route("/api/players", methods=["POST"])
    def create_player():
        """Register a new player."""
        data = _payload()
        player = app_state.player_service.create_player(
            name=data.get("name", ""),
            positions=data.get("positions", []),
            membership=data.get("membership", "Monthly"),
        )
        return jsonify({
            "success": True,
            "message": f"Player '{player.name}' created successfully",
            "player": player.to_dict(),
        }), 201

    @app.route("/api/players/<player_id>", methods=["PUT"])
    def update_player(player_id):
        data = _payload()
        player = app_state.player_service.update_player(
            player_id,
            name=data.get("name"),
            positions=data.get("positions"),
            membership=data.get("membership"),
        )
        if player is None:
            return _error("Player not found", 404)
        return jsonify({"success": True, "player": player.to_dict()})

    @app.route("/api/players/<player_id>", methods=["DELETE"])
    def delete_player(player_id):
        if not app_state.player_service.delete_player(player_id):
            return _error("Player not found", 404)
        return jsonify({"success": True, "message": "Player deleted"})

    @app.route("/api/players/<player_id>/report", methods=["GET"])
    def player_report(player_id):
        """Win rate, attendance rate and match log of one player."""
        player = app_state.player_service.get_player(player_id)
        if player is None:
            return _error("Player not found", 404)
        report = app_state.ranking.player_report(player, app_state.store.get_history())
        return jsonify({
            "success": True,
            "player": player.to_dict(),
            "win_rate": report.win_rate,
            "attendance_rate": report.attendance_rate,
            "total_matches_recorded": report.total_matches_recorded,
            "matches": [
                {"match_id": line.match_id, "date": line.date, "result": line.result, "score": line.score}
                for line in report.matches
            ],
        })

    # ==================== Attendance ==================== #

    @app.route("/api/attendance/<player_id>", methods=["POST"])
    def toggle_attendance(player_id):
        present = app_state.attendance_service.toggle(player_id)
        if present is None:
            return _error("Player not found", 404)
        return jsonify({"success": True, "present": present})

    # ==================== Match ==================== #

    @app.route("/api/match/start", methods=["POST"])
    def start_match():
        """Balance the checked-in players and start a match."""
        outcome = app_state.match_session.start_match(use_ai=bool(_payload().get("use_ai", False)))
        if outcome is None:
            return _error("Cannot start: a match is running or fewer than 2 players are present", 409)
        return jsonify({
            "success": True,
            "used_ai": outcome.used_ai,
            "warning": outcome.warning,
            "match": _match_to_dict(outcome.match),
        })

    @app.route("/api/match/score", methods=["POST"])
    def update_score():
        data = _payload()
        team = _parse_team(data.get("team"))
        try:
            delta = int(data.get("delta", 1))
        except (TypeError, ValueError):
            raise ValidationError("Score delta must be an integer")
        if not app_state.match_session.update_score(team, delta):
            return _error("No match in progress", 409)
        return jsonify({"success": True, "match": _match_to_dict(app_state.match_session.current)})

    @app.route("/api/match/suggestions", methods=["GET"])
    def suggestions():
        plans = app_state.match_session.suggestions()
        if not plans:
            return _error("No match in progress", 409)
        return jsonify({"success": True, "plans": {team.value: _plan_to_dict(plan) for team, plan in plans.items()}})

    @app.route("/api/match/halftime", methods=["POST"])
    def halftime():
        swaps = app_state.match_session.halftime()
        if swaps is None:
            return _error("No match in progress", 409)
        return jsonify({
            "success": True,
            "swaps": {team.value: count for team, count in swaps.items()},
            "match": _match_to_dict(app_state.match_session.current),
        })

    @app.route("/api/match/swap", methods=["POST"])
    def swap():
        data = _payload()
        if not app_state.match_session.swap(str(data.get("starter_id")), str(data.get("reserve_id"))):
            return _error("Swap needs a starter and a reserve of the current match", 409)
        return jsonify({"success": True, "match": _match_to_dict(app_state.match_session.current)})

    @app.route("/api/match/roster", methods=["POST"])
    def add_to_roster():
        data = _payload()
        team = _parse_team(data["team"]) if data.get("team") else None
        if not app_state.match_session.add_to_roster(str(data.get("player_id")), team):
            return _error("Player cannot join the current match", 409)
        return jsonify({"success": True, "match": _match_to_dict(app_state.match_session.current)})

    @app.route("/api/match/roster/<player_id>", methods=["DELETE"])
    def remove_from_roster(player_id):
        if not app_state.match_session.remove_from_roster(player_id):
            return _error("Only reserves of the current match can be removed", 409)
        return jsonify({"success": True, "match": _match_to_dict(app_state.match_session.current)})

    @app.route("/api/match/finish", methods=["POST"])
    def finish_match():
        """Record the result and end the session."""
        if app_state.match_session.phase is MatchPhase.NO_MATCH:
            return _error("No match in progress", 409)
        result = app_state.match_session.finish()
        if result is None:
            return _error("Failed to finish the match", 500)
        return jsonify({"success": True, "result": result.to_dict()})

    @app.route("/api/match/reset", methods=["POST"])
    def reset_match():
        if not app_state.match_session.reset():
            return _error("No match in progress", 409)
        return jsonify({"success": True})

    # ==================== Ranking ==================== #

    @app.route("/api/ranking", methods=["GET"])
    def ranking():
        entries = app_state.ranking.rank(app_state.store.get_players(), app_state.store.get_history())
        return jsonify({
            "success": True,
            "ranking": [
                {"rank": e.rank, "player": e.player.to_dict(), "attendance_rate": e.attendance_rate}
                for e in entries
            ],
        })

    # ==================== Settings ==================== #

    @app.route("/api/settings", methods=["GET"])
    def get_settings():
        return jsonify({"success": True, "settings": app_state.store.get_settings().to_dict()})

    @app.route("/api/settings", methods=["PUT"])
    def update_settings():
        settings = apply_settings_update(app_state.store.get_settings(), _payload())
        app_state.store.set_settings(settings)
        return jsonify({"success": True, "settings": settings.to_dict()})

    # ==================== Data ==================== #

    @app.route("/api/export/json", methods=["GET"])
    def export_json():
        return Response(app_state.export_service.export_json(), mimetype="application/json")

    @app.route("/api/export/players.csv", methods=["GET"])
    def export_players_csv():
        return Response(app_state.export_service.export_players_csv(), mimetype="text/csv")

    @app.route("/api/export/history.csv", methods=["GET"])
    def export_history_csv():
        return Response(app_state.export_service.export_history_csv(), mimetype="text/csv")

    @app.route("/api/import", methods=["POST"])
    def import_data():
        """Replace all data with an exported JSON snapshot."""
        ok, reason = app_state.export_service.import_json(request.get_data(as_text=True))
        if not ok:
            return _error(reason, 400)
        app_state.reset_services()
        return jsonify({"success": True, "message": "Data imported"})

    @app.route("/api/demo", methods=["POST"])
    def generate_demo():
        players = app_state.player_service.generate_demo_roster()
        app_state.reset_services()
        return jsonify({"success": True, "players": len(players)})

    @app.route("/api/reset", methods=["POST"])
    def reset_all():
        app_state.player_service.reset_all()
        app_state.reset_services()
        return jsonify({"success": True, "message": "All data removed"})

    return app


def run_web_app(host: str = "127.0.0.1", port: int = 7122) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
    """
    app = create_app()
    app.run(host=host, port=port, debug=False)
