"""
Pelada session manager

Manages amateur football sessions: player registry, arrival-order
attendance, balanced team draws, live match substitutions and a
points-based ranking built from match history.

This package provides a Flask JSON API for the session client.
"""
from .models import Player, CurrentMatchState, MatchResult, Settings
from .services import RosterStore, MatchSession, ServiceFactory
from .ui import create_app, run_web_app
from .utils import now_ts, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Player", "CurrentMatchState", "MatchResult", "Settings",
    "RosterStore", "MatchSession", "ServiceFactory",
    "create_app", "run_web_app", "now_ts", "APP_TITLE"
]
