"""
Utilities package for the Pelada session manager.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import now_ts, now_iso, parse_iso
from .constants import (
    APP_TITLE, DEFAULT_PLAYERS_PER_TEAM, DEFAULT_TACTICAL_SCHEMA,
    FORMATIONS_BY_SIZE, REPETITION_HISTORY_WINDOW
)

__all__ = [
    "now_ts", "now_iso", "parse_iso", "APP_TITLE", "DEFAULT_PLAYERS_PER_TEAM",
    "DEFAULT_TACTICAL_SCHEMA", "FORMATIONS_BY_SIZE", "REPETITION_HISTORY_WINDOW"
]
