"""
Constants for the Pelada session manager.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Pelada Manager"

# Settings defaults
DEFAULT_PLAYERS_PER_TEAM = 10
MIN_PLAYERS_PER_TEAM = 5
MAX_PLAYERS_PER_TEAM = 11
DEFAULT_TACTICAL_SCHEMA = "2-2-3-2"
FALLBACK_TACTICAL_SCHEMA = "2-2-3-1"
EMPTY_TACTICAL_SCHEMA = "0-0-0-0"
DEFAULT_THEME = "light"
THEMES = ("light", "dark")

# Balancing
MIN_PLAYERS_TO_START = 2
REPETITION_HISTORY_WINDOW = 15

# Substitution priority weights (higher score leaves sooner)
GOALKEEPER_SCORE = -1_000_000
DAY_RATE_BONUS = 10_000
SUBBED_OUT_PROTECTION = -20_000
FULL_MATCH_BONUS = 2_000
LOW_ATTENDANCE_BONUS = 1_000
LOW_ATTENDANCE_RATE = 0.5
LOW_ATTENDANCE_MIN_HISTORY = 2
TIE_BREAK_SPAN = 100
SHOULD_LEAVE_THRESHOLD = -5_000

# Ranking points
POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0
POINTS_PRESENT_ON_DRAW = 1

# AI balancing prompt context
AI_HISTORY_MATCHES = 5

# Export format
EXPORT_VERSION = "1.0.0"

# Suggested tactical schemas (Defender-FullBack-Midfielder-Forward) per team size,
# goalkeeper not counted.
FORMATIONS_BY_SIZE = {
    5: [
        ("Diamond 1-2-1", "1-0-2-1"),
        ("Square 2-2", "2-0-0-2"),
        ("Y 1-1-2", "1-0-1-2"),
    ],
    6: [
        ("2-1-2 Balanced", "2-0-1-2"),
        ("3-1-1 Defensive", "1-2-1-1"),
        ("2-2-1 Attacking", "0-2-2-1"),
    ],
    7: [
        ("3-2-1 Standard", "1-2-2-1"),
        ("2-3-1 Attacking", "2-0-3-1"),
        ("4-1-1 Park the bus", "2-2-1-1"),
    ],
    8: [
        ("3-3-1 Balanced", "1-2-3-1"),
        ("3-2-2 Attacking", "1-2-2-2"),
        ("4-2-1 Defensive", "2-2-2-1"),
    ],
    9: [
        ("4-3-1 Classic", "2-2-3-1"),
        ("3-3-2 Adapted 3-5-2", "3-0-3-2"),
        ("2-2-2-2 Attacking", "2-2-2-2"),
    ],
    10: [
        ("4-3-2 Adapted 4-4-2", "2-2-3-2"),
        ("4-4-1 Defensive", "2-2-4-1"),
        ("3-3-3 Attacking", "3-0-3-3"),
    ],
    11: [
        ("4-4-2 Classic", "2-2-4-2"),
        ("4-3-3 Attacking", "2-2-3-3"),
        ("3-5-2 Wing backs", "3-0-5-2"),
        ("4-2-3-1 Modern", "2-2-5-1"),
    ],
}

# Labels written by the first (Portuguese) release of the app
LEGACY_POSITION_LABELS = {
    "Goleiro": "Goalkeeper",
    "Defensor": "Defender",
    "Lateral": "FullBack",
    "Meio": "Midfielder",
    "Atacante": "Forward",
}
LEGACY_MEMBERSHIP_LABELS = {
    "Mensalista": "Monthly",
    "Diarista": "PayPerDay",
}
