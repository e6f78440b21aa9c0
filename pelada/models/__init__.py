"""
Models package for the Pelada session manager.

This package contains the core data models used throughout the application.
"""
from .player import Player, PlayerStats, Position, MembershipType, AttendanceRecord
from .match_state import CurrentMatchState, MatchResult, Team, Winner, newest_first
from .settings import Settings, TacticalQuota, parse_tactical_schema, formations_for
from .ranking_report import RankingEntry, PlayerMatchLine, PlayerReport

__all__ = [
    "Player", "PlayerStats", "Position", "MembershipType", "AttendanceRecord",
    "CurrentMatchState", "MatchResult", "Team", "Winner", "newest_first",
    "Settings", "TacticalQuota", "parse_tactical_schema", "formations_for",
    "RankingEntry", "PlayerMatchLine", "PlayerReport"
]
