"""Dataclasses representing ranking reports for the pelada manager."""

from dataclasses import dataclass, field
from typing import List

from .player import Player


@dataclass
class RankingEntry:
    """One row of the ranking table."""

    rank: int
    player: Player
    attendance_rate: int


@dataclass
class PlayerMatchLine:
    """A past match seen from one player's side."""

    match_id: str
    date: str
    result: str  # "W", "D" or "L"
    team_score: int
    opponent_score: int

    @property
    def score(self) -> str:
        return f"{self.team_score} x {self.opponent_score}"


@dataclass
class PlayerReport:
    """Detail view of a player's ranking record."""

    player: Player
    win_rate: int
    attendance_rate: int
    total_matches_recorded: int
    matches: List[PlayerMatchLine] = field(default_factory=list)
