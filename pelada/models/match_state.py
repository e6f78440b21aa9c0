"""
Match models for the Pelada session manager.

This module contains the CurrentMatchState dataclass which represents the
single in-progress match (rosters, scores, starters and substitutions) and
the immutable MatchResult appended to history when a match finishes.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .player import Player
from ..utils import parse_iso


class Team(Enum):
    A = "A"
    B = "B"

    @property
    def other(self) -> "Team":
        return Team.B if self is Team.A else Team.A


class Winner(Enum):
    A = "A"
    B = "B"
    DRAW = "Draw"

    @classmethod
    def from_scores(cls, score_a: int, score_b: int) -> "Winner":
        """Strict comparison of the final scores."""
        if score_a > score_b:
            return cls.A
        if score_b > score_a:
            return cls.B
        return cls.DRAW


def _players_from_list(raw: Any) -> List[Player]:
    return [Player.from_dict(item) for item in (raw or [])]


@dataclass
class CurrentMatchState:
    """
    Represents the in-progress match.

    Attributes:
        team_a: Roster snapshot of team A (starters and reserves)
        team_b: Roster snapshot of team B (starters and reserves)
        score_a: Goals of team A (never negative)
        score_b: Goals of team B (never negative)
        starters: Ids of the players currently on the field, both teams
        subbed_out: Ids of the players substituted out during this match
        start_time: ISO timestamp of the balancing that created the match
        reasoning: Human readable explanation of the last roster change
    """
    team_a: List[Player] = field(default_factory=list)
    team_b: List[Player] = field(default_factory=list)
    score_a: int = 0
    score_b: int = 0
    starters: List[str] = field(default_factory=list)
    subbed_out: List[str] = field(default_factory=list)
    start_time: str = ""
    reasoning: Optional[str] = None

    def roster(self, team: Team) -> List[Player]:
        return self.team_a if team is Team.A else self.team_b

    def team_of(self, player_id: str) -> Optional[Team]:
        """Return the team whose roster holds ``player_id``."""
        if any(p.id == player_id for p in self.team_a):
            return Team.A
        if any(p.id == player_id for p in self.team_b):
            return Team.B
        return None

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.team_a + self.team_b:
            if player.id == player_id:
                return player
        return None

    def is_starter(self, player_id: str) -> bool:
        return player_id in self.starters

    def starters_of(self, team: Team) -> List[Player]:
        """Players of ``team`` currently on the field, in roster order."""
        return [p for p in self.roster(team) if p.id in self.starters]

    def reserves_of(self, team: Team) -> List[Player]:
        """Players of ``team`` on the bench, in roster order."""
        return [p for p in self.roster(team) if p.id not in self.starters]

    def score(self, team: Team) -> int:
        return self.score_a if team is Team.A else self.score_b

    def to_json(self) -> dict:
        """
        Convert the match state to a JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "team_a": [p.to_dict() for p in self.team_a],
            "team_b": [p.to_dict() for p in self.team_b],
            "score_a": self.score_a,
            "score_b": self.score_b,
            "starters": list(self.starters),
            "subbed_out": list(self.subbed_out),
            "start_time": self.start_time,
            "reasoning": self.reasoning,
        }

    @staticmethod
    def from_json(data: dict) -> "CurrentMatchState":
        """
        Create a match state from a JSON dictionary.

        Accepts both the current keys and the camelCase keys of older saves.

        Raises:
            KeyError, ValueError, TypeError: If the payload is malformed
        """
        return CurrentMatchState(
            team_a=_players_from_list(data.get("team_a", data.get("teamA"))),
            team_b=_players_from_list(data.get("team_b", data.get("teamB"))),
            score_a=max(0, int(data.get("score_a", data.get("scoreA", 0)) or 0)),
            score_b=max(0, int(data.get("score_b", data.get("scoreB", 0)) or 0)),
            starters=[str(i) for i in data.get("starters", []) or []],
            subbed_out=[str(i) for i in data.get("subbed_out", data.get("subbedOut", [])) or []],
            start_time=data.get("start_time", data.get("startTime", "")) or "",
            reasoning=data.get("reasoning"),
        )


@dataclass(frozen=True)
class MatchResult:
    """Immutable record of a finished match."""
    id: str
    date: str
    team_a: Tuple[Player, ...]
    team_b: Tuple[Player, ...]
    score_a: int
    score_b: int
    winner: Winner
    subbed_out: Tuple[str, ...] = ()

    @property
    def timestamp(self) -> float:
        return parse_iso(self.date)

    def played(self, player_id: str) -> bool:
        """True when the player was on either roster."""
        return self.side_of(player_id) is not None

    def side_of(self, player_id: str) -> Optional[Team]:
        if any(p.id == player_id for p in self.team_a):
            return Team.A
        if any(p.id == player_id for p in self.team_b):
            return Team.B
        return None

    def side(self, team: Team) -> Tuple[Player, ...]:
        return self.team_a if team is Team.A else self.team_b

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "team_a": [p.to_dict() for p in self.team_a],
            "team_b": [p.to_dict() for p in self.team_b],
            "score_a": self.score_a,
            "score_b": self.score_b,
            "winner": self.winner.value,
            "subbed_out": list(self.subbed_out),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchResult':
        """
        Create a result from a dictionary.

        Raises:
            KeyError, ValueError, TypeError: If the payload is malformed
        """
        score_a = int(data.get("score_a", data.get("scoreA", 0)) or 0)
        score_b = int(data.get("score_b", data.get("scoreB", 0)) or 0)
        winner = data.get("winner")
        return cls(
            id=str(data["id"]),
            date=str(data.get("date", "")),
            team_a=tuple(_players_from_list(data.get("team_a", data.get("teamA")))),
            team_b=tuple(_players_from_list(data.get("team_b", data.get("teamB")))),
            score_a=score_a,
            score_b=score_b,
            winner=Winner(winner) if winner else Winner.from_scores(score_a, score_b),
            subbed_out=tuple(str(i) for i in data.get("subbed_out", data.get("subbedOut", [])) or []),
        )


def newest_first(history: List[MatchResult]) -> List[MatchResult]:
    """Return ``history`` sorted by date, most recent match first."""
    return sorted(history, key=lambda match: match.timestamp, reverse=True)
