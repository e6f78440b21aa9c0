"""
Player model for the Pelada session manager.

This module contains the Player dataclass which represents a registered
player, the enums for positions and membership, the cumulative ranking
statistics, and the attendance record created on check-in.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.constants import LEGACY_MEMBERSHIP_LABELS, LEGACY_POSITION_LABELS


class Position(Enum):
    """Field positions a player can be registered for."""
    GOALKEEPER = "Goalkeeper"
    DEFENDER = "Defender"
    FULLBACK = "FullBack"
    MIDFIELDER = "Midfielder"
    FORWARD = "Forward"

    @classmethod
    def parse(cls, value: Any) -> "Position":
        """
        Resolve a stored label into a Position.

        Accepts the enum value, the member name, or a legacy label.

        Raises:
            ValueError: If the label is not a known position
        """
        if isinstance(value, cls):
            return value
        label = LEGACY_POSITION_LABELS.get(str(value), str(value))
        for position in cls:
            if label == position.value or label.upper() == position.name:
                return position
        raise ValueError(f"Unknown position: {value}")


class MembershipType(Enum):
    """How a player pays for the sessions."""
    MONTHLY = "Monthly"
    PAY_PER_DAY = "PayPerDay"

    @classmethod
    def parse(cls, value: Any) -> "MembershipType":
        """
        Resolve a stored label into a MembershipType.

        Raises:
            ValueError: If the label is not a known membership kind
        """
        if isinstance(value, cls):
            return value
        label = LEGACY_MEMBERSHIP_LABELS.get(str(value), str(value))
        for kind in cls:
            if label == kind.value or label.upper() == kind.name:
                return kind
        raise ValueError(f"Unknown membership type: {value}")


@dataclass
class PlayerStats:
    """Cumulative ranking statistics."""
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "matches_played": self.matches_played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'PlayerStats':
        """Create from dictionary for JSON deserialization."""
        if not data:
            return cls()
        # Older exports used "matches" for the played counter
        matches = data.get("matches_played", data.get("matches", 0))
        return cls(
            matches_played=int(matches or 0),
            wins=int(data.get("wins", 0) or 0),
            draws=int(data.get("draws", 0) or 0),
            losses=int(data.get("losses", 0) or 0),
            points=int(data.get("points", 0) or 0),
        )


@dataclass
class AttendanceRecord:
    """Check-in of a player for the current session."""
    player_id: str
    arrival_ts: float

    def to_dict(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "arrival_ts": self.arrival_ts}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AttendanceRecord':
        player_id = data.get("player_id", data.get("playerId"))
        if not player_id:
            raise ValueError("Attendance record without player id")
        arrival = data.get("arrival_ts", data.get("arrivalTime", 0))
        return cls(player_id=str(player_id), arrival_ts=float(arrival or 0))


@dataclass
class Player:
    """
    Represents a registered pelada player.

    Attributes:
        id: Opaque unique identifier
        name: Display name (unique, case-insensitive)
        positions: Non-empty list of positions the player covers
        membership: Monthly member or pay-per-day player
        stats: Cumulative ranking statistics
    """
    id: str
    name: str
    positions: List[Position] = field(default_factory=list)
    membership: MembershipType = MembershipType.MONTHLY
    stats: PlayerStats = field(default_factory=PlayerStats)

    def plays(self, position: Position) -> bool:
        """Return True when the player is registered for ``position``."""
        return position in self.positions

    def is_goalkeeper(self) -> bool:
        return Position.GOALKEEPER in self.positions

    def is_monthly(self) -> bool:
        return self.membership is MembershipType.MONTHLY

    def snapshot(self) -> 'Player':
        """
        Return an independent copy of this player.

        Match rosters and history hold snapshots so later edits to the
        registry never change an in-progress or finished match.
        """
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert player to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the player
        """
        return {
            "id": self.id,
            "name": self.name,
            "positions": [p.value for p in self.positions],
            "membership": self.membership.value,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """
        Create player from dictionary for JSON deserialization.

        Args:
            data: Dictionary representation of player

        Returns:
            Player instance

        Raises:
            KeyError: If id or name is missing
            ValueError: If a position or membership label is unknown
        """
        membership = data.get("membership", data.get("type", MembershipType.MONTHLY.value))
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            positions=[Position.parse(p) for p in data.get("positions", [])],
            membership=MembershipType.parse(membership),
            stats=PlayerStats.from_dict(data.get("stats")),
        )
