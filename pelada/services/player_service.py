"""
Player service for the Pelada session manager.

This module provides business logic for managing the player registry,
including validation, registration edits, deletion and demo data.
"""
import logging
import random
import uuid
from dataclasses import replace
from typing import Iterable, List, Optional

from ..models import MembershipType, Player, PlayerStats, Position
from .errors import PlayerValidationError
from .persistence_service import RosterStore

logger = logging.getLogger(__name__)

DEMO_NAMES = [
    "Lucas Silva", "Matheus", "Pedro Henrique", "Gabriel", "Felipe", "Thiago", "Arthur", "Davi",
    "Heitor", "Calebe", "Nicolas", "Rafael", "Daniel", "Samuel", "Bruno", "Eduardo",
    "Vitor", "Leonardo", "João", "André", "Ricardo", "Gustavo", "Caio", "Enzo",
    "Igor", "Marcelo", "Renan", "Diego", "Leandro", "Fábio",
]

# (count, positions) groups that give the demo roster a usable spread
DEMO_DISTRIBUTION = [
    (3, [Position.GOALKEEPER]),
    (6, [Position.DEFENDER]),
    (2, [Position.DEFENDER, Position.FULLBACK]),
    (4, [Position.FULLBACK]),
    (6, [Position.MIDFIELDER]),
    (2, [Position.MIDFIELDER, Position.FORWARD]),
    (2, [Position.MIDFIELDER, Position.DEFENDER]),
    (5, [Position.FORWARD]),
]
DEMO_MONTHLY_SHARE = 0.7


def new_player_id() -> str:
    return str(uuid.uuid4())


class PlayerService:
    """
    Service class for managing the player registry.

    Provides methods for player creation, validation, editing, deletion
    and demo roster generation on top of the roster store.
    """

    def __init__(self, store: RosterStore):
        """
        Initialize PlayerService.

        Args:
            store: Roster store holding players and attendance
        """
        self.store = store

    def normalize_positions(self, positions: Iterable) -> List[Position]:
        """
        Parse position labels, dropping duplicates and keeping enum order.

        Raises:
            PlayerValidationError: If a label is not a known position
        """
        parsed = set()
        for label in positions or []:
            try:
                parsed.add(Position.parse(label))
            except ValueError as e:
                raise PlayerValidationError(str(e))
        return [p for p in Position if p in parsed]

    def validate_player_data(self, player: Player, others: Iterable[Player] = ()) -> List[str]:
        """
        Validate player data and return list of validation errors.

        Args:
            player: Player instance to validate
            others: Registered players the name must not collide with

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not player.name or not player.name.strip():
            errors.append("Player name is required")
        else:
            folded = player.name.strip().casefold()
            if any(o.id != player.id and o.name.strip().casefold() == folded for o in others):
                errors.append(f"Player '{player.name.strip()}' already exists")

        if not player.positions:
            errors.append("At least one position is required")
        elif len(set(player.positions)) != len(player.positions):
            errors.append("Positions must not repeat")

        if not isinstance(player.membership, MembershipType):
            errors.append("Invalid membership type")

        return errors

    def _parse_membership(self, membership) -> MembershipType:
        try:
            return MembershipType.parse(membership)
        except ValueError as e:
            raise PlayerValidationError(str(e))

    def create_player(self, name: str, positions: Iterable, membership=MembershipType.MONTHLY) -> Player:
        """
        Register a new player with zeroed stats.

        Args:
            name: Display name
            positions: Position labels or enum members
            membership: Membership label or enum member

        Returns:
            The stored Player

        Raises:
            PlayerValidationError: If player data is invalid
        """
        player = Player(
            id=new_player_id(),
            name=(name or "").strip(),
            positions=self.normalize_positions(positions),
            membership=self._parse_membership(membership),
            stats=PlayerStats(),
        )
        players = self.store.get_players()
        errors = self.validate_player_data(player, players)
        if errors:
            raise PlayerValidationError(f"Player validation failed: {'; '.join(errors)}")

        players.append(player)
        self.store.set_players(players)
        logger.info("Registered player %s (%s)", player.name, player.id)
        return player

    def update_player(
        self,
        player_id: str,
        name: Optional[str] = None,
        positions: Optional[Iterable] = None,
        membership=None,
    ) -> Optional[Player]:
        """
        Edit a registration, keeping id and stats.

        Returns:
            The updated Player, or None when the id is unknown

        Raises:
            PlayerValidationError: If the edited data is invalid
        """
        players = self.store.get_players()
        index = next((i for i, p in enumerate(players) if p.id == player_id), None)
        if index is None:
            return None

        current = players[index]
        updated = replace(
            current,
            name=current.name if name is None else name.strip(),
            positions=current.positions if positions is None else self.normalize_positions(positions),
            membership=current.membership if membership is None else self._parse_membership(membership),
        )
        errors = self.validate_player_data(updated, players)
        if errors:
            raise PlayerValidationError(f"Player validation failed: {'; '.join(errors)}")

        players[index] = updated
        self.store.set_players(players)
        return updated

    def delete_player(self, player_id: str) -> bool:
        """
        Remove a player and their attendance record.

        Returns:
            True if the player existed
        """
        players = self.store.get_players()
        remaining = [p for p in players if p.id != player_id]
        if len(remaining) == len(players):
            return False

        self.store.set_players(remaining)
        attendance = self.store.get_attendance()
        self.store.set_attendance([r for r in attendance if r.player_id != player_id])
        logger.info("Deleted player %s", player_id)
        return True

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.store.get_players() if p.id == player_id), None)

    def list_players(self) -> List[Player]:
        return self.store.get_players()

    def generate_demo_roster(self, rng: Optional[random.Random] = None) -> List[Player]:
        """
        Replace all data with 30 fictitious players.

        History, attendance and the current match are cleared so that no
        record refers to players that no longer exist.
        """
        rng = rng or random.Random()
        names = iter(DEMO_NAMES)
        players: List[Player] = []
        for count, positions in DEMO_DISTRIBUTION:
            for _ in range(count):
                name = next(names, None)
                if name is None:
                    break
                monthly = rng.random() < DEMO_MONTHLY_SHARE
                players.append(Player(
                    id=new_player_id(),
                    name=name,
                    positions=list(positions),
                    membership=MembershipType.MONTHLY if monthly else MembershipType.PAY_PER_DAY,
                ))
        rng.shuffle(players)

        self.store.set_players(players)
        self.store.set_history([])
        self.store.set_attendance([])
        self.store.set_current_match(None)
        logger.info("Generated demo roster with %s players", len(players))
        return players

    def reset_all(self) -> None:
        """Full data reset: players, attendance, history, settings and match."""
        self.store.clear()
