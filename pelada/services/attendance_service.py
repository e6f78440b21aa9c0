"""Arrival-order attendance for the current session."""

import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models import AttendanceRecord, Player
from ..utils import now_ts
from .persistence_service import RosterStore

logger = logging.getLogger(__name__)


@dataclass
class AttendanceView:
    """Players split into checked-in (arrival order) and absent (by name)."""
    present: List[Player] = field(default_factory=list)
    absent: List[Player] = field(default_factory=list)


def name_sort_key(name: str) -> tuple:
    """Case- and accent-insensitive key for alphabetical ordering."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), name)


def arrival_map(attendance: List[AttendanceRecord]) -> Dict[str, float]:
    return {record.player_id: record.arrival_ts for record in attendance}


def order_attendance(players: List[Player], attendance: List[AttendanceRecord]) -> AttendanceView:
    """
    Split the roster into present and absent players.

    Present players are sorted by arrival time (ties keep roster order),
    absent players by name. Pure function.
    """
    arrivals = arrival_map(attendance)
    present = sorted(
        (p for p in players if p.id in arrivals),
        key=lambda p: arrivals[p.id],
    )
    absent = sorted(
        (p for p in players if p.id not in arrivals),
        key=lambda p: name_sort_key(p.name),
    )
    return AttendanceView(present=present, absent=absent)


class AttendanceService:
    """Check-in/check-out of players for the current session."""

    def __init__(self, store: RosterStore):
        self.store = store

    def toggle(self, player_id: str) -> Optional[bool]:
        """
        Check a player in, or out when already present.

        Returns:
            True if the player is now present, False if checked out,
            None when the id is not registered
        """
        if not any(p.id == player_id for p in self.store.get_players()):
            return None

        records = self.store.get_attendance()
        if any(r.player_id == player_id for r in records):
            records = [r for r in records if r.player_id != player_id]
            self.store.set_attendance(records)
            return False

        records.append(AttendanceRecord(player_id=player_id, arrival_ts=now_ts()))
        self.store.set_attendance(records)
        return True

    def ordered_view(self) -> AttendanceView:
        return order_attendance(self.store.get_players(), self.store.get_attendance())

    def present_players(self) -> List[Player]:
        """Checked-in players in arrival order."""
        return self.ordered_view().present

    def arrival_map(self) -> Dict[str, float]:
        return arrival_map(self.store.get_attendance())

    def clear(self) -> None:
        """End the session: nobody is checked in any more."""
        self.store.set_attendance([])
