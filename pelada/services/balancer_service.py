"""Team balancing: split the checked-in pool into two full rosters."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import (
    CurrentMatchState, MatchResult, Player, Position, Settings, Team, newest_first,
    parse_tactical_schema
)
from ..utils import now_iso
from ..utils.constants import FALLBACK_TACTICAL_SCHEMA, MIN_PLAYERS_TO_START, REPETITION_HISTORY_WINDOW

logger = logging.getLogger(__name__)

# Fixed order of the positional passes after the goalkeepers
QUOTA_POSITIONS = (Position.DEFENDER, Position.FULLBACK, Position.MIDFIELDER, Position.FORWARD)


def arrival_order(present: Sequence[Player]) -> Dict[str, int]:
    """Map player id to its index in the arrival-ordered pool."""
    return {player.id: index for index, player in enumerate(present)}


def repetition_score(
    candidate: Player,
    team_members: Sequence[Player],
    recent_history: Sequence[MatchResult],
) -> int:
    """
    Count past co-occurrences of ``candidate`` with the members of a team.

    For each match in ``recent_history`` where the candidate played, every
    member of ``team_members`` who was on the candidate's side adds 1.
    """
    if not recent_history or not team_members:
        return 0

    member_ids = {p.id for p in team_members}
    score = 0
    for match in recent_history:
        side = match.side_of(candidate.id)
        if side is None:
            continue
        score += sum(1 for p in match.side(side) if p.id in member_ids)
    return score


def determine_starters(roster: Sequence[Player], limit: int, order: Dict[str, int]) -> List[str]:
    """
    First ``limit`` players of the roster by arrival.

    Players missing from ``order`` sort first, as a zero arrival time would.
    """
    by_arrival = sorted(roster, key=lambda p: order.get(p.id, -1))
    return [p.id for p in by_arrival[:max(0, limit)]]


class TeamBalancer:
    """
    Partitions checked-in players into teams A and B.

    Goalkeepers are spread first, then each outfield position in turn, then
    whoever is left; every placement goes to the smaller team, then to the
    team the player has shared the field with least in recent matches.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _shuffled(self, players: Sequence[Player]) -> List[Player]:
        copy = list(players)
        self.rng.shuffle(copy)
        return copy

    def best_fit_team(
        self,
        candidate: Player,
        team_a: Sequence[Player],
        team_b: Sequence[Player],
        recent_history: Sequence[MatchResult],
    ) -> Team:
        """Smaller team first, then lower repetition score, then a coin toss."""
        if len(team_a) < len(team_b):
            return Team.A
        if len(team_b) < len(team_a):
            return Team.B

        score_a = repetition_score(candidate, team_a, recent_history)
        score_b = repetition_score(candidate, team_b, recent_history)
        if score_a < score_b:
            return Team.A
        if score_b < score_a:
            return Team.B

        return Team.A if self.rng.random() < 0.5 else Team.B

    def split(
        self,
        present: Sequence[Player],
        history: Sequence[MatchResult],
    ) -> Tuple[List[Player], List[Player]]:
        """
        Distribute the whole pool between two rosters.

        Args:
            present: Checked-in players in arrival order
            history: Finished matches, any order

        Returns:
            (team_a, team_b) holding every pool player exactly once
        """
        recent = newest_first(list(history))[:REPETITION_HISTORY_WINDOW]
        pool = self._shuffled(present)
        rosters: Dict[Team, List[Player]] = {Team.A: [], Team.B: []}

        def assign(player: Player, team: Team) -> None:
            rosters[team].append(player)
            pool.remove(player)

        def place(player: Player) -> None:
            assign(player, self.best_fit_team(player, rosters[Team.A], rosters[Team.B], recent))

        for keeper in [p for p in pool if p.is_goalkeeper()]:
            keepers_a = sum(1 for p in rosters[Team.A] if p.is_goalkeeper())
            keepers_b = sum(1 for p in rosters[Team.B] if p.is_goalkeeper())
            if keepers_a == 0 and keepers_b > 0:
                assign(keeper, Team.A)
            elif keepers_b == 0 and keepers_a > 0:
                assign(keeper, Team.B)
            else:
                place(keeper)

        for position in QUOTA_POSITIONS:
            for candidate in self._shuffled([p for p in pool if p.plays(position)]):
                place(candidate)

        while pool:
            place(pool[-1])

        return rosters[Team.A], rosters[Team.B]

    def build_match(
        self,
        team_a: Sequence[Player],
        team_b: Sequence[Player],
        present: Sequence[Player],
        settings: Settings,
        reasoning: str,
    ) -> CurrentMatchState:
        """
        Create a fresh match from two rosters.

        Starters are recomputed from arrival order whatever produced the
        rosters, and every player is stored as a snapshot.
        """
        order = arrival_order(present)
        limit = settings.players_per_team
        starters = determine_starters(team_a, limit, order) + determine_starters(team_b, limit, order)
        return CurrentMatchState(
            team_a=[p.snapshot() for p in team_a],
            team_b=[p.snapshot() for p in team_b],
            score_a=0,
            score_b=0,
            starters=starters,
            subbed_out=[],
            start_time=now_iso(),
            reasoning=reasoning,
        )

    def balance(
        self,
        present: Sequence[Player],
        settings: Settings,
        history: Sequence[MatchResult],
    ) -> Optional[CurrentMatchState]:
        """
        Balance the checked-in pool into a new match.

        Args:
            present: Checked-in players in arrival order
            settings: Current settings (team size, tactical schema)
            history: Finished matches

        Returns:
            The new match, or None when fewer than two players are present
        """
        if len(present) < MIN_PLAYERS_TO_START:
            logger.info("Balancing refused: %s player(s) present", len(present))
            return None

        team_a, team_b = self.split(present, history)
        try:
            shape = parse_tactical_schema(settings.tactical_schema or FALLBACK_TACTICAL_SCHEMA)
        except ValueError:
            shape = parse_tactical_schema(FALLBACK_TACTICAL_SCHEMA)
        reasoning = (
            f"Full squad distributed: {len(team_a)} in Team A, {len(team_b)} in Team B. "
            f"Target shape {shape.label()} per team. "
            f"Starters chosen by arrival order, up to {settings.players_per_team} per team."
        )
        logger.info("Balanced %s players into %s x %s", len(present), len(team_a), len(team_b))
        return self.build_match(team_a, team_b, present, settings, reasoning)
