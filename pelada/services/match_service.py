"""
Match session service for the Pelada session manager.

MatchSession owns the single in-progress match: it is created from the
balancer (or the AI proposal), mutated by score changes, halftime rotation,
manual swaps and roster edits, and finished into a MatchResult that updates
the ranking and ends the session.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..models import CurrentMatchState, MatchResult, Player, Team, Winner
from ..utils import now_iso
from ..utils.constants import MIN_PLAYERS_TO_START
from .ai_balancer_client import AiBalancingClient
from .attendance_service import arrival_map, order_attendance
from .balancer_service import TeamBalancer
from .errors import ExternalServiceError
from .persistence_service import RosterStore
from .ranking_service import RankingAggregator
from .substitution_service import SubstitutionPlan, SubstitutionPrioritizer

logger = logging.getLogger(__name__)


class MatchPhase(Enum):
    NO_MATCH = "no_match"
    IN_PROGRESS = "in_progress"


@dataclass
class MatchStartOutcome:
    """Result of starting a match, including how the rosters were built."""
    match: CurrentMatchState
    used_ai: bool
    warning: Optional[str] = None


def resolve_names(names: Sequence[str], present: Sequence[Player], taken: set) -> List[Player]:
    """
    Map display names back to present players by exact match.

    Unknown names and players already placed (``taken``) are dropped;
    ``taken`` is updated with the ids resolved here.
    """
    resolved = []
    for name in names:
        player = next((p for p in present if p.name == name and p.id not in taken), None)
        if player is None:
            continue
        taken.add(player.id)
        resolved.append(player)
    return resolved


class MatchSession:
    """
    State machine around the current match: NO_MATCH <-> IN_PROGRESS.

    Every mutation is a no-op returning a falsy value when no match is in
    progress; every successful mutation is written to the store at once.
    """

    def __init__(
        self,
        store: RosterStore,
        balancer: Optional[TeamBalancer] = None,
        prioritizer: Optional[SubstitutionPrioritizer] = None,
        aggregator: Optional[RankingAggregator] = None,
        ai_client: Optional[AiBalancingClient] = None,
    ):
        self.store = store
        self.balancer = balancer or TeamBalancer()
        self.prioritizer = prioritizer or SubstitutionPrioritizer()
        self.aggregator = aggregator or RankingAggregator()
        self.ai_client = ai_client
        self.current: Optional[CurrentMatchState] = store.get_current_match()
        self._selected_starter: Optional[str] = None
        self._selected_reserve: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def phase(self) -> MatchPhase:
        return MatchPhase.IN_PROGRESS if self.current is not None else MatchPhase.NO_MATCH

    @property
    def is_active(self) -> bool:
        return self.current is not None

    def _persist(self) -> None:
        self.store.set_current_match(self.current)

    def _present_players(self) -> List[Player]:
        return order_attendance(self.store.get_players(), self.store.get_attendance()).present

    def can_start(self) -> bool:
        return self.current is None and len(self._present_players()) >= MIN_PLAYERS_TO_START

    # ------------------------------------------------------------------
    # NO_MATCH -> IN_PROGRESS
    # ------------------------------------------------------------------
    def start_match(self, use_ai: bool = False) -> Optional[MatchStartOutcome]:
        """
        Balance the checked-in players into a new match.

        Args:
            use_ai: Ask the AI service for the split first; any failure
                falls back to the deterministic balancer

        Returns:
            The outcome, or None when a match is already in progress or
            fewer than two players are checked in
        """
        if self.current is not None:
            logger.info("Start refused: a match is already in progress")
            return None

        present = self._present_players()
        if len(present) < MIN_PLAYERS_TO_START:
            logger.info("Start refused: %s player(s) checked in", len(present))
            return None

        settings = self.store.get_settings()
        history = self.store.get_history()
        match = None
        used_ai = False
        warning = None

        if use_ai:
            try:
                match = self._start_with_ai(present, settings, history)
                used_ai = True
            except ExternalServiceError as e:
                warning = f"AI balancing unavailable, used standard draw instead: {e}"
                logger.warning("Falling back to standard balancing: %s", e)

        if match is None:
            match = self.balancer.balance(present, settings, history)
            if match is None:
                return None

        self.current = match
        self.clear_selection()
        self._persist()
        logger.info(
            "Match started with %s x %s players (ai=%s)",
            len(match.team_a), len(match.team_b), used_ai,
        )
        return MatchStartOutcome(match=match, used_ai=used_ai, warning=warning)

    def _start_with_ai(self, present, settings, history) -> CurrentMatchState:
        if self.ai_client is None:
            raise ExternalServiceError("AI balancing is not configured")

        proposal = self.ai_client.generate_teams(
            present, settings.players_per_team, history, settings.tactical_schema
        )
        taken: set = set()
        team_a = resolve_names(proposal.team_a, present, taken)
        team_b = resolve_names(proposal.team_b, present, taken)
        dropped = len(proposal.team_a) + len(proposal.team_b) - len(team_a) - len(team_b)
        if dropped:
            logger.warning("Dropped %s unresolved name(s) from the AI proposal", dropped)
        if not team_a and not team_b:
            raise ExternalServiceError("AI proposal did not name any present player")

        return self.balancer.build_match(team_a, team_b, present, settings, proposal.reasoning)

    # ------------------------------------------------------------------
    # IN_PROGRESS self-transitions
    # ------------------------------------------------------------------
    def update_score(self, team: Team, delta: int) -> bool:
        """Change one team's score, never below zero."""
        if self.current is None:
            return False
        if team is Team.A:
            self.current.score_a = max(0, self.current.score_a + delta)
        else:
            self.current.score_b = max(0, self.current.score_b + delta)
        self._persist()
        return True

    def suggestions(self) -> Dict[Team, SubstitutionPlan]:
        """Leave ranking of each team's starters; empty without a match."""
        if self.current is None:
            return {}
        return self.prioritizer.plan(self.current, self.store.get_history())

    def _reserves_by_arrival(self, team: Team) -> List[Player]:
        arrivals = arrival_map(self.store.get_attendance())
        reserves = self.current.reserves_of(team)
        return sorted(reserves, key=lambda p: arrivals.get(p.id, float("inf")))

    def halftime(self) -> Optional[Dict[Team, int]]:
        """
        Rotate reserves in for the highest-priority starters of each team.

        Reserve i (arrival order) replaces the i-th starter of the team's
        leave ranking, for min(reserves, starters) pairs.

        Returns:
            Number of swaps per team, or None without a match
        """
        if self.current is None:
            return None

        plans = self.suggestions()
        swaps: Dict[Team, int] = {}
        for team in Team:
            reserves = self._reserves_by_arrival(team)
            queue = plans[team].queue
            count = min(len(reserves), len(queue))
            for leaving, entering in zip(queue[:count], reserves[:count]):
                self._substitute(leaving.player_id, entering.id)
            swaps[team] = count

        self.current.reasoning = (
            f"Halftime done: {swaps[Team.A]} swap(s) in Team A and "
            f"{swaps[Team.B]} in Team B, by substitution priority."
        )
        self.clear_selection()
        self._persist()
        logger.info("Halftime swaps A=%s B=%s", swaps[Team.A], swaps[Team.B])
        return swaps

    def _substitute(self, starter_id: str, reserve_id: str) -> None:
        self.current.starters = [i for i in self.current.starters if i != starter_id]
        self.current.starters.append(reserve_id)
        if starter_id not in self.current.subbed_out:
            self.current.subbed_out.append(starter_id)

    def swap(self, starter_id: str, reserve_id: str) -> bool:
        """
        Swap a starter with a reserve, possibly from the other team.

        Across teams the two players also exchange roster membership before
        the reserve takes the starter's place.

        Returns:
            True if the swap was applied
        """
        match = self.current
        if match is None:
            return False
        starter_team = match.team_of(starter_id)
        reserve_team = match.team_of(reserve_id)
        if starter_team is None or reserve_team is None:
            return False
        if not match.is_starter(starter_id) or match.is_starter(reserve_id):
            return False

        if starter_team is not reserve_team:
            starter = match.find_player(starter_id)
            reserve = match.find_player(reserve_id)
            starter_roster = match.roster(starter_team)
            reserve_roster = match.roster(reserve_team)
            starter_roster[:] = [p for p in starter_roster if p.id != starter_id] + [reserve]
            reserve_roster[:] = [p for p in reserve_roster if p.id != reserve_id] + [starter]

        self._substitute(starter_id, reserve_id)
        self.clear_selection()
        self._persist()
        return True

    # Pending manual swap selection
    def select_starter(self, player_id: Optional[str]) -> bool:
        """Select (or, when selected again, clear) the starter to take off."""
        if self.current is None:
            return False
        if player_id is None or player_id == self._selected_starter:
            self._selected_starter = None
            return True
        if not self.current.is_starter(player_id):
            return False
        self._selected_starter = player_id
        return True

    def select_reserve(self, player_id: Optional[str]) -> bool:
        """Select (or, when selected again, clear) the reserve to bring on."""
        if self.current is None:
            return False
        if player_id is None or player_id == self._selected_reserve:
            self._selected_reserve = None
            return True
        if self.current.team_of(player_id) is None or self.current.is_starter(player_id):
            return False
        self._selected_reserve = player_id
        return True

    def clear_selection(self) -> None:
        self._selected_starter = None
        self._selected_reserve = None

    @property
    def selection(self) -> tuple:
        return self._selected_starter, self._selected_reserve

    def commit_swap(self) -> bool:
        """Apply the pending selection; needs one starter and one reserve."""
        if self._selected_starter is None or self._selected_reserve is None:
            return False
        return self.swap(self._selected_starter, self._selected_reserve)

    def add_to_roster(self, player_id: str, team: Optional[Team] = None) -> bool:
        """
        Add a registered player who arrived late.

        The player joins ``team`` (default: the smaller roster, A on a tie)
        and starts only when that team has a free starter slot.
        """
        match = self.current
        if match is None or match.team_of(player_id) is not None:
            return False
        player = next((p for p in self.store.get_players() if p.id == player_id), None)
        if player is None:
            return False

        if team is None:
            team = Team.B if len(match.team_b) < len(match.team_a) else Team.A
        match.roster(team).append(player.snapshot())
        if len(match.starters_of(team)) < self.store.get_settings().players_per_team:
            match.starters.append(player_id)
        self._persist()
        return True

    def remove_from_roster(self, player_id: str) -> bool:
        """Remove a reserve from the match; starters must be swapped out first."""
        match = self.current
        if match is None:
            return False
        team = match.team_of(player_id)
        if team is None or match.is_starter(player_id):
            return False
        roster = match.roster(team)
        roster[:] = [p for p in roster if p.id != player_id]
        if self._selected_reserve == player_id:
            self._selected_reserve = None
        self._persist()
        return True

    # ------------------------------------------------------------------
    # IN_PROGRESS -> NO_MATCH
    # ------------------------------------------------------------------
    def finish(self) -> Optional[MatchResult]:
        """
        Record the match, update every player's stats and end the session.

        Returns:
            The stored MatchResult, or None without a match or on failure
        """
        match = self.current
        if match is None:
            return None

        previous_history = self.store.get_history()
        previous_players = self.store.get_players()
        previous_attendance = self.store.get_attendance()
        try:
            if match.team_a is None or match.team_b is None:
                logger.warning("Finishing a match with a missing roster")
            team_a = list(match.team_a or [])
            team_b = list(match.team_b or [])

            result = MatchResult(
                id=str(uuid.uuid4()),
                date=now_iso(),
                team_a=tuple(p.snapshot() for p in team_a),
                team_b=tuple(p.snapshot() for p in team_b),
                score_a=match.score_a,
                score_b=match.score_b,
                winner=Winner.from_scores(match.score_a, match.score_b),
                subbed_out=tuple(match.subbed_out or []),
            )

            present_ids = [r.player_id for r in previous_attendance]
            players = self.aggregator.apply_result(previous_players, result, present_ids)

            self.store.set_history(previous_history + [result])
            self.store.set_players(players)
            self.store.set_attendance([])
            self.current = None
            self.clear_selection()
            self._persist()
        except Exception:
            logger.exception("Finishing the match failed; it stays in progress")
            self._rollback_finish(match, previous_history, previous_players, previous_attendance)
            return None

        logger.info(
            "Match finished %s x %s (winner %s)",
            result.score_a, result.score_b, result.winner.value,
        )
        return result

    def _rollback_finish(self, match, history, players, attendance) -> None:
        try:
            self.store.set_history(history)
            self.store.set_players(players)
            self.store.set_attendance(attendance)
            self.current = match
            self._persist()
        except Exception:
            logger.exception("Could not restore the stored state after a failed finish")

    def reset(self) -> bool:
        """Discard the current match without recording a result."""
        if self.current is None:
            return False
        self.current = None
        self.clear_selection()
        self._persist()
        logger.info("Current match discarded")
        return True
