"""Substitution priority: who should leave the field next."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..models import CurrentMatchState, MatchResult, Player, Team, newest_first
from ..utils.constants import (
    DAY_RATE_BONUS, FULL_MATCH_BONUS, GOALKEEPER_SCORE, LOW_ATTENDANCE_BONUS,
    LOW_ATTENDANCE_MIN_HISTORY, LOW_ATTENDANCE_RATE, SHOULD_LEAVE_THRESHOLD,
    SUBBED_OUT_PROTECTION, TIE_BREAK_SPAN
)

REASON_GOALKEEPER = "Goalkeeper (never substituted)"
REASON_DAY_RATE = "Pay-per-day"
REASON_PROTECTED = "Subbed out last match (protected)"
REASON_FULL_MATCH = "Played all of last match"
REASON_LOW_ATTENDANCE = "Low attendance"
REASON_ROTATION = "Rotation"


@dataclass
class LeavePriority:
    """Leave score of one starter; higher leaves sooner."""
    player_id: str
    score: float
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return " + ".join(self.reasons) or REASON_ROTATION

    @property
    def protected(self) -> bool:
        return REASON_PROTECTED in self.reasons

    @property
    def eligible(self) -> bool:
        """Goalkeepers and protected players are never suggested."""
        return self.score > SHOULD_LEAVE_THRESHOLD


@dataclass
class SubstitutionPlan:
    """
    Per-team ranking of the starters.

    Attributes:
        team: Team the plan belongs to
        queue: Every starter, highest leave score first
        should_leave: Starters flagged to leave, in rank order
    """
    team: Team
    queue: List[LeavePriority] = field(default_factory=list)
    should_leave: List[LeavePriority] = field(default_factory=list)

    def rank_of(self, player_id: str) -> Optional[int]:
        """1-based rank among the flagged starters, or None."""
        for index, item in enumerate(self.should_leave):
            if item.player_id == player_id:
                return index + 1
        return None


class SubstitutionPrioritizer:
    """Scores the starters of a live match against the match history."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def score_player(
        self,
        player: Player,
        last_match: Optional[MatchResult],
        total_matches: int,
    ) -> LeavePriority:
        """
        Leave score of a single starter.

        Args:
            player: Starter snapshot from the match roster
            last_match: Most recent finished match, if any
            total_matches: Number of finished matches on record
        """
        if player.is_goalkeeper():
            return LeavePriority(player.id, GOALKEEPER_SCORE, [REASON_GOALKEEPER])

        score = 0.0
        reasons: List[str] = []

        if not player.is_monthly():
            score += DAY_RATE_BONUS
            reasons.append(REASON_DAY_RATE)

        if last_match is not None:
            if player.id in last_match.subbed_out:
                # Only monthly members are protected after coming off
                if player.is_monthly():
                    score += SUBBED_OUT_PROTECTION
                    reasons.append(REASON_PROTECTED)
            elif last_match.played(player.id):
                score += FULL_MATCH_BONUS
                reasons.append(REASON_FULL_MATCH)

        if player.is_monthly() and total_matches > LOW_ATTENDANCE_MIN_HISTORY:
            if player.stats.matches_played / total_matches < LOW_ATTENDANCE_RATE:
                score += LOW_ATTENDANCE_BONUS
                reasons.append(REASON_LOW_ATTENDANCE)

        score += self.rng.random() * TIE_BREAK_SPAN
        return LeavePriority(player.id, score, reasons)

    def score_starters(
        self,
        match: CurrentMatchState,
        history: Sequence[MatchResult],
    ) -> Dict[str, LeavePriority]:
        """Leave score of every starter of both teams, keyed by player id."""
        ordered = newest_first(list(history))
        last_match = ordered[0] if ordered else None
        scores: Dict[str, LeavePriority] = {}
        for team in Team:
            for player in match.starters_of(team):
                scores[player.id] = self.score_player(player, last_match, len(ordered))
        return scores

    def plan(
        self,
        match: CurrentMatchState,
        history: Sequence[MatchResult],
    ) -> Dict[Team, SubstitutionPlan]:
        """
        Rank the starters of each team.

        The top K of a team's queue (K = its reserve count) are flagged as
        should-leave, skipping anyone at or below the eligibility threshold.
        """
        scores = self.score_starters(match, history)
        plans: Dict[Team, SubstitutionPlan] = {}
        for team in Team:
            queue = sorted(
                (scores[p.id] for p in match.starters_of(team)),
                key=lambda item: item.score,
                reverse=True,
            )
            reserve_count = len(match.reserves_of(team))
            flagged = [item for item in queue[:reserve_count] if item.eligible]
            plans[team] = SubstitutionPlan(team=team, queue=queue, should_leave=flagged)
        return plans
