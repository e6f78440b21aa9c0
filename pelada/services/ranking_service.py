"""Ranking helpers: fold finished matches into player stats and rank them."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Sequence

from ..models import (
    MatchResult, Player, PlayerMatchLine, PlayerReport, PlayerStats, RankingEntry,
    Team, Winner, newest_first
)
from ..utils.constants import POINTS_DRAW, POINTS_LOSS, POINTS_PRESENT_ON_DRAW, POINTS_WIN


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


def ranking_key(player: Player) -> tuple:
    """Points desc, wins desc, then fewer matches first."""
    return (-player.stats.points, -player.stats.wins, player.stats.matches_played)


class RankingAggregator:
    """
    Apply the scoring rule of a finished match to the registry.

    Participants score 3 for a win, 1 for a draw and 0 for a loss. Players
    who were checked in but left off both rosters get 1 point on a draw.
    """

    def updated_stats(self, stats: PlayerStats, side: Team, winner: Winner) -> PlayerStats:
        """Stats of a participant after one more match."""
        stats = replace(stats, matches_played=stats.matches_played + 1)
        if winner is Winner.DRAW:
            return replace(stats, draws=stats.draws + 1, points=stats.points + POINTS_DRAW)
        if winner.value == side.value:
            return replace(stats, wins=stats.wins + 1, points=stats.points + POINTS_WIN)
        return replace(stats, losses=stats.losses + 1, points=stats.points + POINTS_LOSS)

    def apply_result(
        self,
        players: Sequence[Player],
        result: MatchResult,
        present_ids: Iterable[str],
    ) -> List[Player]:
        """
        Return the whole registry with stats updated for ``result``.

        Args:
            players: Every registered player, not just participants
            result: The match that just finished
            present_ids: Ids checked in for the session
        """
        present = set(present_ids)
        updated: List[Player] = []
        for player in players:
            side = result.side_of(player.id)
            if side is None:
                if result.winner is Winner.DRAW and player.id in present:
                    stats = replace(player.stats, points=player.stats.points + POINTS_PRESENT_ON_DRAW)
                    updated.append(replace(player, stats=stats))
                else:
                    updated.append(player)
                continue
            updated.append(replace(player, stats=self.updated_stats(player.stats, side, result.winner)))
        return updated

    def rank(self, players: Sequence[Player], history: Sequence[MatchResult] = ()) -> List[RankingEntry]:
        """Ranking table rows, best first."""
        total = len(history)
        return [
            RankingEntry(
                rank=index + 1,
                player=player,
                attendance_rate=_percent(player.stats.matches_played, total),
            )
            for index, player in enumerate(sorted(players, key=ranking_key))
        ]

    def player_report(self, player: Player, history: Sequence[MatchResult]) -> PlayerReport:
        """Win rate, attendance rate and match log of one player."""
        lines: List[PlayerMatchLine] = []
        for match in newest_first(list(history)):
            side = match.side_of(player.id)
            if side is None:
                continue
            own = match.score_a if side is Team.A else match.score_b
            opponent = match.score_b if side is Team.A else match.score_a
            if match.winner is Winner.DRAW:
                outcome = "D"
            elif match.winner.value == side.value:
                outcome = "W"
            else:
                outcome = "L"
            lines.append(PlayerMatchLine(
                match_id=match.id,
                date=match.date,
                result=outcome,
                team_score=own,
                opponent_score=opponent,
            ))

        return PlayerReport(
            player=player,
            win_rate=_percent(player.stats.wins, player.stats.matches_played),
            attendance_rate=_percent(player.stats.matches_played, len(history)),
            total_matches_recorded=len(history),
            matches=lines,
        )
