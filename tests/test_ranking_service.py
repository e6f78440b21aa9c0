"""Tests for ranking aggregation and player reports."""

import pytest

from pelada.models import MatchResult, Player, PlayerStats, Position, Winner
from pelada.services import RankingAggregator


def make_player(player_id, **stats):
    return Player(id=player_id, name=player_id, positions=[Position.FORWARD], stats=PlayerStats(**stats))


def finished(match_id, date, team_a, team_b, score_a, score_b):
    return MatchResult(
        match_id, date, tuple(team_a), tuple(team_b), score_a, score_b,
        Winner.from_scores(score_a, score_b),
    )


@pytest.fixture
def aggregator():
    return RankingAggregator()


def test_win_gives_three_points_to_each_winner(aggregator):
    p1, p2, p3, p4 = (make_player(f"P{i}") for i in range(1, 5))
    result = finished("m1", "2024-01-01T00:00:00+00:00", [p1, p2], [p3], 2, 1)

    updated = {p.id: p.stats for p in aggregator.apply_result([p1, p2, p3, p4], result, ["P1", "P2", "P3", "P4"])}

    assert updated["P1"] == PlayerStats(matches_played=1, wins=1, points=3)
    assert updated["P2"] == PlayerStats(matches_played=1, wins=1, points=3)
    assert updated["P3"] == PlayerStats(matches_played=1, losses=1, points=0)
    assert updated["P4"] == PlayerStats()


def test_draw_rewards_participants_and_present_bench(aggregator):
    p1, p2, p3, absent = (make_player(i) for i in ("P1", "P2", "P3", "absent"))
    result = finished("m1", "2024-01-01T00:00:00+00:00", [p1], [p2], 1, 1)

    updated = {p.id: p.stats for p in aggregator.apply_result([p1, p2, p3, absent], result, ["P1", "P2", "P3"])}

    assert updated["P1"] == PlayerStats(matches_played=1, draws=1, points=1)
    assert updated["P2"] == PlayerStats(matches_played=1, draws=1, points=1)
    assert updated["P3"] == PlayerStats(points=1)
    assert updated["absent"] == PlayerStats()


def test_apply_result_does_not_mutate_input(aggregator):
    p1, p2 = make_player("P1"), make_player("P2")
    result = finished("m1", "2024-01-01T00:00:00+00:00", [p1], [p2], 1, 0)

    aggregator.apply_result([p1, p2], result, [])

    assert p1.stats == PlayerStats()


def test_rank_orders_by_points_wins_then_fewer_matches(aggregator):
    players = [
        make_player("few_points", points=3, wins=1, matches_played=1),
        make_player("more_matches", points=9, wins=3, matches_played=5),
        make_player("fewer_matches", points=9, wins=3, matches_played=4),
        make_player("more_wins", points=9, wins=4, matches_played=9),
    ]
    history = [finished(f"m{i}", "2024-01-01T00:00:00+00:00", [], [], 0, 0) for i in range(10)]

    entries = aggregator.rank(players, history)

    assert [e.player.id for e in entries] == ["more_wins", "fewer_matches", "more_matches", "few_points"]
    assert [e.rank for e in entries] == [1, 2, 3, 4]
    assert entries[0].attendance_rate == 90


def test_rank_without_history_has_zero_attendance(aggregator):
    entries = aggregator.rank([make_player("P1")])
    assert entries[0].attendance_rate == 0


def test_player_report(aggregator):
    player = make_player("P1", matches_played=3, wins=2, losses=1, points=6)
    other = make_player("P2")
    history = [
        finished("m1", "2024-01-01T00:00:00+00:00", [player], [other], 2, 0),
        finished("m2", "2024-01-03T00:00:00+00:00", [other], [player], 1, 3),
        finished("m3", "2024-01-02T00:00:00+00:00", [player], [other], 0, 1),
        finished("m4", "2024-01-04T00:00:00+00:00", [other], [], 0, 0),
    ]

    report = aggregator.player_report(player, history)

    assert report.win_rate == 67
    assert report.attendance_rate == 75
    assert report.total_matches_recorded == 4
    assert [line.match_id for line in report.matches] == ["m2", "m3", "m1"]
    assert [line.result for line in report.matches] == ["W", "L", "W"]
    assert report.matches[0].score == "3 x 1"


def test_player_report_without_matches(aggregator):
    report = aggregator.player_report(make_player("P1"), [])
    assert report.win_rate == 0
    assert report.attendance_rate == 0
    assert report.matches == []
