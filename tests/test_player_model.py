"""
Unit tests for the Player, match and settings models.

Tests serialization, legacy label handling and snapshot independence.
"""
import unittest

from pelada.models import (
    AttendanceRecord, CurrentMatchState, MatchResult, MembershipType, Player,
    PlayerStats, Position, Settings, Team, Winner, newest_first, parse_tactical_schema
)


def make_player(player_id, name=None, positions=(Position.MIDFIELDER,), membership=MembershipType.MONTHLY):
    return Player(id=player_id, name=name or player_id, positions=list(positions), membership=membership)


class TestPlayerModel(unittest.TestCase):
    """Test cases for Player model."""

    def test_player_round_trip(self):
        player = Player(
            id="p1",
            name="Lucas",
            positions=[Position.DEFENDER, Position.FULLBACK],
            membership=MembershipType.PAY_PER_DAY,
            stats=PlayerStats(matches_played=4, wins=2, draws=1, losses=1, points=7),
        )
        restored = Player.from_dict(player.to_dict())
        self.assertEqual(restored, player)

    def test_legacy_labels_are_accepted(self):
        data = {
            "id": "p1",
            "name": "Pedro",
            "positions": ["Goleiro", "Atacante"],
            "type": "Diarista",
            "stats": {"matches": 3, "wins": 1, "draws": 1, "losses": 1, "points": 4},
        }
        player = Player.from_dict(data)

        self.assertEqual(player.positions, [Position.GOALKEEPER, Position.FORWARD])
        self.assertEqual(player.membership, MembershipType.PAY_PER_DAY)
        self.assertEqual(player.stats.matches_played, 3)
        self.assertTrue(player.is_goalkeeper())
        self.assertFalse(player.is_monthly())

    def test_unknown_position_raises(self):
        with self.assertRaises(ValueError):
            Position.parse("Libero")

    def test_missing_stats_default_to_zero(self):
        player = Player.from_dict({"id": "p1", "name": "Caio", "positions": ["Forward"]})
        self.assertEqual(player.stats, PlayerStats())
        self.assertEqual(player.membership, MembershipType.MONTHLY)

    def test_snapshot_is_independent(self):
        player = make_player("p1")
        snapshot = player.snapshot()
        player.name = "Renamed"
        player.positions.append(Position.FORWARD)
        player.stats.points = 10

        self.assertEqual(snapshot.name, "p1")
        self.assertEqual(snapshot.positions, [Position.MIDFIELDER])
        self.assertEqual(snapshot.stats.points, 0)

    def test_attendance_record_camel_case(self):
        record = AttendanceRecord.from_dict({"playerId": "p1", "arrivalTime": 1500})
        self.assertEqual(record, AttendanceRecord(player_id="p1", arrival_ts=1500.0))
        with self.assertRaises(ValueError):
            AttendanceRecord.from_dict({"arrival_ts": 1})


class TestMatchModels(unittest.TestCase):
    """Test cases for CurrentMatchState and MatchResult."""

    def setUp(self):
        self.match = CurrentMatchState(
            team_a=[make_player("a1"), make_player("a2")],
            team_b=[make_player("b1"), make_player("b2")],
            score_a=1,
            starters=["a1", "b2"],
        )

    def test_starters_and_reserves(self):
        self.assertEqual([p.id for p in self.match.starters_of(Team.A)], ["a1"])
        self.assertEqual([p.id for p in self.match.reserves_of(Team.A)], ["a2"])
        self.assertEqual([p.id for p in self.match.reserves_of(Team.B)], ["b1"])
        self.assertEqual(self.match.team_of("b1"), Team.B)
        self.assertIsNone(self.match.team_of("zz"))

    def test_match_state_json_round_trip(self):
        restored = CurrentMatchState.from_json(self.match.to_json())
        self.assertEqual(restored, self.match)

    def test_match_state_clamps_negative_scores(self):
        restored = CurrentMatchState.from_json({"scoreA": -2, "scoreB": 3})
        self.assertEqual((restored.score_a, restored.score_b), (0, 3))

    def test_winner_from_scores(self):
        self.assertIs(Winner.from_scores(2, 1), Winner.A)
        self.assertIs(Winner.from_scores(0, 1), Winner.B)
        self.assertIs(Winner.from_scores(2, 2), Winner.DRAW)

    def test_result_round_trip_and_sides(self):
        result = MatchResult(
            id="m1",
            date="2024-05-01T20:00:00+00:00",
            team_a=(make_player("a1"),),
            team_b=(make_player("b1"),),
            score_a=0,
            score_b=0,
            winner=Winner.DRAW,
            subbed_out=("a1",),
        )
        restored = MatchResult.from_dict(result.to_dict())

        self.assertEqual(restored, result)
        self.assertIs(restored.side_of("b1"), Team.B)
        self.assertFalse(restored.played("zz"))

    def test_newest_first(self):
        older = MatchResult("m1", "2024-01-01T00:00:00+00:00", (), (), 0, 0, Winner.DRAW)
        newer = MatchResult("m2", "2024-02-01T00:00:00+00:00", (), (), 0, 0, Winner.DRAW)
        self.assertEqual([m.id for m in newest_first([older, newer])], ["m2", "m1"])


class TestSettingsModel(unittest.TestCase):
    """Test cases for Settings validation and auto-correction."""

    def test_defaults_are_valid(self):
        settings = Settings()
        self.assertEqual(settings.validate(), [])
        self.assertEqual(settings.quota().outfield_total, 9)

    def test_parse_tactical_schema(self):
        quota = parse_tactical_schema("2-2-3-2")
        self.assertEqual((quota.defenders, quota.fullbacks, quota.midfielders, quota.forwards), (2, 2, 3, 2))
        for bad in ("2-2-3", "a-b-c-d", "2--1-3-2", ""):
            with self.assertRaises(ValueError):
                parse_tactical_schema(bad)

    def test_invalid_settings_report_errors(self):
        settings = Settings(players_per_team=12, tactical_schema="x", theme="blue")
        self.assertEqual(len(settings.validate()), 3)

    def test_team_size_change_switches_schema(self):
        settings = Settings().with_players_per_team(5)
        self.assertEqual(settings.players_per_team, 5)
        self.assertEqual(settings.tactical_schema, "1-0-2-1")

    def test_team_size_change_keeps_catalogued_schema(self):
        settings = Settings(players_per_team=10, tactical_schema="2-2-3-2").with_players_per_team(10)
        self.assertEqual(settings.tactical_schema, "2-2-3-2")

    def test_team_size_without_catalogue_uses_empty_schema(self):
        settings = Settings().with_players_per_team(4)
        self.assertEqual(settings.tactical_schema, "0-0-0-0")

    def test_from_dict_accepts_camel_case(self):
        settings = Settings.from_dict({"playersPerTeam": 7, "tacticalSchema": "1-1-2-2", "autoBalance": False})
        self.assertEqual(settings.players_per_team, 7)
        self.assertEqual(settings.tactical_schema, "1-1-2-2")
        self.assertFalse(settings.auto_balance)
