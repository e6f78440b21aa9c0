"""Backup export/import of the whole store, plus CSV projections."""

from __future__ import annotations

import csv
import datetime as dt
import io
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..models import AttendanceRecord, CurrentMatchState, MatchResult, Player, Settings, Winner
from ..utils import now_iso
from ..utils.constants import EXPORT_VERSION
from .errors import ImportValidationError
from .persistence_service import RosterStore

logger = logging.getLogger(__name__)

PLAYER_CSV_HEADERS = ["Name", "Positions", "Membership", "Matches", "Wins", "Draws", "Losses", "Points"]
HISTORY_CSV_HEADERS = ["Date", "Team A", "Score A", "Team B", "Score B", "Winner"]


def _winner_label(winner: Winner) -> str:
    return "Draw" if winner is Winner.DRAW else f"Team {winner.value}"


def _display_date(match: MatchResult) -> str:
    if not match.timestamp:
        return match.date
    return dt.datetime.fromtimestamp(match.timestamp, tz=dt.timezone.utc).strftime("%Y-%m-%d %H:%M")


class DataExportService:
    """JSON snapshot of every entity kind, and CSV views for spreadsheets."""

    def __init__(self, store: RosterStore):
        self.store = store

    def snapshot(self) -> Dict[str, Any]:
        current = self.store.get_current_match()
        return {
            "version": EXPORT_VERSION,
            "exportDate": now_iso(),
            "players": [p.to_dict() for p in self.store.get_players()],
            "attendance": [r.to_dict() for r in self.store.get_attendance()],
            "history": [m.to_dict() for m in self.store.get_history()],
            "settings": self.store.get_settings().to_dict(),
            "currentMatch": current.to_json() if current is not None else None,
        }

    def export_json(self) -> str:
        return json.dumps(self.snapshot(), indent=2, ensure_ascii=False)

    @staticmethod
    def _write_csv(headers: List[str], rows: List[List[Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)
        csv_text = buffer.getvalue()
        buffer.close()
        return csv_text

    def export_players_csv(self) -> str:
        """One row per registered player with the cumulative stats."""
        rows = [
            [
                p.name,
                "; ".join(pos.value for pos in p.positions),
                p.membership.value,
                p.stats.matches_played,
                p.stats.wins,
                p.stats.draws,
                p.stats.losses,
                p.stats.points,
            ]
            for p in self.store.get_players()
        ]
        return self._write_csv(PLAYER_CSV_HEADERS, rows)

    def export_history_csv(self) -> str:
        """One row per finished match, in stored order."""
        rows = [
            [
                _display_date(m),
                "; ".join(p.name for p in m.team_a),
                m.score_a,
                "; ".join(p.name for p in m.team_b),
                m.score_b,
                _winner_label(m.winner),
            ]
            for m in self.store.get_history()
        ]
        return self._write_csv(HISTORY_CSV_HEADERS, rows)

    @staticmethod
    def validate_import(data: Any) -> None:
        """
        Check the structure of an exported snapshot.

        Raises:
            ImportValidationError: With the first problem found
        """
        if not isinstance(data, dict):
            raise ImportValidationError("Invalid data")
        if not data.get("version"):
            raise ImportValidationError("Version not found")
        if not isinstance(data.get("players"), list):
            raise ImportValidationError("Invalid player list")
        if not isinstance(data.get("history"), list):
            raise ImportValidationError("Invalid match history")

        for player in data["players"]:
            if (
                not isinstance(player, dict)
                or not player.get("id")
                or not player.get("name")
                or not isinstance(player.get("positions"), list)
                or not (player.get("membership") or player.get("type"))
                or not isinstance(player.get("stats"), dict)
            ):
                raise ImportValidationError("Invalid player structure")

    def import_json(self, text: str) -> Tuple[bool, Optional[str]]:
        """
        Replace the stored data with an exported snapshot.

        Nothing is written unless the whole payload parses.

        Returns:
            (True, None) on success, (False, reason) otherwise
        """
        try:
            data = json.loads(text)
            self.validate_import(data)
            players = [Player.from_dict(p) for p in data["players"]]
            attendance = [AttendanceRecord.from_dict(r) for r in data.get("attendance") or []]
            history = [MatchResult.from_dict(m) for m in data["history"]]
            settings = Settings.from_dict(data["settings"]) if data.get("settings") else None
            raw_match = data.get("currentMatch", data.get("current_match"))
            current = CurrentMatchState.from_json(raw_match) if raw_match else None
        except ImportValidationError as e:
            return False, str(e)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Rejected import: %s", e)
            return False, f"Could not import data: {e}"

        self.store.set_players(players)
        self.store.set_attendance(attendance)
        self.store.set_history(history)
        if settings is not None:
            self.store.set_settings(settings)
        self.store.set_current_match(current)
        logger.info("Imported %s players and %s matches", len(players), len(history))
        return True, None
