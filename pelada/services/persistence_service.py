"""
Persistence service for the Pelada session manager.

This module stores each entity kind (players, attendance, history, settings,
current match) as its own JSON file. Every ``set`` fully replaces the stored
value and every ``get`` falls back to the entity default when the file is
absent or corrupt.
"""
import json
import logging
import os
from typing import Any, Callable, List, Optional, TypeVar

from ..models import AttendanceRecord, CurrentMatchState, MatchResult, Player, Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

PLAYERS = "players"
ATTENDANCE = "attendance"
HISTORY = "history"
SETTINGS = "settings"
CURRENT_MATCH = "current_match"

ENTITY_KINDS = (PLAYERS, ATTENDANCE, HISTORY, SETTINGS, CURRENT_MATCH)


class RosterStore:
    """
    Key-value store for the session entities, one JSON file per kind.

    The store holds no logic: callers read an entity wholesale, change it
    and write it back wholesale.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the JSON files (created on first write)
        """
        self.data_dir = data_dir

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------
    def path_for(self, kind: str) -> str:
        if kind not in ENTITY_KINDS:
            raise ValueError(f"Unknown entity kind: {kind}")
        return os.path.join(self.data_dir, f"{kind}.json")

    def load(self, kind: str) -> Optional[Any]:
        """
        Read the raw JSON value of an entity.

        Returns:
            Decoded JSON, or None when the file is absent or unreadable
        """
        file_path = self.path_for(kind)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable %s store at %s: %s", kind, file_path, e)
            return None

    def save(self, kind: str, value: Any) -> None:
        """
        Replace the stored value of an entity.

        Raises:
            IOError: If file cannot be written
        """
        file_path = self.path_for(kind)
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(value, f, indent=2, ensure_ascii=False)

    def delete(self, kind: str) -> None:
        file_path = self.path_for(kind)
        if os.path.exists(file_path):
            os.remove(file_path)

    def clear(self) -> None:
        """Remove every entity (full data reset)."""
        for kind in ENTITY_KINDS:
            self.delete(kind)
        logger.info("Store at %s cleared", self.data_dir)

    def _load_list(self, kind: str, parse: Callable[[Any], T]) -> List[T]:
        raw = self.load(kind)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring corrupt %s store: expected a list", kind)
            return []
        try:
            return [parse(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring corrupt %s store: %s", kind, e)
            return []

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------
    def get_players(self) -> List[Player]:
        return self._load_list(PLAYERS, Player.from_dict)

    def set_players(self, players: List[Player]) -> None:
        self.save(PLAYERS, [p.to_dict() for p in players])

    def get_attendance(self) -> List[AttendanceRecord]:
        return self._load_list(ATTENDANCE, AttendanceRecord.from_dict)

    def set_attendance(self, records: List[AttendanceRecord]) -> None:
        self.save(ATTENDANCE, [r.to_dict() for r in records])

    def get_history(self) -> List[MatchResult]:
        return self._load_list(HISTORY, MatchResult.from_dict)

    def set_history(self, history: List[MatchResult]) -> None:
        self.save(HISTORY, [m.to_dict() for m in history])

    def get_settings(self) -> Settings:
        raw = self.load(SETTINGS)
        if raw is None:
            return Settings()
        if not isinstance(raw, dict):
            logger.warning("Ignoring corrupt settings store: expected an object")
            return Settings()
        try:
            return Settings.from_dict(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring corrupt settings store: %s", e)
            return Settings()

    def set_settings(self, settings: Settings) -> None:
        self.save(SETTINGS, settings.to_dict())

    def get_current_match(self) -> Optional[CurrentMatchState]:
        raw = self.load(CURRENT_MATCH)
        if raw is None:
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring corrupt current match store: expected an object")
            return None
        try:
            return CurrentMatchState.from_json(raw)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring corrupt current match store: %s", e)
            return None

    def set_current_match(self, match: Optional[CurrentMatchState]) -> None:
        """Persist the active match, or remove it when ``match`` is None."""
        if match is None:
            self.delete(CURRENT_MATCH)
        else:
            self.save(CURRENT_MATCH, match.to_json())
