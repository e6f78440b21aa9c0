"""
Service Factory for dependency injection.

This module provides a factory for creating properly configured service
instances that share one roster store, so every component reads and writes
the same persisted session.
"""
import random
from typing import Optional

from ..utils import config
from .ai_balancer_client import AiBalancingClient
from .attendance_service import AttendanceService
from .balancer_service import TeamBalancer
from .export_service import DataExportService
from .match_service import MatchSession
from .persistence_service import RosterStore
from .player_service import PlayerService
from .ranking_service import RankingAggregator
from .substitution_service import SubstitutionPrioritizer


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.

    The store, random source and AI client are created once and shared.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        rng: Optional[random.Random] = None,
        ai_client: Optional[AiBalancingClient] = None,
    ):
        """
        Initialize factory.

        Args:
            data_dir: Store directory (defaults to PELADA_DATA_DIR)
            rng: Random source for balancing and tie-breaks
            ai_client: AI balancing client (defaults to one built from the environment)
        """
        self._data_dir = data_dir or config.get_data_dir()
        self._rng = rng or random.Random()
        self._store: Optional[RosterStore] = None
        self._ai_client = ai_client

    def get_store(self) -> RosterStore:
        """Get singleton roster store."""
        if self._store is None:
            self._store = RosterStore(self._data_dir)
        return self._store

    def get_ai_client(self) -> AiBalancingClient:
        """Get singleton AI client."""
        if self._ai_client is None:
            self._ai_client = AiBalancingClient()
        return self._ai_client

    def create_player_service(self) -> PlayerService:
        return PlayerService(self.get_store())

    def create_attendance_service(self) -> AttendanceService:
        return AttendanceService(self.get_store())

    def create_export_service(self) -> DataExportService:
        return DataExportService(self.get_store())

    def create_ranking_aggregator(self) -> RankingAggregator:
        return RankingAggregator()

    def create_match_session(self) -> MatchSession:
        """
        Create MatchSession with balancer, prioritizer, aggregator and AI client.

        The session loads any in-progress match from the store.
        """
        return MatchSession(
            store=self.get_store(),
            balancer=TeamBalancer(self._rng),
            prioritizer=SubstitutionPrioritizer(self._rng),
            aggregator=self.create_ranking_aggregator(),
            ai_client=self.get_ai_client(),
        )

    def create_complete_service_suite(self) -> dict:
        """
        Create a complete suite of services sharing one store.

        Returns:
            Dictionary containing all configured services
        """
        return {
            'store': self.get_store(),
            'players': self.create_player_service(),
            'attendance': self.create_attendance_service(),
            'match': self.create_match_session(),
            'ranking': self.create_ranking_aggregator(),
            'export': self.create_export_service(),
        }
