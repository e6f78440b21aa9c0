"""
Services package for the Pelada session manager.

This package contains service classes that handle business logic.
Includes factory for dependency injection.
"""
from .errors import (
    PeladaError, ValidationError, PlayerValidationError, SettingsValidationError,
    ImportValidationError, ExternalServiceError
)
from .persistence_service import RosterStore
from .attendance_service import AttendanceService, AttendanceView, order_attendance
from .player_service import PlayerService
from .balancer_service import TeamBalancer
from .substitution_service import SubstitutionPrioritizer, SubstitutionPlan, LeavePriority
from .ranking_service import RankingAggregator
from .ai_balancer_client import AiBalancingClient, AiTeamProposal
from .match_service import MatchSession, MatchPhase, MatchStartOutcome
from .export_service import DataExportService
from .service_factory import ServiceFactory

__all__ = [
    "PeladaError", "ValidationError", "PlayerValidationError", "SettingsValidationError",
    "ImportValidationError", "ExternalServiceError", "RosterStore", "AttendanceService",
    "AttendanceView", "order_attendance", "PlayerService", "TeamBalancer",
    "SubstitutionPrioritizer", "SubstitutionPlan", "LeavePriority", "RankingAggregator",
    "AiBalancingClient", "AiTeamProposal", "MatchSession", "MatchPhase", "MatchStartOutcome",
    "DataExportService", "ServiceFactory"
]
