# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .activity_service import ActivityService
from .planning_service import PlanningService
from .lead_service import LeadService
from .accounting_service import AccountingService
from .report_cache import InMemoryReportCache, ReportCache, SupabaseReportCache
from .report_service import ReportService
from .recommendation_service import RecommendationService
from .user_service import UserService

__all__ = [
    "ActivityService",
    "PlanningService",
    "LeadService",
    "AccountingService",
    "ReportCache",
    "SupabaseReportCache",
    "InMemoryReportCache",
    "ReportService",
    "RecommendationService",
    "UserService",
]
