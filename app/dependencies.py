# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(), and replaced in
# tests through app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from agents.reporter import ReportWriter
from app.config import settings
from core.services.recommendation_service import RecommendationService
from core.services.report_cache import ReportCache, SupabaseReportCache
from core.services.report_service import ReportService, ReportTextWriter
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client wrapper.

    Returns the singleton client wrapper.
    """
    return SupabaseClient


def get_report_cache() -> ReportCache:
    """Report cache stored in Supabase (ai_report_cache)."""
    return SupabaseReportCache(ttl_seconds=settings.REPORT_CACHE_TTL_SECONDS)


def get_report_writer() -> ReportTextWriter:
    return ReportWriter()


def get_report_service(
    cache: Annotated[ReportCache, Depends(get_report_cache)],
    writer: Annotated[ReportTextWriter, Depends(get_report_writer)],
) -> ReportService:
    return ReportService(cache=cache, writer=writer)


def get_recommendation_service(
    writer: Annotated[ReportWriter, Depends(get_report_writer)],
) -> RecommendationService:
    return RecommendationService(writer=writer)


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
RecommendationServiceDep = Annotated[RecommendationService, Depends(get_recommendation_service)]
