# =============================================================================
# app/routers/reports.py - Dashboard Report Endpoints
# =============================================================================
# AI-written reports on revenue and on the sales pipeline.
#
# Reports are cached for an hour; ?refresh=true writes a new one.
# The /context variant returns the raw figures without calling the AI.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import CRMUser, get_current_user_with_role
from app.dependencies import ReportServiceDep
from core.models.report import ReportResponse, ReportType

router = APIRouter()

ReportTypePath = Annotated[ReportType, Path(description="revenue or pipeline")]


@router.get("/{report_type}", response_model=ReportResponse)
async def get_report(
    report_type: ReportTypePath,
    service: ReportServiceDep,
    user: CRMUser = Depends(get_current_user_with_role),
    refresh: Annotated[bool, Query(description="Ignore the cached report")] = False,
):
    """
    Get the written report.

    Errors:
    - 503 when no AI key is configured
    - 429 when the AI provider's quota is exhausted
    """
    return service.get_report(report_type, refresh=refresh)


@router.get("/{report_type}/context")
async def get_report_context(
    report_type: ReportTypePath,
    service: ReportServiceDep,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Figures the report is written from, as JSON and as the text sent to the AI."""
    metrics = service.build_metrics(report_type)
    return {
        "report_type": report_type.value,
        "metrics": metrics.model_dump(mode="json"),
        "context": metrics.to_text(),
    }
