# =============================================================================
# app/routers/planning.py - Training Session Endpoints
# =============================================================================
# Planning calendar: session date calculator, session CRUD and the
# re-synchronisation of a lead's session after its training info changed.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import CRMUser, get_current_user_with_role
from core.models.planning import (
    ComputeDatesRequest,
    ComputeDatesResponse,
    PlanningCreate,
    PlanningSession,
    PlanningUpdate,
    SyncLeadRequest,
)
from core.services.planning_service import PlanningService

router = APIRouter()

PlanningId = Annotated[UUID, Path(description="Training session UUID")]


@router.post("/compute-dates", response_model=ComputeDatesResponse)
async def compute_dates(
    request: ComputeDatesRequest,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Preview the dates of a session.

    - weekly: Monday 09:00 to Friday 17:00 of the anchor's week
    - monthly: 4 Saturdays or Sundays from the anchor (weekday required)
    - fast_track: the anchor day and the next one
    """
    dates = PlanningService.compute_dates(request.format, request.weekday, request.anchor_date)
    return ComputeDatesResponse(
        start_date=dates.start_date,
        end_date=dates.end_date,
        specific_dates=dates.specific_dates,
    )


@router.get("", response_model=list[PlanningSession])
async def list_sessions(
    user: CRMUser = Depends(get_current_user_with_role),
):
    """All sessions in chronological order, with participants."""
    return PlanningService.list_sessions()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: PlanningCreate,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Create a session for one or more leads."""
    planning = PlanningService.create_session(request)
    return {"success": True, "planning": planning}


@router.patch("/{planning_id}")
async def update_session(
    planning_id: PlanningId,
    request: PlanningUpdate,
    user: CRMUser = Depends(get_current_user_with_role),
):
    planning = PlanningService.update_session(planning_id, request)
    return {"success": True, "planning": planning}


@router.delete("/{planning_id}")
async def delete_session(
    planning_id: PlanningId,
    user: CRMUser = Depends(get_current_user_with_role),
):
    PlanningService.delete_session(planning_id)
    return {"success": True, "planning_id": str(planning_id)}


@router.post("/sync-lead")
async def sync_lead(
    request: SyncLeadRequest,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Rebuild a lead's session from its training format, day and start date.

    The lead is removed from its current sessions first; sessions left
    empty are deleted.
    """
    result = PlanningService.sync_lead(request.lead_id)
    return {"success": True, **result}
