# =============================================================================
# app/routers/leads.py - Lead Endpoints
# =============================================================================
# Lead capture (public form), CRM table listing, edits, favorites, the
# per-lead activity history and the AI next-step recommendation.
#
# Only POST /leads is public; everything else requires a CRM user, and
# deleting a lead is restricted to admins.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel, Field

from app.auth import CRMUser, UserRole, get_current_user_with_role, require_roles
from app.dependencies import RecommendationServiceDep
from core.models.lead import (
    ActivityCreate,
    LeadCreate,
    LeadList,
    LeadResponse,
    LeadStatus,
    LeadUpdate,
)
from core.models.recommendation import LeadRecommendation
from core.services.activity_service import ActivityService
from core.services.lead_service import LeadService

router = APIRouter()

LeadId = Annotated[UUID, Path(description="Lead UUID")]


# =============================================================================
# Response Models
# =============================================================================

class FavoriteResponse(BaseModel):
    lead_id: str
    is_favorite: bool


class ActivityEntry(BaseModel):
    id: UUID | None = None
    action_type: str
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    user_id: UUID | None = None
    created_at: str | None = None


class ActivityList(BaseModel):
    lead_id: str
    activities: list[ActivityEntry] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(request: LeadCreate):
    """
    Create a lead from the public contact form.

    No authentication required. The lead starts in the "new" stage.
    """
    return LeadService.create_lead(request)


@router.get("", response_model=LeadList)
async def list_leads(
    user: CRMUser = Depends(get_current_user_with_role),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=200, description="Items per page")] = 25,
    status: Annotated[LeadStatus | None, Query(description="Filter by pipeline stage")] = None,
    closer_id: Annotated[UUID | None, Query(description="Filter by assigned closer")] = None,
):
    """List leads, newest first."""
    leads, total = LeadService.list_leads(
        page=page,
        page_size=page_size,
        status=status,
        closer_id=closer_id,
    )
    return LeadList(leads=leads, total=total, page=page, page_size=page_size)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: LeadId,
    user: CRMUser = Depends(get_current_user_with_role),
):
    return LeadService.get_lead(lead_id)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: LeadId,
    request: LeadUpdate,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Update some fields of a lead.

    Each changed field is written to the lead's activity history.
    """
    return LeadService.update_lead(lead_id, request, user_id=user.id)


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: LeadId,
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Delete a lead with its payments, accounting entries, comments,
    documents and planning links. Admin only.
    """
    LeadService.delete_lead(lead_id)
    return {"success": True, "lead_id": str(lead_id)}


# =============================================================================
# Favorites
# =============================================================================

@router.get("/{lead_id}/favorite", response_model=FavoriteResponse)
async def get_favorite(
    lead_id: LeadId,
    user: CRMUser = Depends(get_current_user_with_role),
):
    return FavoriteResponse(
        lead_id=str(lead_id),
        is_favorite=LeadService.is_favorite(lead_id, user.id),
    )


@router.post("/{lead_id}/favorite", response_model=FavoriteResponse)
async def toggle_favorite(
    lead_id: LeadId,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Star the lead for the current user, or unstar it if already starred."""
    return FavoriteResponse(
        lead_id=str(lead_id),
        is_favorite=LeadService.toggle_favorite(lead_id, user.id),
    )


# =============================================================================
# Activity History
# =============================================================================

@router.get("/{lead_id}/activity", response_model=ActivityList)
async def list_activity(
    lead_id: LeadId,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Latest 50 actions on the lead, most recent first."""
    return ActivityList(
        lead_id=str(lead_id),
        activities=ActivityService.list_for_lead(lead_id),
    )


@router.post("/{lead_id}/activity", status_code=status.HTTP_201_CREATED)
async def record_activity(
    lead_id: LeadId,
    request: ActivityCreate,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Record an action made from the UI (e.g. a call note)."""
    ActivityService.record(
        lead_id,
        request.action_type,
        user_id=user.id,
        field_name=request.field_name,
        old_value=request.old_value,
        new_value=request.new_value,
        details=request.details,
    )
    return {"success": True}


# =============================================================================
# AI Recommendation
# =============================================================================

@router.post("/{lead_id}/recommendation", response_model=LeadRecommendation)
async def recommend_next_step(
    lead_id: LeadId,
    service: RecommendationServiceDep,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Suggest what to do next with a lead, from its latest comments.

    Returns one sentence and up to 3 actions (lost, follow_up, called,
    closing, hot). 503 when no AI provider is configured.
    """
    return service.recommend(lead_id)
