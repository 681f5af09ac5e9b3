# =============================================================================
# app/routers/trainers.py - Trainer Endpoints
# =============================================================================
# Trainers (role "formateur") see the sessions they teach and what each one
# pays; admins see every session, the list of trainers, and are the only
# ones who assign a trainer or record the trainer payment.
# =============================================================================

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from app.auth import CRMUser, UserRole, require_roles
from app.exceptions import ForbiddenError
from core.models.planning import PlanningSession, TrainerSessionUpdate
from core.services.planning_service import PlanningService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_trainers(
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Users with the formateur role."""
    return {"trainers": PlanningService.list_trainers()}


@router.get("/sessions", response_model=list[PlanningSession])
async def trainer_sessions(
    user: CRMUser = Depends(require_roles(UserRole.FORMATEUR)),
):
    """
    Sessions for the trainer dashboard.

    A trainer sees their own sessions, an admin sees all of them. Payment
    status defaults to UNPAID and the amount to the standard trainer fee.
    """
    trainer_id = None if user.is_admin else user.id
    return PlanningService.list_sessions(trainer_id=trainer_id)


@router.get("/sessions/{planning_id}", response_model=PlanningSession)
async def trainer_session(
    planning_id: UUID,
    user: CRMUser = Depends(require_roles(UserRole.FORMATEUR)),
):
    """
    One session with its participants.

    A trainer only sees a session assigned to them.
    """
    session = PlanningService.get_session(planning_id)
    if not user.is_admin and session.get("trainer_id") != str(user.id):
        logger.warning(f"Trainer {user.id} denied access to session {planning_id}")
        raise ForbiddenError([UserRole.ADMIN.value])
    return session


@router.patch("/sessions/{planning_id}", response_model=PlanningSession)
async def update_trainer_session(
    planning_id: UUID,
    update: TrainerSessionUpdate,
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Assign the trainer, or set the trainer payment status/amount."""
    return PlanningService.update_trainer_fields(planning_id, update)
