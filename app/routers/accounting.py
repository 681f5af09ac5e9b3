# =============================================================================
# app/routers/accounting.py - Accounting Endpoints
# =============================================================================
# Bookkeeping screen and the "mark as paid" buttons of the lead modal.
# All endpoints require a CRM user.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import CRMUser, get_current_user_with_role
from core.models.accounting import (
    AccountingEntryCreate,
    FieldUpdateRequest,
    FieldUpdateResponse,
    MarkPaymentRequest,
    MarkPaymentResponse,
)
from core.services.accounting_service import AccountingService

router = APIRouter()


@router.post("/entries", status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: AccountingEntryCreate,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Add a manual accounting entry.

    Commissions (10% closer, 5% trainer) are computed from the amount.
    """
    entry = AccountingService.create_entry(request)
    return {"success": True, "entry": entry}


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: Annotated[UUID, Path(description="Accounting entry UUID")],
    user: CRMUser = Depends(get_current_user_with_role),
):
    AccountingService.delete_entry(entry_id)
    return {"success": True, "entry_id": str(entry_id)}


@router.get("/leads-options")
async def leads_options(
    user: CRMUser = Depends(get_current_user_with_role),
):
    """Leads a manual entry can be attached to (deposit paid or closed)."""
    return {"leads": AccountingService.leads_options()}


@router.post("/update", response_model=FieldUpdateResponse)
async def update_field(
    request: FieldUpdateRequest,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Inline edit of one numeric column.

    Editing `amount` also rewrites the commissions and, for deposits, the
    remaining balance. `recomputed` tells whether that happened.
    """
    return AccountingService.update_field(request.entry_id, request.field, request.value)


@router.post("/mark-payment", response_model=MarkPaymentResponse)
async def mark_payment(
    request: MarkPaymentRequest,
    user: CRMUser = Depends(get_current_user_with_role),
):
    """
    Record a deposit or a full payment for a lead.

    Moves the lead to deposit_paid or closed and books the training
    session when the lead's training info is set.
    """
    return AccountingService.mark_payment(request.lead_id, request.payment_type, user_id=user.id)
