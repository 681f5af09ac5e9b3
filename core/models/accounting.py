# =============================================================================
# core/models/accounting.py - Accounting Schemas
# =============================================================================
# Request/response contracts for the bookkeeping screen:
# - AccountingEntryCreate: Manual entry added by an admin
# - FieldUpdateRequest: Inline edit of a single numeric column
# - MarkPaymentRequest: Record a deposit or a full payment for a lead
# =============================================================================

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from core.accounting import EntryType


EDITABLE_FIELDS = (
    "amount",
    "commission_closer",
    "commission_formateur",
    "remaining_amount",
)


class PaymentType(str, Enum):
    """
    What the operator clicked in the CRM.

    - deposit: the lead paid the agreed deposit
    - full: the lead paid everything left (balance after a deposit,
      or the whole price in one go)
    """
    DEPOSIT = "deposit"
    FULL = "full"


class AccountingEntryCreate(BaseModel):
    """
    Manual accounting entry.

    Amounts arrive as typed in the form and are validated by the service,
    so they are accepted here as strings or numbers.
    """

    lead_id: UUID
    entry_type: EntryType
    amount: Any = Field(..., description="Payment amount (non-negative)")
    remaining_amount: Any | None = Field(
        default=None,
        description="Balance still owed (deposits only)"
    )


class FieldUpdateRequest(BaseModel):
    """
    Inline edit of one accounting column.

    Example:
        {"entry_id": "2f0c...", "field": "amount", "value": "250"}
    """

    entry_id: UUID
    field: str = Field(..., description=f"One of: {', '.join(EDITABLE_FIELDS)}")
    value: Any


class FieldUpdateResponse(BaseModel):
    success: bool = True
    entry_id: UUID
    field: str
    recomputed: bool = Field(
        default=False,
        description="Whether commissions/remaining amount were recomputed"
    )
    updated_fields: dict[str, Any] = Field(default_factory=dict)


class MarkPaymentRequest(BaseModel):
    lead_id: UUID
    payment_type: PaymentType


class MarkPaymentResponse(BaseModel):
    success: bool = True
    payment: dict[str, Any]
    entry_type: EntryType
    remaining_amount: float | None = None
    planning_id: str | None = Field(
        default=None,
        description="Training session created for the lead, if any"
    )
