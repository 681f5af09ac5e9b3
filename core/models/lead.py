# =============================================================================
# core/models/lead.py - Lead Schemas
# =============================================================================
# These models define the API contract for lead operations:
# - LeadCreate: Public lead-capture form
# - LeadUpdate: Partial edit from the CRM table
# - LeadStatus: Sales pipeline stages
#
# A lead is a prospective student tracked through the pipeline:
# new -> called -> closing -> deposit_paid -> closed (or lost)
# =============================================================================

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core.scheduling import TrainingFormat, Weekday


class LeadStatus(str, Enum):
    """
    Sales pipeline stages.

    Only deposit_paid and closed leads get a training session.
    """
    NEW = "new"
    CALLED = "called"
    NO_ANSWER = "no_answer"
    CLOSING = "closing"
    DEPOSIT_PENDING = "deposit_pending"
    DEPOSIT_PAID = "deposit_paid"
    CLOSED = "closed"
    LOST = "lost"


PAYING_STATUSES = (LeadStatus.DEPOSIT_PAID, LeadStatus.CLOSED)


class Formation(str, Enum):
    """Courses on offer."""
    SOUND_ENGINEERING = "sound_engineering"
    BEATMAKING = "beatmaking"
    OTHER = "other"


class InterestLevel(str, Enum):
    COLD = "cold"
    WARM = "warm"
    HOT = "hot"


class LeadCreate(BaseModel):
    """
    Schema for the public lead-capture form.

    "undecided" is accepted for the formation and stored as "other".

    Example:
        {
            "first_name": "Ana",
            "last_name": "Diaz",
            "phone": "+33 6 12 34 56 78",
            "formation": "beatmaking",
            "source": "instagram"
        }
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=40)
    email: str | None = Field(default=None, max_length=255)
    formation: Formation | None = Field(
        default=None,
        description="Course the lead is interested in ('undecided' maps to 'other')"
    )
    source: str | None = Field(
        default=None,
        max_length=50,
        description="Acquisition channel (defaults to 'direct')"
    )

    @field_validator("first_name", "last_name", "phone", mode="before")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: str | None) -> str | None:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("formation", mode="before")
    @classmethod
    def map_undecided(cls, value: str | None) -> str | None:
        if value == "undecided":
            return Formation.OTHER.value
        return value


class LeadUpdate(BaseModel):
    """
    Partial update from the CRM table or lead detail modal.

    Only fields present in the request body are written.
    """

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, min_length=1, max_length=40)
    email: str | None = None
    formation: Formation | None = None
    source: str | None = None
    status: LeadStatus | None = None
    closer_id: UUID | None = None
    comment: str | None = None
    price_fixed: float | None = Field(default=None, ge=0)
    price_deposit: float | None = Field(default=None, ge=0)
    formation_format: TrainingFormat | None = None
    formation_day: Weekday | None = None
    formation_start_date: date | None = None
    interest_level: InterestLevel | None = None

    def changes(self) -> dict:
        """Explicitly-set fields, serialized for Supabase."""
        return self.model_dump(exclude_unset=True, mode="json")


class LeadResponse(BaseModel):
    """Lead row as returned to clients."""

    id: UUID
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    formation: str | None = None
    source: str | None = None
    status: str
    closer_id: UUID | None = None
    comment: str | None = None
    price_fixed: float | None = None
    price_deposit: float | None = None
    formation_format: str | None = None
    formation_day: str | None = None
    formation_start_date: date | None = None
    interest_level: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_action_at: datetime | None = None

    model_config = {"from_attributes": True}


class LeadList(BaseModel):
    """Paginated list of leads."""

    leads: list[LeadResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1, le=200)


# =============================================================================
# Activity Log
# =============================================================================

class ActivityAction(str, Enum):
    """Kinds of actions recorded in a lead's history."""
    STATUS_CHANGED = "status_changed"
    CLOSER_ASSIGNED = "closer_assigned"
    FIELD_UPDATED = "field_updated"
    COMMENT_ADDED = "comment_added"
    PAYMENT_MARKED = "payment_marked"


class ActivityCreate(BaseModel):
    """Body of POST /leads/{id}/activity."""

    action_type: ActivityAction
    field_name: str | None = None
    old_value: str | float | None = None
    new_value: str | float | None = None
    details: dict | None = None
