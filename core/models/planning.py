# =============================================================================
# core/models/planning.py - Planning Schemas
# =============================================================================
# A planning row is one training session. Participants are linked through
# the planning_lead table so several leads can share a session.
# =============================================================================

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from core.scheduling import TrainingFormat


class ComputeDatesRequest(BaseModel):
    """
    Input of the session date calculator.

    Example:
        {"format": "monthly", "weekday": "sat", "anchor_date": "2025-03-05"}
    """

    format: TrainingFormat
    weekday: str | None = Field(
        default=None,
        description="Required for monthly sessions: 'sat' or 'sun'"
    )
    anchor_date: date = Field(..., description="Day picked by the operator")


class ComputeDatesResponse(BaseModel):
    start_date: datetime
    end_date: datetime
    specific_dates: list[date] = Field(default_factory=list)


def _normalize_days(values: list[str] | None) -> list[str] | None:
    # "2025-03-08T00:00:00.000Z" -> "2025-03-08"
    if values is None:
        return None
    return [value.split("T")[0] for value in values if value]


class PlanningCreate(BaseModel):
    """
    Create a training session for one or more leads.

    `lead_id` is accepted for single-participant callers.
    """

    lead_ids: list[UUID] = Field(default_factory=list)
    lead_id: UUID | None = None
    start_date: datetime
    end_date: datetime
    specific_dates: list[str] | None = None

    @field_validator("specific_dates")
    @classmethod
    def normalize_specific_dates(cls, values: list[str] | None) -> list[str] | None:
        return _normalize_days(values)

    @model_validator(mode="after")
    def merge_lead_ids(self) -> "PlanningCreate":
        if not self.lead_ids and self.lead_id:
            self.lead_ids = [self.lead_id]
        if not self.lead_ids:
            raise ValueError("At least one lead is required (lead_ids or lead_id)")
        same_kind = (self.start_date.tzinfo is None) == (self.end_date.tzinfo is None)
        if same_kind and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PlanningUpdate(BaseModel):
    """Change the dates and/or the participants of a session."""

    lead_ids: list[UUID] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    specific_dates: list[str] | None = None

    @field_validator("specific_dates")
    @classmethod
    def normalize_specific_dates(cls, values: list[str] | None) -> list[str] | None:
        return _normalize_days(values)

    def date_changes(self) -> dict:
        changes = self.model_dump(
            exclude_unset=True,
            exclude={"lead_ids"},
            mode="json",
        )
        return changes


class SyncLeadRequest(BaseModel):
    lead_id: UUID


class Participant(BaseModel):
    id: UUID
    first_name: str
    last_name: str


class PlanningSession(BaseModel):
    """Session with its participants, as listed in the planning views."""

    id: UUID
    start_date: datetime
    end_date: datetime
    specific_dates: list[date] | None = None
    trainer_id: UUID | None = None
    payment_status: str = "UNPAID"
    payment_amount: float | None = None
    participants: list[Participant] = Field(default_factory=list)


class TrainerSessionUpdate(BaseModel):
    """
    Admin-only changes to a session's trainer and trainer payment.

    Sending `trainer_id: null` unassigns the trainer.
    """

    trainer_id: UUID | None = None
    payment_status: Literal["PAID", "UNPAID"] | None = None
    payment_amount: float | None = Field(default=None, ge=0)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, mode="json")
