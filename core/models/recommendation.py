# =============================================================================
# core/models/recommendation.py - Lead Recommendation Schemas
# =============================================================================
# The AI reads a lead's recent comments and answers with one short
# recommendation plus a few pipeline actions the closer can apply in one
# click.
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """
    Actions the model may suggest.

    - lost: the lead looks gone (no answer, no budget)
    - follow_up: no news, contact again
    - called: a call happened recently
    - closing: negotiation is advanced
    - hot: strong intent to buy
    """
    LOST = "lost"
    FOLLOW_UP = "follow_up"
    CALLED = "called"
    CLOSING = "closing"
    HOT = "hot"


class SuggestedAction(BaseModel):
    type: ActionType
    label: str


class LeadRecommendation(BaseModel):
    """Recommendation returned to the lead detail view."""

    lead_id: UUID | None = None
    recommendation: str
    suggested_actions: list[SuggestedAction] = Field(default_factory=list)
