# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - lead.py: Lead CRUD schemas and pipeline enums
# - accounting.py: Accounting entry, inline edit and payment schemas
# - planning.py: Training session schemas
# - recommendation.py: AI next-step advice for a lead
# - report.py: Dashboard report metrics
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Lead Models
# -----------------------------------------------------------------------------
from .lead import (
    PAYING_STATUSES,
    ActivityAction,
    ActivityCreate,
    Formation,
    InterestLevel,
    LeadCreate,
    LeadList,
    LeadResponse,
    LeadStatus,
    LeadUpdate,
)

# -----------------------------------------------------------------------------
# Accounting Models
# -----------------------------------------------------------------------------
from .accounting import (
    EDITABLE_FIELDS,
    AccountingEntryCreate,
    FieldUpdateRequest,
    FieldUpdateResponse,
    MarkPaymentRequest,
    MarkPaymentResponse,
    PaymentType,
)

# -----------------------------------------------------------------------------
# Planning Models
# -----------------------------------------------------------------------------
from .planning import (
    ComputeDatesRequest,
    ComputeDatesResponse,
    Participant,
    PlanningCreate,
    PlanningSession,
    PlanningUpdate,
    SyncLeadRequest,
    TrainerSessionUpdate,
)

# -----------------------------------------------------------------------------
# Recommendation Models
# -----------------------------------------------------------------------------
from .recommendation import ActionType, LeadRecommendation, SuggestedAction

# -----------------------------------------------------------------------------
# Report Models
# -----------------------------------------------------------------------------
from .report import (
    PipelineMetrics,
    ReportResponse,
    ReportType,
    RevenueMetrics,
)

__all__ = [
    # Lead
    "PAYING_STATUSES",
    "ActivityAction",
    "ActivityCreate",
    "Formation",
    "InterestLevel",
    "LeadCreate",
    "LeadList",
    "LeadResponse",
    "LeadStatus",
    "LeadUpdate",
    # Accounting
    "EDITABLE_FIELDS",
    "AccountingEntryCreate",
    "FieldUpdateRequest",
    "FieldUpdateResponse",
    "MarkPaymentRequest",
    "MarkPaymentResponse",
    "PaymentType",
    # Planning
    "ComputeDatesRequest",
    "ComputeDatesResponse",
    "Participant",
    "PlanningCreate",
    "PlanningSession",
    "PlanningUpdate",
    "SyncLeadRequest",
    "TrainerSessionUpdate",
    # Recommendation
    "ActionType",
    "LeadRecommendation",
    "SuggestedAction",
    # Report
    "PipelineMetrics",
    "ReportResponse",
    "ReportType",
    "RevenueMetrics",
]
