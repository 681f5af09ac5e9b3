# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models to ensure:
# - Valid data is accepted and normalized
# - Invalid data raises ValidationError
# - Partial updates only carry the fields that were sent
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

# Import all models from the core package
from core.models import (
    AccountingEntryCreate,
    ComputeDatesRequest,
    FieldUpdateRequest,
    Formation,
    LeadCreate,
    LeadStatus,
    LeadUpdate,
    MarkPaymentRequest,
    PaymentType,
    PipelineMetrics,
    PlanningCreate,
    PlanningUpdate,
    RevenueMetrics,
)


# =============================================================================
# Lead Model Tests
# =============================================================================

class TestLeadCreate:
    """Tests for the public lead form."""

    def test_strips_fields(self):
        """Names and phone are trimmed, blank email becomes None."""
        lead = LeadCreate(
            first_name="  Ana ",
            last_name=" Diaz",
            phone=" 0612345678 ",
            email="   ",
        )

        assert lead.first_name == "Ana"
        assert lead.last_name == "Diaz"
        assert lead.phone == "0612345678"
        assert lead.email is None

    def test_undecided_formation_maps_to_other(self):
        lead = LeadCreate(first_name="A", last_name="B", phone="1", formation="undecided")

        assert lead.formation == Formation.OTHER

    def test_blank_name_rejected(self):
        """A name made of spaces is empty once trimmed."""
        with pytest.raises(ValidationError):
            LeadCreate(first_name="   ", last_name="B", phone="1")

    def test_phone_required(self):
        with pytest.raises(ValidationError):
            LeadCreate(first_name="A", last_name="B")

    def test_unknown_formation_rejected(self):
        with pytest.raises(ValidationError):
            LeadCreate(first_name="A", last_name="B", phone="1", formation="piano")


class TestLeadUpdate:
    """Tests for partial lead updates."""

    def test_changes_only_contains_sent_fields(self):
        update = LeadUpdate(status="called", comment=None)

        assert update.changes() == {"status": "called", "comment": None}

    def test_changes_serializes_for_supabase(self):
        closer_id = uuid4()
        update = LeadUpdate(
            closer_id=closer_id,
            formation_format="monthly",
            formation_day="sat",
            formation_start_date="2025-03-05",
        )

        assert update.changes() == {
            "closer_id": str(closer_id),
            "formation_format": "monthly",
            "formation_day": "sat",
            "formation_start_date": "2025-03-05",
        }

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            LeadUpdate(status="won")

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            LeadUpdate(price_fixed=-1)

    def test_status_values(self):
        assert LeadStatus("deposit_paid") == LeadStatus.DEPOSIT_PAID


# =============================================================================
# Accounting Model Tests
# =============================================================================

class TestAccountingModels:
    """Amounts are validated by the service, not the schema."""

    def test_entry_accepts_raw_amount(self):
        entry = AccountingEntryCreate(lead_id=uuid4(), entry_type="deposit", amount="199,90")

        assert entry.amount == "199,90"
        assert entry.remaining_amount is None

    def test_entry_type_validated(self):
        with pytest.raises(ValidationError):
            AccountingEntryCreate(lead_id=uuid4(), entry_type="refund", amount=10)

    def test_field_update(self):
        request = FieldUpdateRequest(entry_id=uuid4(), field="amount", value="250")

        assert request.value == "250"

    def test_payment_type(self):
        request = MarkPaymentRequest(lead_id=uuid4(), payment_type="full")

        assert request.payment_type == PaymentType.FULL

        with pytest.raises(ValidationError):
            MarkPaymentRequest(lead_id=uuid4(), payment_type="acompte")


# =============================================================================
# Planning Model Tests
# =============================================================================

class TestPlanningCreate:
    """Tests for session creation."""

    def test_single_lead_id_merged(self):
        lead_id = uuid4()
        planning = PlanningCreate(
            lead_id=lead_id,
            start_date="2025-03-03T09:00:00",
            end_date="2025-03-07T17:00:00",
        )

        assert planning.lead_ids == [lead_id]

    def test_requires_a_lead(self):
        with pytest.raises(ValidationError):
            PlanningCreate(start_date="2025-03-03T09:00:00", end_date="2025-03-07T17:00:00")

    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            PlanningCreate(
                lead_ids=[uuid4()],
                start_date="2025-03-07T09:00:00",
                end_date="2025-03-03T17:00:00",
            )

    def test_mixed_naive_and_aware_dates_accepted(self):
        planning = PlanningCreate(
            lead_ids=[uuid4()],
            start_date="2025-03-03T09:00:00",
            end_date="2025-03-07T17:00:00Z",
        )

        assert planning.end_date.tzinfo is not None

    def test_specific_dates_normalized(self):
        planning = PlanningCreate(
            lead_ids=[uuid4()],
            start_date="2025-03-08T09:00:00",
            end_date="2025-03-29T17:00:00",
            specific_dates=["2025-03-08T00:00:00.000Z", "2025-03-15", ""],
        )

        assert planning.specific_dates == ["2025-03-08", "2025-03-15"]


class TestPlanningUpdate:
    def test_date_changes_exclude_participants(self):
        update = PlanningUpdate(
            lead_ids=[uuid4()],
            start_date=datetime(2025, 3, 3, 9, tzinfo=timezone.utc),
        )

        assert update.date_changes() == {"start_date": "2025-03-03T09:00:00Z"}


class TestComputeDatesRequest:
    def test_valid(self):
        request = ComputeDatesRequest(format="monthly", weekday="sat", anchor_date="2025-03-05")

        assert request.weekday == "sat"

    def test_unknown_format(self):
        with pytest.raises(ValidationError):
            ComputeDatesRequest(format="yearly", anchor_date="2025-03-05")


# =============================================================================
# Report Model Tests
# =============================================================================

class TestReportText:
    """Metrics are rendered as plain text for the model."""

    def test_revenue_text_skips_missing_growth(self):
        metrics = RevenueMetrics(
            generated_at=datetime(2025, 3, 12, tzinfo=timezone.utc),
            revenue_month=1500,
            revenue_month_growth=None,
            revenue_by_formation={"beatmaking": 1500.0},
        )

        text = metrics.to_text()

        assert "Revenue this month: 1500.00 EUR" in text
        assert "Month over month" not in text
        assert "- beatmaking: 1500.00 EUR" in text

    def test_pipeline_text(self):
        metrics = PipelineMetrics(
            generated_at=datetime(2025, 3, 12, tzinfo=timezone.utc),
            total_leads=4,
            by_status={"new": 3, "closed": 1},
            conversion_rate=25.0,
        )

        text = metrics.to_text()

        assert "Total leads: 4" in text
        assert "Conversion rate: 25.0%" in text
        assert "- new: 3" in text
