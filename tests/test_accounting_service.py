# =============================================================================
# tests/test_accounting_service.py - Accounting Service Tests
# =============================================================================
# This module contains tests for:
# - Manual entries (validation, commissions)
# - Inline edits (recompute on amount, fail-open and strict modes)
# - Mark payment (deposit, balance, full payment, conflicts, rollback, planning)
#
# Supabase is replaced by the in-memory FakeSupabase from conftest.
# =============================================================================

from unittest.mock import patch
from uuid import uuid4

import pytest

from app.config import settings
from app.exceptions import (
    AccountingEntryNotFoundError,
    InvalidAmountError,
    InvalidFieldError,
    LeadNotFoundError,
    MissingPriceError,
    PaymentConflictError,
)
from core.models.accounting import AccountingEntryCreate, PaymentType
from core.services.accounting_service import AccountingService


def _entry(fake_db, lead_id, **fields):
    row = {
        "lead_id": lead_id,
        "entry_type": "deposit",
        "amount": 300.0,
        "remaining_amount": 900.0,
        "commission_closer": 30.0,
        "commission_formateur": 15.0,
    }
    row.update(fields)
    return fake_db.add("accounting_entries", row)


# =============================================================================
# Manual Entries
# =============================================================================

class TestCreateEntry:
    """Manual accounting entries."""

    def test_computes_commissions(self, fake_db, make_lead):
        lead = make_lead()

        entry = AccountingService.create_entry(AccountingEntryCreate(
            lead_id=lead["id"],
            entry_type="full_payment",
            amount="1200",
        ))

        assert entry["amount"] == 1200.0
        assert entry["commission_closer"] == 120.0
        assert entry["commission_formateur"] == 60.0
        assert entry["remaining_amount"] is None
        assert entry["status"] == "active"

    def test_invalid_amount(self, fake_db, make_lead):
        with pytest.raises(InvalidAmountError):
            AccountingService.create_entry(AccountingEntryCreate(
                lead_id=make_lead()["id"], entry_type="deposit", amount="-5",
            ))

        assert fake_db.tables["accounting_entries"] == []

    def test_invalid_remaining(self, fake_db, make_lead):
        with pytest.raises(InvalidAmountError):
            AccountingService.create_entry(AccountingEntryCreate(
                lead_id=make_lead()["id"], entry_type="deposit", amount=300, remaining_amount="lots",
            ))

    def test_unknown_lead(self, fake_db):
        with pytest.raises(LeadNotFoundError):
            AccountingService.create_entry(AccountingEntryCreate(
                lead_id=uuid4(), entry_type="deposit", amount=300,
            ))

    def test_delete(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"])

        AccountingService.delete_entry(entry["id"])

        assert fake_db.tables["accounting_entries"] == []

    def test_delete_unknown(self, fake_db):
        with pytest.raises(AccountingEntryNotFoundError):
            AccountingService.delete_entry(uuid4())

    def test_leads_options(self, fake_db, make_lead):
        make_lead(last_name="Zed", status="closed")
        make_lead(last_name="Abel", status="deposit_paid")
        make_lead(last_name="Moss", status="new")

        names = [lead["last_name"] for lead in AccountingService.leads_options()]

        assert names == ["Abel", "Zed"]


# =============================================================================
# Inline Edit
# =============================================================================

class TestUpdateField:
    """Inline edits of accounting columns."""

    def test_non_editable_field(self, fake_db):
        with pytest.raises(InvalidFieldError) as exc_info:
            AccountingService.update_field(uuid4(), "lead_id", "x")

        assert exc_info.value.status_code == 400

    def test_deposit_amount_uses_lead_price(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500)
        entry = _entry(fake_db, lead["id"])

        result = AccountingService.update_field(entry["id"], "amount", "500")

        stored = fake_db.tables["accounting_entries"][0]
        assert result.recomputed is True
        assert stored["amount"] == 500.0
        assert stored["commission_closer"] == 50.0
        assert stored["commission_formateur"] == 25.0
        assert stored["remaining_amount"] == 1000.0

    def test_deposit_amount_falls_back_to_entry_total(self, fake_db, make_lead):
        lead = make_lead(price_fixed=None)
        entry = _entry(fake_db, lead["id"], amount=300.0, remaining_amount=900.0)

        AccountingService.update_field(entry["id"], "amount", 400)

        assert fake_db.tables["accounting_entries"][0]["remaining_amount"] == 800.0

    def test_deposit_without_total_keeps_remaining(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"], remaining_amount=None)

        result = AccountingService.update_field(entry["id"], "amount", 400)

        assert "remaining_amount" not in result.updated_fields
        assert result.updated_fields["commission_closer"] == 40.0

    def test_balance_amount_clears_remaining(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"], entry_type="balance", remaining_amount=0)

        AccountingService.update_field(entry["id"], "amount", "700")

        stored = fake_db.tables["accounting_entries"][0]
        assert stored["remaining_amount"] is None
        assert stored["commission_closer"] == 70.0

    def test_other_field_written_without_recompute(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"])

        result = AccountingService.update_field(entry["id"], "commission_closer", "42")

        stored = fake_db.tables["accounting_entries"][0]
        assert result.recomputed is False
        assert stored["commission_closer"] == 42.0
        assert stored["amount"] == 300.0

    def test_invalid_amount_written_raw(self, fake_db, make_lead):
        """Fail-open: the raw value is stored, dependents are untouched."""
        entry = _entry(fake_db, make_lead()["id"])

        result = AccountingService.update_field(entry["id"], "amount", "abc")

        stored = fake_db.tables["accounting_entries"][0]
        assert result.recomputed is False
        assert stored["amount"] == "abc"
        assert stored["commission_closer"] == 30.0

    def test_negative_amount_written_raw(self, fake_db, make_lead):
        """Fail-open: -5 is stored as typed; commissions and remaining keep their values."""
        entry = _entry(fake_db, make_lead(price_fixed=1200)["id"])

        result = AccountingService.update_field(entry["id"], "amount", -5)

        stored = fake_db.tables["accounting_entries"][0]
        assert result.recomputed is False
        assert result.updated_fields == {"amount": -5}
        assert stored["amount"] == -5
        assert stored["commission_closer"] == 30.0
        assert stored["commission_formateur"] == 15.0
        assert stored["remaining_amount"] == 900.0

    def test_negative_amount_rejected_in_strict_mode(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"])

        with patch.object(settings, "ACCOUNTING_STRICT_AMOUNT_EDIT", True):
            with pytest.raises(InvalidAmountError):
                AccountingService.update_field(entry["id"], "amount", -5)

        assert fake_db.writes("accounting_entries", "update") == []
        assert fake_db.tables["accounting_entries"][0]["amount"] == 300.0

    def test_unknown_entry_type_skips_recompute(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"], entry_type="refund")

        result = AccountingService.update_field(entry["id"], "amount", 100)

        assert result.recomputed is False
        assert fake_db.tables["accounting_entries"][0]["commission_closer"] == 30.0

    def test_missing_entry_fail_open(self, fake_db):
        result = AccountingService.update_field(uuid4(), "amount", 100)

        assert result.recomputed is False
        assert result.updated_fields == {"amount": 100.0}

    def test_strict_mode(self, fake_db, make_lead):
        entry = _entry(fake_db, make_lead()["id"])

        with patch.object(settings, "ACCOUNTING_STRICT_AMOUNT_EDIT", True):
            with pytest.raises(InvalidAmountError):
                AccountingService.update_field(entry["id"], "amount", "abc")
            with pytest.raises(AccountingEntryNotFoundError):
                AccountingService.update_field(uuid4(), "amount", 100)


# =============================================================================
# Mark Payment
# =============================================================================

class TestMarkPayment:
    """Deposit, balance and one-off full payments."""

    def test_deposit(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, price_deposit=300)

        result = AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

        entry = fake_db.tables["accounting_entries"][0]
        assert result.entry_type.value == "deposit"
        assert result.remaining_amount == 1200.0
        assert entry["amount"] == 300.0
        assert entry["commission_closer"] == 30.0
        assert entry["commission_formateur"] == 15.0
        assert entry["payment_id"] == result.payment["id"]
        assert fake_db.tables["leads"][0]["status"] == "deposit_paid"

    def test_entry_failure_removes_payment(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, price_deposit=300)
        fake_db.fail("accounting_entries", "insert")

        with pytest.raises(Exception, match="simulated insert failure"):
            AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

        assert fake_db.tables["lead_payments"] == []
        assert fake_db.tables["leads"][0]["status"] == "closing"

    def test_status_failure_removes_payment_and_entry(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500)
        fake_db.fail("leads", "update")

        with pytest.raises(Exception, match="simulated update failure"):
            AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        assert fake_db.tables["lead_payments"] == []
        assert fake_db.tables["accounting_entries"] == []

    def test_retry_after_failure_succeeds(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, price_deposit=300)
        fake_db.fail("accounting_entries", "insert")
        with pytest.raises(Exception):
            AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)
        fake_db.failures.discard(("accounting_entries", "insert"))

        result = AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

        assert result.remaining_amount == 1200.0
        assert len(fake_db.tables["lead_payments"]) == 1
        assert fake_db.tables["accounting_entries"][0]["payment_id"] == result.payment["id"]

    def test_balance_after_deposit(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, price_deposit=300)
        AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

        result = AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        balance = fake_db.tables["accounting_entries"][1]
        assert result.entry_type.value == "balance"
        assert balance["amount"] == 1200.0
        assert balance["remaining_amount"] == 0.0
        assert fake_db.tables["leads"][0]["status"] == "closed"

    def test_full_payment(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500)

        result = AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        entry = fake_db.tables["accounting_entries"][0]
        assert result.entry_type.value == "full_payment"
        assert result.remaining_amount is None
        assert entry["amount"] == 1500.0
        assert entry["commission_closer"] == 150.0
        assert fake_db.tables["leads"][0]["status"] == "closed"

    def test_missing_price(self, fake_db, make_lead):
        with pytest.raises(MissingPriceError):
            AccountingService.mark_payment(make_lead()["id"], PaymentType.FULL)

    def test_missing_deposit_price(self, fake_db, make_lead):
        with pytest.raises(MissingPriceError) as exc_info:
            AccountingService.mark_payment(make_lead(price_fixed=1500)["id"], PaymentType.DEPOSIT)

        assert exc_info.value.details["field"] == "price_deposit"

    def test_second_deposit_conflicts(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, price_deposit=300)
        AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

        with pytest.raises(PaymentConflictError):
            AccountingService.mark_payment(lead["id"], PaymentType.DEPOSIT)

    def test_balance_already_paid(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500, status="deposit_paid")
        fake_db.add("lead_payments", {"lead_id": lead["id"], "amount": 1500, "payment_type": "deposit"})

        with pytest.raises(PaymentConflictError) as exc_info:
            AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        assert exc_info.value.status_code == 409

    def test_unknown_lead(self, fake_db):
        with pytest.raises(LeadNotFoundError):
            AccountingService.mark_payment(uuid4(), PaymentType.FULL)

    def test_records_activity(self, fake_db, make_lead):
        lead = make_lead(price_fixed=1500)
        user_id = uuid4()

        AccountingService.mark_payment(lead["id"], PaymentType.FULL, user_id=user_id)

        activity = fake_db.tables["lead_activity_log"][0]
        assert activity["action_type"] == "payment_marked"
        assert activity["new_value"] == "closed"
        assert activity["user_id"] == str(user_id)

    def test_creates_training_session(self, fake_db, make_lead):
        lead = make_lead(
            price_fixed=1500,
            formation_format="fast_track",
            formation_start_date="2025-03-05",
        )

        result = AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        assert result.planning_id == fake_db.tables["planning"][0]["id"]
        assert fake_db.tables["planning_lead"][0]["lead_id"] == lead["id"]

    def test_planning_failure_does_not_fail_payment(self, fake_db, make_lead):
        lead = make_lead(
            price_fixed=1500,
            formation_format="monthly",
            formation_day="wed",
            formation_start_date="2025-03-05",
        )

        result = AccountingService.mark_payment(lead["id"], PaymentType.FULL)

        assert result.planning_id is None
        assert fake_db.tables["planning"] == []
        assert fake_db.tables["leads"][0]["status"] == "closed"
