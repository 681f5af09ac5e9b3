# =============================================================================
# core/services/accounting_service.py - Accounting Business Logic
# =============================================================================
# Bookkeeping for lead payments:
# - Manual entries added from the accounting screen
# - Inline edits of numeric columns (an edited amount recomputes the
#   commissions and, for deposits, the remaining balance)
# - "Mark as paid" buttons on a lead (deposit, balance or full payment)
#
# Tables:
# - accounting_entries: one row per payment with commissions
# - lead_payments:      raw payments, used to know what was already paid
# =============================================================================

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    AccountingEntryNotFoundError,
    InvalidAmountError,
    InvalidFieldError,
    LeadNotFoundError,
    MissingPriceError,
    PaymentConflictError,
)
from core.accounting import (
    EntryType,
    compute_commissions,
    parse_amount,
    recompute_on_amount_edit,
    resolve_deposit_total,
    to_money,
)
from core.models.accounting import (
    EDITABLE_FIELDS,
    AccountingEntryCreate,
    FieldUpdateResponse,
    MarkPaymentResponse,
    PaymentType,
)
from core.models.lead import ActivityAction, LeadStatus
from core.services.activity_service import ActivityService
from core.services.planning_service import PlanningService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utcnow_iso

logger = logging.getLogger(__name__)


def _rates() -> tuple[Decimal, Decimal]:
    return (
        Decimal(str(settings.COMMISSION_CLOSER_RATE)),
        Decimal(str(settings.COMMISSION_FORMATEUR_RATE)),
    )


def _money_or_none(value: Decimal | None) -> float | None:
    return float(to_money(value)) if value is not None else None


class AccountingService:
    """
    Service for accounting operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    @staticmethod
    def create_entry(data: AccountingEntryCreate) -> dict[str, Any]:
        """
        Add a manual accounting entry.

        Commissions are computed from the amount.

        Raises:
            InvalidAmountError: If amount or remaining_amount is not a
                non-negative number
            LeadNotFoundError: If lead doesn't exist
        """
        amount = parse_amount(data.amount)
        if amount is None:
            raise InvalidAmountError(data.amount)

        remaining = None
        if data.remaining_amount not in (None, ""):
            remaining = parse_amount(data.remaining_amount)
            if remaining is None:
                raise InvalidAmountError(data.remaining_amount)

        lead_id = normalize_uuid(data.lead_id)
        if not SupabaseClient.fetch_lead(lead_id, "id"):
            raise LeadNotFoundError(lead_id)

        closer, formateur = compute_commissions(amount, *_rates())
        row = {
            "lead_id": lead_id,
            "entry_type": data.entry_type.value,
            "amount": float(to_money(amount)),
            "commission_closer": float(closer),
            "commission_formateur": float(formateur),
            "remaining_amount": _money_or_none(remaining),
            "status": "active",
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table("accounting_entries").insert(row).execute()
            if response.data:
                entry = response.data[0]
                logger.info(f"Created {row['entry_type']} entry {entry['id']} for lead {lead_id}")
                return entry

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create accounting entry for lead {lead_id}: {e}")
            raise

    @staticmethod
    def delete_entry(entry_id: str | UUID) -> None:
        """
        Delete an accounting entry.

        Raises:
            AccountingEntryNotFoundError: If entry doesn't exist
        """
        entry_id_str = normalize_uuid(entry_id)
        if not SupabaseClient.fetch_accounting_entry(entry_id_str):
            raise AccountingEntryNotFoundError(entry_id_str)

        client = SupabaseClient.get_client()
        client.table("accounting_entries").delete().eq("id", entry_id_str).execute()
        logger.info(f"Deleted accounting entry {entry_id_str}")

    @staticmethod
    def leads_options() -> list[dict[str, Any]]:
        """Leads an entry can be attached to: paid deposit or closed."""
        client = SupabaseClient.get_client()
        response = (
            client.table("leads")
            .select("id, first_name, last_name, price_fixed, price_deposit")
            .in_("status", [LeadStatus.CLOSED.value, LeadStatus.DEPOSIT_PAID.value])
            .order("last_name")
            .execute()
        )
        return response.data or []

    # -------------------------------------------------------------------------
    # Inline Edit
    # -------------------------------------------------------------------------

    @staticmethod
    def update_field(
        entry_id: str | UUID,
        field: str,
        value: Any,
    ) -> FieldUpdateResponse:
        """
        Write one edited column of an accounting entry.

        When the column is `amount`, commissions are recomputed and, for
        deposits, the remaining balance too (total price from the lead,
        else from the entry's previous amount + remaining).

        An amount that is not a non-negative number ("abc", -5) is written
        as typed while commissions and remaining stay as stored; only the
        dependent columns are protected. With ACCOUNTING_STRICT_AMOUNT_EDIT
        such a value is rejected and nothing is written.

        Args:
            entry_id: The entry UUID
            field: One of EDITABLE_FIELDS
            value: The value as typed by the operator

        Returns:
            FieldUpdateResponse listing every column written

        Raises:
            InvalidFieldError: If the field is not editable
            InvalidAmountError: Strict mode only, amount not a number
            AccountingEntryNotFoundError: Strict mode only, unknown entry
        """
        if field not in EDITABLE_FIELDS:
            raise InvalidFieldError(field, EDITABLE_FIELDS)

        entry_id_str = normalize_uuid(entry_id)
        strict = settings.ACCOUNTING_STRICT_AMOUNT_EDIT
        parsed = parse_amount(value)

        if strict and parsed is None and value not in (None, ""):
            raise InvalidAmountError(value)

        entry = SupabaseClient.fetch_accounting_entry(entry_id_str)
        if entry is None and strict:
            raise AccountingEntryNotFoundError(entry_id_str)

        written: dict[str, Any] = {field: float(parsed) if parsed is not None else value}

        recomputed = False
        if field == "amount" and entry is not None:
            recompute = AccountingService._recompute_amount(entry, value)
            if recompute is not None:
                written.update(recompute.as_update())
                recomputed = True

        client = SupabaseClient.get_client()
        try:
            client.table("accounting_entries").update(
                {**written, "updated_at": utcnow_iso()}
            ).eq("id", entry_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to update {field} on entry {entry_id_str}: {e}")
            raise

        if field == "amount" and not recomputed:
            logger.warning(f"Amount of entry {entry_id_str} written without recompute")

        logger.info(f"Updated entry {entry_id_str}: {', '.join(written)}")
        return FieldUpdateResponse(
            entry_id=entry_id_str,
            field=field,
            recomputed=recomputed,
            updated_fields=written,
        )

    @staticmethod
    def _recompute_amount(entry: dict[str, Any], value: Any):
        try:
            entry_type = EntryType(entry.get("entry_type"))
        except ValueError:
            logger.warning(
                f"Entry {entry.get('id')} has unknown type {entry.get('entry_type')!r}, "
                f"commissions not recomputed"
            )
            return None

        total = None
        if entry_type == EntryType.DEPOSIT:
            lead = None
            if entry.get("lead_id"):
                lead = SupabaseClient.fetch_lead(entry["lead_id"], "id, price_fixed")
            total = resolve_deposit_total(lead, entry)

        closer_rate, formateur_rate = _rates()
        return recompute_on_amount_edit(
            entry_type,
            value,
            total,
            closer_rate=closer_rate,
            formateur_rate=formateur_rate,
        )

    # -------------------------------------------------------------------------
    # Mark Payment
    # -------------------------------------------------------------------------

    @staticmethod
    def mark_payment(
        lead_id: str | UUID,
        payment_type: PaymentType,
        user_id: str | UUID | None = None,
    ) -> MarkPaymentResponse:
        """
        Record a payment for a lead.

        - deposit: the agreed deposit; the lead moves to deposit_paid
        - full after a deposit: the balance still owed
        - full otherwise: the whole price in one payment

        A full payment closes the lead. Once paid, the lead gets a training
        session from its stored format if it has none yet.

        Raises:
            LeadNotFoundError: If lead doesn't exist
            MissingPriceError: If price_fixed (or price_deposit) is not set
            PaymentConflictError: If the payment contradicts earlier ones
        """
        lead_id_str = normalize_uuid(lead_id)
        lead = SupabaseClient.fetch_lead(
            lead_id_str,
            "id, price_fixed, price_deposit, status, formation_format, formation_day, formation_start_date",
        )
        if not lead:
            raise LeadNotFoundError(lead_id_str)

        price_fixed = parse_amount(lead.get("price_fixed"))
        if not price_fixed:
            raise MissingPriceError(lead_id_str, "price_fixed")

        payments = SupabaseClient.fetch_lead_payments(lead_id_str)
        total_paid = sum(
            (parse_amount(p.get("amount")) or Decimal("0") for p in payments),
            Decimal("0"),
        )

        remaining: Decimal | None
        if payment_type == PaymentType.DEPOSIT:
            price_deposit = parse_amount(lead.get("price_deposit"))
            if not price_deposit:
                raise MissingPriceError(lead_id_str, "price_deposit")
            if total_paid > 0:
                raise PaymentConflictError(lead_id_str, "A payment has already been recorded for this lead")
            amount = price_deposit
            entry_type = EntryType.DEPOSIT
            remaining = price_fixed - price_deposit
            new_status = LeadStatus.DEPOSIT_PAID

        elif lead.get("status") == LeadStatus.DEPOSIT_PAID.value:
            amount = price_fixed - total_paid
            if amount <= 0:
                raise PaymentConflictError(lead_id_str, "The balance has already been paid")
            entry_type = EntryType.BALANCE
            remaining = Decimal("0")
            new_status = LeadStatus.CLOSED

        else:
            if total_paid > 0:
                raise PaymentConflictError(lead_id_str, "A payment has already been recorded for this lead")
            amount = price_fixed
            entry_type = EntryType.FULL_PAYMENT
            remaining = None
            new_status = LeadStatus.CLOSED

        client = SupabaseClient.get_client()

        try:
            response = client.table("lead_payments").insert({
                "lead_id": lead_id_str,
                "payment_type": payment_type.value,
                "amount": float(to_money(amount)),
            }).execute()
            if not response.data:
                raise Exception("Insert returned no data")
            payment = response.data[0]
        except Exception as e:
            logger.error(f"Failed to record {payment_type.value} payment for lead {lead_id_str}: {e}")
            raise

        entry = None
        try:
            closer, formateur = compute_commissions(amount, *_rates())
            entry_response = client.table("accounting_entries").insert({
                "lead_id": lead_id_str,
                "payment_id": payment["id"],
                "entry_type": entry_type.value,
                "amount": float(to_money(amount)),
                "commission_closer": float(closer),
                "commission_formateur": float(formateur),
                "remaining_amount": _money_or_none(remaining),
                "status": "active",
            }).execute()
            entry = (entry_response.data or [None])[0]

            client.table("leads").update({
                "status": new_status.value,
                "last_action_at": utcnow_iso(),
            }).eq("id", lead_id_str).execute()

        except Exception as e:
            # Remove what was written so a retry starts from the same state
            logger.error(
                f"Failed to record {payment_type.value} payment for lead {lead_id_str}, "
                f"removing payment {payment['id']}: {e}"
            )
            if entry:
                client.table("accounting_entries").delete().eq("id", entry["id"]).execute()
            client.table("lead_payments").delete().eq("id", payment["id"]).execute()
            raise

        logger.info(
            f"Recorded {entry_type.value} of {to_money(amount)} for lead {lead_id_str} "
            f"(status -> {new_status.value})"
        )

        ActivityService.record(
            lead_id_str,
            ActivityAction.PAYMENT_MARKED,
            user_id=user_id,
            field_name="status",
            old_value=lead.get("status"),
            new_value=new_status.value,
            details={"entry_type": entry_type.value, "amount": float(to_money(amount))},
        )

        planning_id = None
        try:
            planning = PlanningService.ensure_session_for_lead(lead)
            if planning:
                planning_id = planning["id"]
        except Exception as e:
            logger.error(f"Failed to create training session for lead {lead_id_str}: {e}")

        return MarkPaymentResponse(
            payment=payment,
            entry_type=entry_type,
            remaining_amount=_money_or_none(remaining),
            planning_id=planning_id,
        )
