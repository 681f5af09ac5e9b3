# =============================================================================
# core/accounting.py - Commission and Remaining-Balance Rules
# =============================================================================
# Money rules applied to accounting entries:
# - Commissions: 10% of each payment to the closer, 5% to the trainer
# - Deposits carry the balance still owed (total price - deposit)
# - Balance and full payments carry no remaining amount
#
# recompute_on_amount_edit() is called when an operator edits the amount of
# an existing entry. It is pure: the caller persists the result.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any

CLOSER_RATE = Decimal("0.10")
FORMATEUR_RATE = Decimal("0.05")

CENT = Decimal("0.01")


class EntryType(str, Enum):
    """Kind of payment an accounting entry records."""
    DEPOSIT = "deposit"
    BALANCE = "balance"
    FULL_PAYMENT = "full_payment"


def to_money(value: Decimal | float | int) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any) -> Decimal | None:
    """
    Parse a user-supplied amount.

    Accepts numbers and numeric strings ("199.90", "199,90").

    Returns:
        The amount as Decimal, or None if it is not a finite,
        non-negative number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None

    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None

    if not amount.is_finite() or amount < 0:
        return None
    return amount


def compute_commissions(
    amount: Decimal | float | int,
    closer_rate: Decimal | float = CLOSER_RATE,
    formateur_rate: Decimal | float = FORMATEUR_RATE,
) -> tuple[Decimal, Decimal]:
    """Return (commission_closer, commission_formateur) for a payment."""
    amount = Decimal(str(amount))
    return (
        to_money(amount * Decimal(str(closer_rate))),
        to_money(amount * Decimal(str(formateur_rate))),
    )


@dataclass(frozen=True)
class PaymentRecompute:
    """
    Dependent fields of an accounting entry after its amount changed.

    When `update_remaining` is False the stored remaining amount must be
    left as it is (a deposit whose total price is unknown).
    """
    commission_closer: Decimal
    commission_formateur: Decimal
    remaining_amount: Decimal | None = None
    update_remaining: bool = True

    def as_update(self) -> dict[str, float | None]:
        """Columns to write back to accounting_entries."""
        update: dict[str, float | None] = {
            "commission_closer": float(self.commission_closer),
            "commission_formateur": float(self.commission_formateur),
        }
        if self.update_remaining:
            update["remaining_amount"] = (
                float(self.remaining_amount) if self.remaining_amount is not None else None
            )
        return update


def resolve_deposit_total(
    lead: dict[str, Any] | None,
    entry: dict[str, Any] | None,
) -> Decimal | None:
    """
    Find the total price a deposit counts against.

    Uses the lead's fixed price when it has one, otherwise the entry's
    previous amount + remaining amount. Returns None when neither is known.
    """
    if lead:
        price = parse_amount(lead.get("price_fixed"))
        if price is not None:
            return price

    if entry:
        previous_amount = parse_amount(entry.get("amount"))
        previous_remaining = parse_amount(entry.get("remaining_amount"))
        if previous_amount is not None and previous_remaining is not None:
            return previous_amount + previous_remaining

    return None


def recompute_on_amount_edit(
    entry_type: EntryType | str,
    new_amount: Any,
    total_hint: Decimal | float | int | None = None,
    closer_rate: Decimal | float = CLOSER_RATE,
    formateur_rate: Decimal | float = FORMATEUR_RATE,
) -> PaymentRecompute | None:
    """
    Recompute commissions and remaining balance for an edited amount.

    Args:
        entry_type: "deposit", "balance" or "full_payment"
        new_amount: The edited amount, as typed by the operator
        total_hint: Total price for deposits (see resolve_deposit_total)

    Returns:
        PaymentRecompute, or None when new_amount is not a non-negative
        number (no dependent field should be written)

    Example:
        >>> recompute_on_amount_edit("deposit", 200, 600).as_update()
        {'commission_closer': 20.0, 'commission_formateur': 10.0, 'remaining_amount': 400.0}
    """
    amount = parse_amount(new_amount)
    if amount is None:
        return None

    closer, formateur = compute_commissions(amount, closer_rate, formateur_rate)

    if EntryType(entry_type) != EntryType.DEPOSIT:
        return PaymentRecompute(closer, formateur, remaining_amount=None)

    if total_hint is None:
        return PaymentRecompute(closer, formateur, update_remaining=False)

    remaining = max(Decimal("0"), to_money(Decimal(str(total_hint)) - amount))
    return PaymentRecompute(closer, formateur, remaining_amount=to_money(remaining))
