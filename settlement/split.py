"""
Split calculation for a single transaction.

Each split mode maps a transaction onto the amount every participant owes:

- equal: floor each share to the cent, the first participant takes the odd cents
- fixed: declared amounts are used verbatim
- percentage / shares: proportional, rounded to the cent, the last detail
  entry absorbs whatever rounding left over
"""
import logging
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Callable, Optional, Union

from .config import CENT, SPLIT_TOLERANCE
from .models import SplitDetail, SplitType, Transaction, ValidationIssue

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def split_amounts(transaction: Transaction) -> dict[str, Decimal]:
    """Return participant -> owed amount for one transaction."""
    amount = transaction.amount
    details = transaction.split_details

    if transaction.split_type == SplitType.FIXED:
        return _fixed_split(details)
    if transaction.split_type == SplitType.PERCENTAGE:
        return _weighted_split(amount, details, lambda d: d.percentage, Decimal(100))
    if transaction.split_type == SplitType.SHARES:
        total_shares = sum(d.shares or 0 for d in details)
        if total_shares == 0:
            logger.warning(
                "Transaction %s has no shares to split on", transaction.id,
                extra={"data": {"transaction_id": transaction.id}},
            )
            return {}
        return _weighted_split(amount, details, lambda d: d.shares, Decimal(total_shares))
    return _equal_split(amount, transaction.participants)


def _equal_split(amount: Decimal, participants: list[str]) -> dict[str, Decimal]:
    count = len(participants)
    base = (amount / count).quantize(CENT, rounding=ROUND_FLOOR)
    remainder = round_cents(amount - base * count)

    owed = {p: base for p in participants}
    owed[participants[0]] = round_cents(base + remainder)
    return owed


def _fixed_split(details: list[SplitDetail]) -> dict[str, Decimal]:
    return {d.participant: d.amount for d in details if d.amount is not None}


def _weighted_split(
    amount: Decimal,
    details: list[SplitDetail],
    weight_of: Callable[[SplitDetail], Optional[Union[Decimal, int]]],
    total_weight: Decimal,
) -> dict[str, Decimal]:
    owed: dict[str, Decimal] = {}
    if not details:
        return owed

    *head, last = details
    running_total = ZERO
    for detail in head:
        weight = weight_of(detail)
        if weight is None:
            continue
        share = round_cents(amount * Decimal(weight) / total_weight)
        owed[detail.participant] = owed.get(detail.participant, ZERO) + share
        running_total += share

    owed[last.participant] = owed.get(last.participant, ZERO) + round_cents(amount - running_total)
    return owed


def validate_split(transaction: Transaction) -> list[ValidationIssue]:
    """Check that a transaction's split adds up. Never raises."""
    issues: list[ValidationIssue] = []

    total_split = sum(split_amounts(transaction).values(), ZERO)
    if abs(total_split - transaction.amount) > SPLIT_TOLERANCE:
        issues.append(ValidationIssue(
            field="split_details",
            message=(
                f"Split amounts ({total_split:.2f}) do not equal "
                f"transaction amount ({transaction.amount:.2f})"
            ),
            value={"total_split": total_split, "expected": transaction.amount},
        ))

    if transaction.split_type == SplitType.EQUAL and transaction.paid_by not in transaction.participants:
        issues.append(ValidationIssue(
            field="participants",
            message="Payer must be included in participants for equal split",
            value=transaction.paid_by,
        ))

    if issues:
        logger.warning(
            "Split validation failed for transaction %s", transaction.id,
            extra={"data": {"issues": [i.message for i in issues]}},
        )
    return issues


def default_split_details(
    split_type: SplitType, participants: list[str], total_amount: Decimal
) -> list[SplitDetail]:
    """Starting split details for a freshly entered transaction."""
    if not participants:
        return []
    count = len(participants)

    if split_type == SplitType.EQUAL:
        share = round_cents(Decimal(total_amount) / count)
        return [SplitDetail(participant=p, amount=share) for p in participants]
    if split_type == SplitType.PERCENTAGE:
        percentage = round_cents(Decimal(100) / count)
        return [SplitDetail(participant=p, percentage=percentage) for p in participants]
    if split_type == SplitType.SHARES:
        return [SplitDetail(participant=p, shares=1) for p in participants]
    if split_type == SplitType.FIXED:
        return [SplitDetail(participant=p, amount=ZERO) for p in participants]
    return []
