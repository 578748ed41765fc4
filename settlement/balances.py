import logging
from decimal import Decimal
from typing import Iterable, Optional

from .config import SETTLED_TOLERANCE
from .models import Balance, Transaction
from .split import ZERO, round_cents, split_amounts

logger = logging.getLogger(__name__)


def infer_participants(transactions: Iterable[Transaction]) -> list[str]:
    """Ordered union of every payer and participant, first appearance wins."""
    seen: dict[str, None] = {}
    for tx in transactions:
        seen.setdefault(tx.paid_by)
        for p in tx.participants:
            seen.setdefault(p)
    return list(seen)


def compute_balances(
    transactions: list[Transaction], known_participants: Optional[list[str]] = None
) -> list[Balance]:
    """
    Net position per participant: what they paid minus what they owe.

    Positive balances are creditors, negative ones debtors. Every name in
    ``known_participants`` is reported even if no transaction touches it.
    The result is sorted by amount, largest creditor first; ties keep their
    first-seen order.
    """
    logger.info(
        "Starting balance calculation",
        extra={"data": {
            "transaction_count": len(transactions),
            "known_participants": known_participants,
        }},
    )

    totals: dict[str, Decimal] = {p: ZERO for p in known_participants or []}

    for tx in transactions:
        totals[tx.paid_by] = totals.get(tx.paid_by, ZERO) + tx.amount

        owed = split_amounts(tx)
        logger.debug(
            "Transaction: %s", tx.description,
            extra={"data": {
                "paid_by": tx.paid_by,
                "amount": tx.amount,
                "participants": tx.participants,
                "split_amounts": owed,
            }},
        )
        for participant, amount in owed.items():
            totals[participant] = totals.get(participant, ZERO) - amount

    balances = []
    for participant, total in totals.items():
        amount = round_cents(total)
        if abs(amount) < SETTLED_TOLERANCE:
            amount = ZERO
        balances.append(Balance(participant=participant, amount=amount))

    balances.sort(key=lambda b: b.amount, reverse=True)

    logger.info(
        "Balance calculation complete",
        extra={"data": {
            "participant_count": len(balances),
            "balances": {b.participant: b.amount for b in balances},
        }},
    )
    return balances
