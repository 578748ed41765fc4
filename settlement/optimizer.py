"""
Greedy settlement of net balances.

The largest remaining creditor is matched with the largest remaining debtor
until one side runs out. This is a heuristic: finding the fewest possible
transfers is NP-hard in general, but greedy matching never needs more than
``n - 1`` transfers for ``n`` unsettled participants.
"""
import logging
from decimal import Decimal

from .config import SETTLED_TOLERANCE
from .models import Balance, Settlement
from .split import ZERO, round_cents

logger = logging.getLogger(__name__)


def optimize(balances: list[Balance]) -> list[Settlement]:
    """Return transfers that bring every balance within a cent of zero."""
    logger.debug(
        "Starting optimized settlement calculation",
        extra={"data": {"balances": {b.participant: b.amount for b in balances}}},
    )

    # [participant, remaining] pairs; the caller's balances are never touched
    creditors: list[list] = []
    debtors: list[list] = []
    for b in balances:
        if b.amount > SETTLED_TOLERANCE:
            creditors.append([b.participant, b.amount])
        elif b.amount < -SETTLED_TOLERANCE:
            debtors.append([b.participant, -b.amount])

    # stable: equal amounts keep input order
    creditors.sort(key=lambda c: c[1], reverse=True)
    debtors.sort(key=lambda d: d[1], reverse=True)

    logger.info(
        "Sorted creditors and debtors",
        extra={"data": {
            "creditors": [tuple(c) for c in creditors],
            "debtors": [tuple(d) for d in debtors],
        }},
    )

    settlements: list[Settlement] = []
    i = j = 0
    step = 1
    while i < len(creditors) and j < len(debtors):
        creditor, debtor = creditors[i], debtors[j]
        transfer = round_cents(min(creditor[1], debtor[1]))

        logger.debug(
            "Settlement step %d", step,
            extra={"data": {
                "creditor": creditor[0], "creditor_amount": creditor[1],
                "debtor": debtor[0], "debtor_amount": debtor[1],
                "transfer": transfer,
            }},
        )

        if transfer > SETTLED_TOLERANCE:
            settlements.append(Settlement(
                from_participant=debtor[0], to_participant=creditor[0], amount=transfer,
            ))

        creditor[1] -= transfer
        debtor[1] -= transfer

        if creditor[1] <= SETTLED_TOLERANCE:
            i += 1
        if debtor[1] <= SETTLED_TOLERANCE:
            j += 1
        step += 1

    logger.info(
        "Settlement calculation complete",
        extra={"data": {
            "settlement_count": len(settlements),
            "unmatched_creditors": [c[0] for c in creditors[i:]],
            "unmatched_debtors": [d[0] for d in debtors[j:]],
        }},
    )
    return settlements


def validate_settlements(balances: list[Balance], settlements: list[Settlement]) -> bool:
    """True when applying ``settlements`` leaves every balance within a cent of zero."""
    remaining: dict[str, Decimal] = {b.participant: b.amount for b in balances}

    # paying a debt moves the payer's balance up towards zero
    for s in settlements:
        remaining[s.from_participant] = remaining.get(s.from_participant, ZERO) + s.amount
        remaining[s.to_participant] = remaining.get(s.to_participant, ZERO) - s.amount

    for participant, amount in remaining.items():
        if abs(amount) > SETTLED_TOLERANCE:
            logger.error(
                "Validation failed: %s has remaining balance of %s", participant, amount,
                extra={"data": {"participant": participant, "remaining": amount}},
            )
            return False

    logger.info("Settlement validation passed")
    return True
