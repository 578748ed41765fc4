import logging
from datetime import datetime, timezone
from typing import Optional

from .balances import compute_balances, infer_participants
from .models import (
    AuditEntry,
    AuditOperation,
    Balance,
    Settlement,
    SettlementResult,
    Transaction,
    ValidationIssue,
)
from .optimizer import optimize, validate_settlements
from .split import ZERO, round_cents, validate_split

logger = logging.getLogger(__name__)


class SettlementServiceError(Exception):
    pass


class InvalidSplitError(SettlementServiceError):
    def __init__(self, issues: dict[str, list[ValidationIssue]]):
        self.issues = issues
        details = "; ".join(
            f"{tx_id}: {', '.join(i.message for i in tx_issues)}"
            for tx_id, tx_issues in issues.items()
        )
        super().__init__(f"Inconsistent split in {len(issues)} transaction(s): {details}")


class SettlementService:
    """Stateless facade over the split, balance and optimizer steps.

    Every call works only on the arguments it is given, so one instance can
    serve any number of concurrent requests.
    """

    def compute_settlement(
        self, transactions: list[Transaction], known_participants: Optional[list[str]] = None
    ) -> SettlementResult:
        logger.info(
            "Starting settlement calculation",
            extra={"data": {
                "transaction_count": len(transactions),
                "known_participants": known_participants,
            }},
        )

        if not transactions:
            logger.warning("No transactions provided for settlement")

        participants = known_participants if known_participants is not None else infer_participants(transactions)
        balances = compute_balances(transactions, participants)
        settlements = optimize(balances)
        total_amount = sum((tx.amount for tx in transactions), ZERO)

        result = SettlementResult(
            balances=balances,
            settlements=settlements,
            total_transactions=len(transactions),
            total_amount=round_cents(total_amount),
            optimized_transaction_count=len(settlements),
        )

        logger.info(
            "Settlement calculation complete",
            extra={"data": {
                "total_transactions": result.total_transactions,
                "total_amount": result.total_amount,
                "optimized_transaction_count": result.optimized_transaction_count,
                "participant_count": len(result.balances),
            }},
        )
        return result

    def validate_settlements(self, balances: list[Balance], settlements: list[Settlement]) -> bool:
        logger.debug(
            "Validating settlements",
            extra={"data": {"balance_count": len(balances), "settlement_count": len(settlements)}},
        )
        return validate_settlements(balances, settlements)

    def check_splits(self, transactions: list[Transaction]) -> None:
        """Raise InvalidSplitError if any transaction's split does not add up."""
        issues = {}
        for tx in transactions:
            tx_issues = validate_split(tx)
            if tx_issues:
                issues[tx.id] = tx_issues
        if issues:
            raise InvalidSplitError(issues)

    def audit_trail(
        self, transactions: list[Transaction], known_participants: Optional[list[str]] = None
    ) -> list[AuditEntry]:
        balances = compute_balances(transactions, known_participants)
        trail = [AuditEntry(
            timestamp=datetime.now(timezone.utc),
            operation=AuditOperation.BALANCE_CALCULATION,
            input={"transactions": transactions, "known_participants": known_participants},
            output=balances,
        )]

        settlements = optimize(balances)
        trail.append(AuditEntry(
            timestamp=datetime.now(timezone.utc),
            operation=AuditOperation.SETTLEMENT_OPTIMIZATION,
            input=balances,
            output=settlements,
        ))

        trail.append(AuditEntry(
            timestamp=datetime.now(timezone.utc),
            operation=AuditOperation.VALIDATION,
            input={"balances": balances, "settlements": settlements},
            output=validate_settlements(balances, settlements),
        ))
        return trail


_default_service = SettlementService()


def compute_settlement(
    transactions: list[Transaction], known_participants: Optional[list[str]] = None
) -> SettlementResult:
    return _default_service.compute_settlement(transactions, known_participants)
