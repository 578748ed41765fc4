"""
Expense Settlement Engine

This module provides:
- Split calculation for equal, percentage, fixed and share-based expenses
- Net balance aggregation across a list of transactions
- Greedy creditor/debtor matching that settles every balance
- Validation of splits and settlement plans
"""

from .models import (
    SplitType,
    SplitDetail,
    Transaction,
    Balance,
    Settlement,
    SettlementResult,
    ValidationIssue,
)
from .split import split_amounts, validate_split, default_split_details
from .balances import compute_balances
from .optimizer import optimize, validate_settlements
from .service import (
    SettlementService,
    SettlementServiceError,
    InvalidSplitError,
    compute_settlement,
)

__all__ = [
    "SplitType",
    "SplitDetail",
    "Transaction",
    "Balance",
    "Settlement",
    "SettlementResult",
    "ValidationIssue",
    "split_amounts",
    "validate_split",
    "default_split_details",
    "compute_balances",
    "optimize",
    "validate_settlements",
    "SettlementService",
    "SettlementServiceError",
    "InvalidSplitError",
    "compute_settlement",
]
