"""
Unit Tests for Balance Aggregation

Tests cover:
1. Net balances for simple and multi-transaction groups
2. Known participants without transactions
3. Ordering of the result
4. Conservation and idempotence
"""

from decimal import Decimal

from settlement.balances import compute_balances, infer_participants
from settlement.models import SplitDetail, SplitType, Transaction


def make_transaction(tx_id, paid_by, amount, participants, split_type=SplitType.EQUAL, details=None):
    return Transaction(
        id=tx_id,
        paid_by=paid_by,
        amount=Decimal(amount),
        description=f"Expense {tx_id}",
        participants=participants,
        split_type=split_type,
        split_details=details or [],
    )


def as_dict(balances):
    return {b.participant: b.amount for b in balances}


class TestComputeBalances:
    """Tests for balance calculation."""

    def test_simple_equal_split(self):
        """Test Alice paying 100 shared with Bob."""
        balances = compute_balances([make_transaction("1", "Alice", "100", ["Alice", "Bob"])])

        assert len(balances) == 2
        assert as_dict(balances) == {"Alice": Decimal("50"), "Bob": Decimal("-50")}

    def test_multiple_transactions(self):
        """Test balances accumulated over two transactions."""
        balances = compute_balances([
            make_transaction("1", "Alice", "100", ["Alice", "Bob", "Charlie"]),
            make_transaction("2", "Bob", "60", ["Alice", "Bob", "Charlie"]),
        ])

        # Alice: 100 - 33.34 - 20, Bob: 60 - 33.33 - 20, Charlie: -33.33 - 20
        assert as_dict(balances) == {
            "Alice": Decimal("46.66"),
            "Bob": Decimal("6.67"),
            "Charlie": Decimal("-53.33"),
        }

    def test_payer_not_in_participants(self):
        """Test that a payer buying for others gets full credit."""
        balances = compute_balances([make_transaction("1", "Alice", "100", ["Bob", "Charlie"])])

        assert as_dict(balances) == {
            "Alice": Decimal("100"),
            "Bob": Decimal("-50"),
            "Charlie": Decimal("-50"),
        }

    def test_mixed_split_modes(self):
        """Test fixed and share splits in one ledger."""
        balances = compute_balances([
            make_transaction("1", "Alice", "100", ["Alice", "Bob"], SplitType.FIXED, [
                SplitDetail(participant="Alice", amount=Decimal("25")),
                SplitDetail(participant="Bob", amount=Decimal("75")),
            ]),
            make_transaction("2", "Bob", "30", ["Alice", "Bob"], SplitType.SHARES, [
                SplitDetail(participant="Alice", shares=2),
                SplitDetail(participant="Bob", shares=1),
            ]),
        ])

        # Alice: 100 - 25 - 20, Bob: 30 - 75 - 10
        assert as_dict(balances) == {"Alice": Decimal("55"), "Bob": Decimal("-55")}

    def test_empty_transactions(self):
        """Test that no transactions and no known participants gives nothing."""
        assert compute_balances([]) == []

    def test_empty_transactions_with_known_participants(self):
        """Test that known participants appear at zero."""
        balances = compute_balances([], ["Alice", "Bob"])

        assert as_dict(balances) == {"Alice": Decimal("0"), "Bob": Decimal("0")}

    def test_known_participant_without_transactions(self):
        """Test that an uninvolved member is still reported."""
        balances = compute_balances(
            [make_transaction("1", "Alice", "100", ["Alice", "Bob"])],
            ["Alice", "Bob", "Dave"],
        )

        assert as_dict(balances)["Dave"] == Decimal("0")
        assert len(balances) == 3

    def test_settled_participant_is_exact_zero(self):
        """Test that a fully settled participant reports zero."""
        balances = compute_balances([
            make_transaction("1", "Alice", "50", ["Alice", "Bob"]),
            make_transaction("2", "Bob", "50", ["Alice", "Bob"]),
        ])

        for b in balances:
            assert b.amount == 0
            assert not b.amount.is_signed()


class TestBalanceOrdering:
    """Tests for the order of computed balances."""

    def test_creditors_first(self):
        """Test that balances are sorted largest first."""
        balances = compute_balances([
            make_transaction("1", "Charlie", "90", ["Alice", "Bob", "Charlie"]),
        ])

        amounts = [b.amount for b in balances]
        assert amounts == sorted(amounts, reverse=True)
        assert balances[0].participant == "Charlie"

    def test_ties_keep_first_seen_order(self):
        """Test that equal balances keep their original order."""
        balances = compute_balances(
            [make_transaction("1", "Alice", "90", ["Alice", "Bob", "Charlie"])],
            ["Alice", "Charlie", "Bob"],
        )

        assert [b.participant for b in balances] == ["Alice", "Charlie", "Bob"]


class TestBalanceProperties:
    """Tests for invariants of the aggregator."""

    def test_conservation(self):
        """Test that balances sum to zero within rounding slack."""
        transactions = [
            make_transaction("1", "Alice", "100", ["Alice", "Bob", "Charlie"]),
            make_transaction("2", "Bob", "47.11", ["Alice", "Bob", "Charlie", "Dave"]),
            make_transaction("3", "Dave", "19.99", ["Dave", "Eve"], SplitType.PERCENTAGE, [
                SplitDetail(participant="Dave", percentage=Decimal("33.3")),
                SplitDetail(participant="Eve", percentage=Decimal("66.7")),
            ]),
            make_transaction("4", "Eve", "10", ["Alice", "Bob", "Eve"], SplitType.SHARES, [
                SplitDetail(participant="Alice", shares=3),
                SplitDetail(participant="Bob", shares=3),
                SplitDetail(participant="Eve", shares=1),
            ]),
        ]

        total = sum(b.amount for b in compute_balances(transactions))

        assert abs(total) <= Decimal("0.02") * len(transactions)

    def test_idempotent(self):
        """Test that repeated calls give identical output."""
        transactions = [
            make_transaction("1", "Alice", "100", ["Alice", "Bob", "Charlie"]),
            make_transaction("2", "Charlie", "33", ["Bob", "Charlie"]),
        ]

        assert compute_balances(transactions, ["Alice", "Bob", "Charlie"]) == \
            compute_balances(transactions, ["Alice", "Bob", "Charlie"])

    def test_infer_participants_order(self):
        """Test that participants are inferred in first-seen order."""
        transactions = [
            make_transaction("1", "Bob", "10", ["Alice", "Bob"]),
            make_transaction("2", "Charlie", "10", ["Alice", "Dave"]),
        ]

        assert infer_participants(transactions) == ["Bob", "Alice", "Charlie", "Dave"]
