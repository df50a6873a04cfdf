"""Tests for settlement instructions and their provenance."""

from __future__ import annotations

from decimal import Decimal

from conftest import make_expense, make_participants, make_purchase, make_settlement

from roomledger.ledger.balance import aggregate, debt
from roomledger.ledger.models import ExpenseCategory
from roomledger.ledger.settlement import (
    ProvenanceKind,
    explain_debt,
    settle,
    settlement_instructions,
)


def _instructions(household, **kwargs):
    agg = aggregate(household.expenses, household.purchases, household.participants)
    return agg, settlement_instructions(agg, household.expenses, household.purchases, **kwargs)


class TestSettlementInstructions:
    """Tests for the instruction list."""

    def test_household_instructions(self, household) -> None:
        _, instructions = _instructions(household)
        assert [(i.from_name, i.to_name, i.amount) for i in instructions] == [
            ("A", "B", Decimal("40")),
            ("C", "A", Decimal("20")),
            ("C", "B", Decimal("210")),
        ]

    def test_only_positive_direction(self, household) -> None:
        agg, instructions = _instructions(household)
        for instruction in instructions:
            assert debt(instruction.from_name, instruction.to_name, agg) > 0
        pairs = {(i.from_name, i.to_name) for i in instructions}
        assert not any((b, a) in pairs for a, b in pairs)

    def test_everyone_settled(self) -> None:
        """Example: after B pays A back, no instruction remains."""
        entries = [make_expense("A", "100"), make_settlement("B", "A", "50")]
        report = settle(entries, [], make_participants("A", "B"))
        assert report.instructions == ()
        assert report.total_to_settle == Decimal("0")

    def test_epsilon_suppresses_noise(self) -> None:
        """0.02 split two ways is 0.01, which is at the threshold."""
        participants = make_participants("A", "B")
        report = settle([make_expense("A", "0.02")], [], participants)
        assert report.instructions == ()

        report = settle([make_expense("A", "0.04")], [], participants)
        assert [(i.from_name, i.amount) for i in report.instructions] == [("B", Decimal("0.02"))]

    def test_explicit_epsilon(self) -> None:
        report = settle(
            [make_expense("A", "100")], [], make_participants("A", "B"), epsilon=Decimal("60")
        )
        assert report.instructions == ()

    def test_participant_order_respected(self, household) -> None:
        agg = aggregate(household.expenses, household.purchases, household.participants)
        instructions = settlement_instructions(
            agg, household.expenses, household.purchases, ["C", "B", "A"]
        )
        assert [(i.from_name, i.to_name) for i in instructions] == [
            ("C", "B"),
            ("C", "A"),
            ("A", "B"),
        ]

    def test_empty_household(self) -> None:
        report = settle([], [], [])
        assert report.instructions == ()


class TestProvenance:
    """Provenance lines always add up to the instruction amount."""

    def test_details_reconcile(self, household) -> None:
        _, instructions = _instructions(household)
        for instruction in instructions:
            assert instruction.details_total == instruction.amount

    def test_category_and_item_lines(self, household) -> None:
        _, instructions = _instructions(household)
        a_to_b = instructions[0]
        summary = [(d.kind, d.label, d.paid_by, d.amount) for d in a_to_b.details]
        assert summary == [
            (ProvenanceKind.CATEGORY_SHARE, "Rent", "B", Decimal("200")),
            (ProvenanceKind.CATEGORY_SHARE, "Grocery", "A", Decimal("-100")),
            (ProvenanceKind.ITEM_SPLIT, "Rice", "A", Decimal("-60")),
        ]

    def test_settlement_line_and_items(self, household) -> None:
        _, instructions = _instructions(household)
        c_to_a = instructions[1]
        mart = next(d for d in c_to_a.details if d.label == "Mart")
        assert mart.items == ("Soap",)
        assert mart.total_amount == Decimal("90")
        settled = [d for d in c_to_a.details if d.kind == ProvenanceKind.SETTLEMENT]
        assert [(d.paid_by, d.amount) for d in settled] == [("C", Decimal("-50"))]

    def test_direct_debt_line(self, household) -> None:
        _, instructions = _instructions(household)
        c_to_b = instructions[2]
        milk = next(d for d in c_to_b.details if d.label == "Milk")
        assert milk.kind == ProvenanceKind.DIRECT_DEBT
        assert milk.amount == Decimal("40")

    def test_duplicate_expense_not_in_details(self, household) -> None:
        _, instructions = _instructions(household)
        grocery = next(d for d in instructions[0].details if d.label == "Grocery")
        assert grocery.total_amount == Decimal("300")

    def test_explain_negative_direction(self, household) -> None:
        """Explaining B→A mirrors A→B with flipped signs."""
        agg = aggregate(household.expenses, household.purchases, household.participants)
        lines = explain_debt("B", "A", agg, household.expenses, household.purchases)
        assert sum((line.amount for line in lines), Decimal("0")) == Decimal("-40")

    def test_thirds_reconcile_within_cent(self) -> None:
        """Non-terminating shares still reconcile to the instruction."""
        entries = [
            make_expense("A", "100", category=ExpenseCategory.GROCERY, id="g"),
            make_expense("A", "50", category=ExpenseCategory.ELECTRICITY, id="e"),
            make_settlement("B", "A", "10"),
        ]
        purchases = [
            make_purchase("Veg", "70", buyer="C", payer="A", split=["A", "B", "C"]),
        ]
        report = settle(entries, purchases, make_participants("A", "B", "C"))
        assert report.instructions
        for instruction in report.instructions:
            assert abs(instruction.details_total - instruction.amount) <= Decimal("0.01")

    def test_received_settlement_is_positive(self) -> None:
        """A payment from the creditor to the debtor increases the debt."""
        entries = [make_expense("A", "100"), make_settlement("A", "B", "30")]
        report = settle(entries, [], make_participants("A", "B"))
        (instruction,) = report.instructions
        assert instruction.amount == Decimal("80")
        settled = [d for d in instruction.details if d.kind == ProvenanceKind.SETTLEMENT]
        assert [(d.paid_by, d.amount) for d in settled] == [("A", Decimal("30"))]


class TestSettle:
    """Tests for the one-call pipeline."""

    def test_date_range_scopes_records(self, household) -> None:
        """Only the settlement falls after the 15th."""
        report = settle(
            household.expenses,
            household.purchases,
            household.participants,
            start="15-10-2026",
        )
        assert [(i.from_name, i.to_name, i.amount) for i in report.instructions] == [
            ("A", "C", Decimal("50")),
        ]

    def test_total_to_settle(self, household) -> None:
        report = settle(household.expenses, household.purchases, household.participants)
        assert report.total_to_settle == Decimal("270")

    def test_idempotent(self, household) -> None:
        first = settle(household.expenses, household.purchases, household.participants)
        second = settle(household.expenses, household.purchases, household.participants)
        assert first == second
