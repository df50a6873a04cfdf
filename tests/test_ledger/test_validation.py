"""Tests for record validation rules."""

from __future__ import annotations

from decimal import Decimal

from conftest import make_expense, make_purchase, make_settlement

from roomledger.ledger.models import ExpenseCategory
from roomledger.ledger.validation import (
    validate_expense,
    validate_participant_name,
    validate_settlement,
    validate_shared_purchase,
)

NAMES = ["Asha", "Ben", "Chitra"]


def _hard(errors: list[str]) -> list[str]:
    return [e for e in errors if not e.startswith("WARNING:")]


def _warnings(errors: list[str]) -> list[str]:
    return [e for e in errors if e.startswith("WARNING:")]


class TestValidateParticipantName:
    """Tests for the validate_participant_name function."""

    def test_new_name_passes(self) -> None:
        assert validate_participant_name("Dev", NAMES) == []

    def test_blank_name_fails(self) -> None:
        errors = validate_participant_name("   ", NAMES)
        assert any("blank" in e for e in errors)

    def test_duplicate_is_case_insensitive(self) -> None:
        """'asha' clashes with the existing 'Asha'."""
        errors = validate_participant_name(" asha ", NAMES)
        assert any("already exists" in e for e in errors)

    def test_accepts_generator_of_names(self) -> None:
        errors = validate_participant_name("Ben", (n for n in NAMES))
        assert len(errors) == 1


class TestValidateExpense:
    """Tests for the validate_expense function."""

    def test_valid_expense(self) -> None:
        assert validate_expense(make_expense("Asha", "300"), NAMES) == []

    def test_zero_amount_fails(self) -> None:
        errors = validate_expense(make_expense("Asha", "0"), NAMES)
        assert any("positive" in e.lower() for e in errors)

    def test_negative_amount_fails(self) -> None:
        errors = validate_expense(make_expense("Asha", "-10"), NAMES)
        assert any("positive" in e.lower() for e in errors)

    def test_unknown_payer_fails(self) -> None:
        errors = validate_expense(make_expense("Zed", "10"), NAMES)
        assert any("Zed" in e and "not a known participant" in e for e in errors)

    def test_payer_not_checked_without_names(self) -> None:
        assert validate_expense(make_expense("Zed", "10")) == []

    def test_settlement_category_rejected(self) -> None:
        expense = make_expense("Asha", "10", category=ExpenseCategory.SETTLEMENT)
        errors = validate_expense(expense, NAMES)
        assert any("recorded as settlements" in e for e in errors)

    def test_names_from_generator(self) -> None:
        """Both payer lookups see the full name set."""
        errors = validate_expense(make_expense("Chitra", "10"), (n for n in NAMES))
        assert errors == []


class TestValidateSettlement:
    """Tests for the validate_settlement function."""

    def test_valid_settlement_no_balance(self) -> None:
        """A valid settlement with no balance context passes."""
        assert validate_settlement(make_settlement("Ben", "Asha", "500"), NAMES) == []

    def test_valid_settlement_within_balance(self) -> None:
        """Paying less than what is owed yields neither errors nor warnings."""
        errors = validate_settlement(
            make_settlement("Ben", "Asha", "100"),
            NAMES,
            current_debt=Decimal("200"),
        )
        assert errors == []

    def test_zero_amount_fails(self) -> None:
        errors = validate_settlement(make_settlement("Ben", "Asha", "0"), NAMES)
        assert any("positive" in e.lower() for e in errors)

    def test_missing_recipient_fails(self) -> None:
        errors = validate_settlement(make_settlement("Ben", None, "50"), NAMES)
        assert any("Recipient is required" in e for e in errors)

    def test_self_payment_fails(self) -> None:
        errors = validate_settlement(make_settlement("Ben", "Ben", "50"), NAMES)
        assert any("must be different" in e for e in errors)

    def test_unknown_recipient_fails(self) -> None:
        errors = validate_settlement(make_settlement("Ben", "Zed", "50"), NAMES)
        assert any("Recipient (Zed)" in e for e in errors)

    def test_overpayment_warns(self) -> None:
        """Paying more than owed is allowed, with a warning."""
        errors = validate_settlement(
            make_settlement("Ben", "Asha", "300"),
            NAMES,
            current_debt=Decimal("200"),
        )
        assert _hard(errors) == []
        warnings = _warnings(errors)
        assert len(warnings) == 1
        assert "exceeds" in warnings[0]
        assert "200.00" in warnings[0]

    def test_payment_when_nothing_owed_warns(self) -> None:
        errors = validate_settlement(
            make_settlement("Ben", "Asha", "50"),
            NAMES,
            current_debt=Decimal("-20"),
        )
        assert _hard(errors) == []
        assert any("does not currently owe" in w for w in _warnings(errors))

    def test_no_overpayment_check_for_invalid_amount(self) -> None:
        errors = validate_settlement(
            make_settlement("Ben", "Asha", "-5"),
            NAMES,
            current_debt=Decimal("0"),
        )
        assert _warnings(errors) == []


class TestValidateSharedPurchase:
    """Tests for the validate_shared_purchase function."""

    def test_valid_split_purchase(self) -> None:
        purchase = make_purchase(
            "Soap", "60", buyer="Ben", payer="Asha", split=["Asha", "Ben"], per_person="30"
        )
        assert validate_shared_purchase(purchase, NAMES) == []

    def test_legacy_purchase_without_split(self) -> None:
        purchase = make_purchase("Milk", "40", buyer="Chitra", payer="Ben")
        assert validate_shared_purchase(purchase, NAMES) == []

    def test_blank_item_fails(self) -> None:
        purchase = make_purchase("  ", "40", buyer="Chitra", payer="Ben")
        errors = validate_shared_purchase(purchase, NAMES)
        assert any("Item name" in e for e in errors)

    def test_empty_split_fails(self) -> None:
        purchase = make_purchase("Soap", "60", buyer="Ben", payer="Asha", split=[])
        errors = validate_shared_purchase(purchase, NAMES)
        assert any("at least one participant" in e for e in errors)

    def test_unknown_split_participant_fails(self) -> None:
        purchase = make_purchase(
            "Soap", "60", buyer="Ben", payer="Asha", split=["Asha", "Zed", "Yan"]
        )
        errors = validate_shared_purchase(purchase, NAMES)
        assert "Unknown split participant(s): Yan, Zed." in errors

    def test_unknown_buyer_and_payer(self) -> None:
        purchase = make_purchase("Soap", "60", buyer="Zed", payer="Yan")
        errors = validate_shared_purchase(purchase, NAMES)
        assert any(e.startswith("Buyer (Zed)") for e in errors)
        assert any(e.startswith("Payer (Yan)") for e in errors)

    def test_non_positive_per_person_amount_fails(self) -> None:
        purchase = make_purchase(
            "Soap", "60", buyer="Ben", payer="Asha", split=["Asha", "Ben"], per_person="0"
        )
        errors = validate_shared_purchase(purchase, NAMES)
        assert any("Per-person amount" in e for e in errors)
