"""Record validation rules for the store boundary.

Provides one ``validate_*`` function per record kind.  The API layer calls
them before a record is accepted; the settlement engine itself never
validates and never raises on the records it is given.

Validation errors are returned as a list of human-readable strings.
An empty list means the record is valid.  Strings starting with
``"WARNING:"`` are soft warnings — the record can still be stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from roomledger.ledger.models import (
    Expense,
    ExpenseCategory,
    Settlement,
    SharedPurchase,
)


def validate_participant_name(
    name: str,
    existing_names: Iterable[str] = (),
) -> list[str]:
    """Validate a new roommate name.

    Names must be non-blank and unique, compared case-insensitively.
    """
    errors: list[str] = []
    if not name or not name.strip():
        errors.append("Participant name must not be blank.")
        return errors

    taken = {n.strip().lower() for n in existing_names}
    if name.strip().lower() in taken:
        errors.append(f"A participant named {name.strip()!r} already exists.")
    return errors


def validate_expense(
    expense: Expense,
    known_names: Iterable[str] | None = None,
) -> list[str]:
    """Validate an equal-split expense.

    Args:
        expense: The expense to check.
        known_names: Current roommate names.  When given, the payer must be
            one of them.
    """
    names = set(known_names) if known_names is not None else None
    errors: list[str] = []
    _check_amount(errors, expense.amount, "Expense")
    _check_name(errors, expense.payer_name, "Payer", names)

    if expense.category == ExpenseCategory.SETTLEMENT:
        errors.append("Settlement payments must be recorded as settlements, not expenses.")

    return errors


def validate_settlement(
    settlement: Settlement,
    known_names: Iterable[str] | None = None,
    current_debt: Decimal | None = None,
) -> list[str]:
    """Validate a proposed settlement payment.

    Args:
        settlement: The settlement to check.
        known_names: Current roommate names.  When given, both parties must
            be among them.
        current_debt: What the payer currently owes the recipient
            (``debt(payer, recipient)``).  If provided, an overpayment
            warning is emitted but the settlement is still allowed.
    """
    names = set(known_names) if known_names is not None else None
    errors: list[str] = []
    _check_amount(errors, settlement.amount, "Settlement")
    _check_name(errors, settlement.payer_name, "Payer", names)

    recipient = settlement.recipient_name
    if not recipient or not recipient.strip():
        errors.append("Recipient is required for a settlement.")
    else:
        _check_name(errors, recipient, "Recipient", names)
        if recipient == settlement.payer_name:
            errors.append("Payer and recipient of a settlement must be different.")

    if current_debt is not None and settlement.amount > 0:
        _check_overpayment(errors, settlement.amount, current_debt)

    return errors


def validate_shared_purchase(
    purchase: SharedPurchase,
    known_names: Iterable[str] | None = None,
) -> list[str]:
    """Validate a shared purchase.

    An explicit split set must be non-empty and, when *known_names* is
    given, name only current roommates.
    """
    names = set(known_names) if known_names is not None else None
    errors: list[str] = []
    _check_amount(errors, purchase.amount, "Purchase")

    if not purchase.item_name.strip():
        errors.append("Item name must not be blank.")

    _check_name(errors, purchase.buyer_name, "Buyer", names)
    _check_name(errors, purchase.payer_name, "Payer", names)

    split = purchase.split_participants
    if split is not None:
        if not split:
            errors.append("A split must name at least one participant.")
        elif names is not None:
            unknown = sorted(set(split) - names)
            if unknown:
                errors.append(f"Unknown split participant(s): {', '.join(unknown)}.")

    if purchase.per_person_amount is not None and purchase.per_person_amount <= 0:
        errors.append("Per-person amount must be a positive number.")

    return errors


def _check_amount(errors: list[str], amount: Decimal, label: str) -> None:
    if amount <= 0:
        errors.append(f"{label} amount must be a positive number.")


def _check_name(
    errors: list[str],
    name: str,
    role: str,
    known_names: set[str] | None,
) -> None:
    if not name or not name.strip():
        errors.append(f"{role} name must not be blank.")
    elif known_names is not None and name not in known_names:
        errors.append(f"{role} ({name}) is not a known participant.")


def _check_overpayment(errors: list[str], amount: Decimal, debt: Decimal) -> None:
    """Append a warning if the settlement exceeds what the payer owes.

    ``debt`` is positive when the payer owes the recipient; zero or
    negative means the payer owes nothing.
    """
    if debt <= 0:
        errors.append(
            f"WARNING: The payer does not currently owe the recipient anything. "
            f"This settlement of {amount} will create a credit."
        )
    elif amount > debt:
        errors.append(
            f"WARNING: Settlement amount ({amount}) exceeds the "
            f"outstanding balance ({debt:.2f}). The difference will "
            f"become a credit."
        )
