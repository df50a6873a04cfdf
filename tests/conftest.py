"""Shared fixtures: a small three-roommate household.

Records (all in October 2026)::

    E1  A  Grocery  300
    E2  B  Rent     600
    E3  C  Mart      90   note "Item: Soap - big pack"   (no matching purchase)
    E4  A  Grocery  120   note "Item: Rice"              (mirrors P1)
    P1  Rice  120  buyer A, payer A, split [A, B]        → B owes A 60
    P2  Milk   40  buyer C, payer B, no split            → C owes B 40
    S1  C → A  50  settlement

Expected debts (N = 3): A owes B 40, C owes A 20, C owes B 210.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest

from roomledger.ledger.models import (
    Expense,
    ExpenseCategory,
    Participant,
    Settlement,
    SharedPurchase,
)


@dataclass
class Household:
    participants: list[Participant]
    expenses: list[Expense | Settlement]
    purchases: list[SharedPurchase]


def make_expense(
    payer: str,
    amount: str,
    *,
    category: ExpenseCategory = ExpenseCategory.GROCERY,
    note: str | None = None,
    date: str = "05-10-2026",
    id: str | None = None,
    mirrors_purchase_id: str | None = None,
) -> Expense:
    return Expense(
        id=id or f"e-{payer}-{amount}-{category}",
        payer_name=payer,
        category=category,
        date=date,
        amount=Decimal(amount),
        note=note,
        mirrors_purchase_id=mirrors_purchase_id,
    )


def make_settlement(
    payer: str,
    recipient: str | None,
    amount: str,
    *,
    note: str | None = None,
    date: str = "20-10-2026",
    id: str | None = None,
) -> Settlement:
    return Settlement(
        id=id or f"s-{payer}-{recipient}-{amount}",
        payer_name=payer,
        recipient_name=recipient,
        date=date,
        amount=Decimal(amount),
        note=note,
    )


def make_purchase(
    item: str,
    amount: str,
    *,
    buyer: str,
    payer: str,
    split: list[str] | None = None,
    per_person: str | None = None,
    date: str = "2026-10-10",
    id: str | None = None,
) -> SharedPurchase:
    return SharedPurchase(
        id=id or f"p-{item}",
        item_name=item,
        amount=Decimal(amount),
        buyer_name=buyer,
        payer_name=payer,
        date=date,
        split_participants=tuple(split) if split is not None else None,
        per_person_amount=Decimal(per_person) if per_person is not None else None,
    )


def make_participants(*names: str) -> list[Participant]:
    return [Participant(id=str(i), name=name) for i, name in enumerate(names, 1)]


@pytest.fixture
def household() -> Household:
    return Household(
        participants=make_participants("A", "B", "C"),
        expenses=[
            make_expense("A", "300", id="E1"),
            make_expense("B", "600", category=ExpenseCategory.RENT, id="E2"),
            make_expense(
                "C", "90", category=ExpenseCategory.MART, note="Item: Soap - big pack", id="E3"
            ),
            make_expense("A", "120", note="Item: Rice", id="E4"),
            make_settlement("C", "A", "50", id="S1"),
        ],
        purchases=[
            make_purchase("Rice", "120", buyer="A", payer="A", split=["A", "B"], id="P1"),
            make_purchase("Milk", "40", buyer="C", payer="B", id="P2"),
        ],
    )
