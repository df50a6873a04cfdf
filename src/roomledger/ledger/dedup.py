"""Detection of expenses that shadow a shared purchase.

When a roommate records a shared purchase they bought and paid for
themselves, the store also writes a plain :class:`Expense` with a note such
as ``"Item: Rice - 5kg bag"``.  Counting both would charge the same money
twice, so such an expense is flagged as a **duplicate** and left out of the
equal-split pool; the shared purchase alone accounts for it.

Two ways of recognising a duplicate, in order:

1. ``Expense.mirrors_purchase_id`` — an explicit reference to the purchase.
   When set, it is the only criterion.
2. Legacy records: the item name parsed from the note, combined with the
   payer and the amount, is looked up in a key set built from the shared
   purchases (``payer|amount|item``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import Decimal

from roomledger.ledger.models import DedupScope, Expense, Settlement, SharedPurchase

ITEM_NOTE_PATTERN = re.compile(r"Item:\s*(.+?)(?:\s*-|$)", re.IGNORECASE)


def extract_item_name(note: str | None) -> str | None:
    """Return the item name from an ``"Item: <name> - ..."`` note, or ``None``."""
    if not note:
        return None
    match = ITEM_NOTE_PATTERN.search(note)
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def purchase_key(payer_name: str, amount: Decimal, item_name: str) -> str:
    """Build the ``payer|amount|item`` lookup key (amount to 2 dp, item lower-cased)."""
    return f"{payer_name}|{amount:.2f}|{item_name.strip().lower()}"


def build_purchase_keys(
    purchases: Iterable[SharedPurchase],
    scope: DedupScope = DedupScope.ALL,
) -> frozenset[str]:
    """Collect lookup keys for every shared purchase in *scope*.

    With :attr:`DedupScope.SPLIT_ONLY` only purchases carrying a non-empty
    split set contribute keys.
    """
    return frozenset(
        purchase_key(p.payer_name, p.amount, p.item_name)
        for p in purchases
        if scope == DedupScope.ALL or p.has_split
    )


def build_purchase_ids(
    purchases: Iterable[SharedPurchase],
    scope: DedupScope = DedupScope.ALL,
) -> frozenset[str]:
    """Ids of the shared purchases in *scope*, for explicit references."""
    return frozenset(
        p.id for p in purchases if scope == DedupScope.ALL or p.has_split
    )


def is_duplicate(
    expense: Expense | Settlement,
    purchase_keys: frozenset[str],
    purchase_ids: frozenset[str] = frozenset(),
) -> bool:
    """Whether *expense* merely mirrors a shared purchase.

    Settlements are never duplicates.  An expense with an explicit
    ``mirrors_purchase_id`` is a duplicate exactly when that purchase is in
    *purchase_ids*; otherwise its note is matched against *purchase_keys*.
    """
    if expense.kind != "expense":
        return False

    if expense.mirrors_purchase_id is not None:
        return expense.mirrors_purchase_id in purchase_ids

    item_name = extract_item_name(expense.note)
    if item_name is None:
        return False
    return purchase_key(expense.payer_name, expense.amount, item_name) in purchase_keys


class DuplicateFilter:
    """Precomputed key and id sets for repeated :func:`is_duplicate` checks."""

    def __init__(
        self,
        purchases: Iterable[SharedPurchase],
        scope: DedupScope = DedupScope.ALL,
    ) -> None:
        purchases = list(purchases)
        self.scope = scope
        self.keys = build_purchase_keys(purchases, scope)
        self.ids = build_purchase_ids(purchases, scope)

    def __call__(self, expense: Expense | Settlement) -> bool:
        return is_duplicate(expense, self.keys, self.ids)
