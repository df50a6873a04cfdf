"""Balance aggregation and the pairwise debt matrix.

Provides :func:`aggregate`, which reduces expense, settlement and shared
purchase records into per-roommate totals, and :func:`debt`, which combines
those totals into the net amount one roommate owes another.

Balances are **always derived**, never stored: every call replays the full
record lists it is given and keeps no state between calls.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from roomledger.config import settings
from roomledger.ledger.dedup import DuplicateFilter
from roomledger.ledger.models import (
    DedupScope,
    Expense,
    Participant,
    Settlement,
    SharedPurchase,
    is_settlement,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

SETTLEMENT_NOTE_PATTERN = re.compile(r"Settlement payment to (.+)")

# (debtor, creditor) or (payer, recipient) name pair.
Pair = tuple[str, str]


@dataclass(frozen=True)
class Aggregates:
    """Per-roommate totals derived from one set of ledger records.

    Attributes:
        participants: Roommate names, in display order.
        equal_share: Equal-split expense money fronted by each roommate.
        display_spend: Everything each roommate paid out of pocket
            (reporting only, never used for debt math).
        direct_payments: Settlement totals keyed by ``(payer, recipient)``.
        item_debts: Shared purchase debts keyed by ``(debtor, creditor)``.
        dedup_scope: Key-set policy used to detect duplicate expenses.
    """

    participants: tuple[str, ...]
    equal_share: dict[str, Decimal]
    display_spend: dict[str, Decimal]
    direct_payments: dict[Pair, Decimal]
    item_debts: dict[Pair, Decimal]
    dedup_scope: DedupScope = DedupScope.ALL

    @property
    def split_count(self) -> int:
        """Number of ways the equal-split pool is divided (never zero)."""
        return max(1, len(self.participants))


def participant_names(participants: Iterable[Participant | str]) -> list[str]:
    """Normalize participants (models or plain names) to a list of names."""
    return [p if isinstance(p, str) else p.name for p in participants]


def settlement_recipient(entry: Expense | Settlement) -> str | None:
    """Who received a settlement payment.

    Falls back to parsing a ``"Settlement payment to <name>"`` note for
    records stored without an explicit recipient.
    """
    recipient = getattr(entry, "recipient_name", None)
    if recipient:
        return recipient
    match = SETTLEMENT_NOTE_PATTERN.search(entry.note or "")
    return match.group(1).strip() if match else None


def purchase_debts(purchase: SharedPurchase) -> list[tuple[str, Decimal]]:
    """List ``(debtor, amount)`` pairs a shared purchase creates toward its payer.

    - Split purchase: every split participant except the payer owes one share.
    - Legacy purchase (no split set): the buyer owes the full amount, unless
      the buyer is also the payer.
    """
    payer = purchase.payer_name
    if purchase.has_split:
        share = purchase.share
        return [(name, share) for name in purchase.split_participants if name != payer]
    if purchase.buyer_name != payer:
        return [(purchase.buyer_name, purchase.amount)]
    return []


def aggregate(
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    participants: Sequence[Participant | str],
    *,
    dedup_scope: DedupScope | None = None,
) -> Aggregates:
    """Reduce ledger records into the totals the debt matrix needs.

    Args:
        expenses: Expense and settlement records (already date-filtered when
            the caller wants a scoped view).
        purchases: Shared purchase records.
        participants: Current roommates; each starts at zero.  Names that
            appear only in records are tolerated and added lazily.
        dedup_scope: Duplicate-detection policy; defaults to
            ``settings.dedup_scope``.

    Returns:
        An :class:`Aggregates` snapshot.
    """
    scope = dedup_scope or settings.dedup_scope
    names = participant_names(participants)
    purchases = list(purchases)
    is_duplicate = DuplicateFilter(purchases, scope)

    equal_share: dict[str, Decimal] = defaultdict(Decimal)
    display_spend: dict[str, Decimal] = defaultdict(Decimal)
    direct_payments: dict[Pair, Decimal] = defaultdict(Decimal)
    item_debts: dict[Pair, Decimal] = defaultdict(Decimal)

    for name in names:
        equal_share[name] = ZERO
        display_spend[name] = ZERO

    skipped = 0
    for entry in expenses:
        if is_settlement(entry):
            recipient = settlement_recipient(entry)
            if recipient is None:
                logger.debug("Settlement %s has no recoverable recipient; ignored", entry.id)
                continue
            direct_payments[(entry.payer_name, recipient)] += entry.amount
            continue

        # The shadowed shared purchase supplies both the display amount and
        # any item debt.
        if is_duplicate(entry):
            skipped += 1
            continue

        equal_share[entry.payer_name] += entry.amount
        display_spend[entry.payer_name] += entry.amount

    for purchase in purchases:
        display_spend[purchase.payer_name] += purchase.amount
        for debtor, owed in purchase_debts(purchase):
            item_debts[(debtor, purchase.payer_name)] += owed

    if skipped:
        logger.debug("Skipped %d expense(s) mirroring a shared purchase", skipped)

    return Aggregates(
        participants=tuple(names),
        equal_share=dict(equal_share),
        display_spend=dict(display_spend),
        direct_payments=dict(direct_payments),
        item_debts=dict(item_debts),
        dedup_scope=scope,
    )


def debt(debtor: str, creditor: str, aggregates: Aggregates) -> Decimal:
    """Net amount *debtor* owes *creditor*.

    ::

        (equal_share[creditor] - equal_share[debtor]) / N
        + item_debts[debtor→creditor] - item_debts[creditor→debtor]
        - direct_payments[debtor→creditor] + direct_payments[creditor→debtor]

    Returns:
        A signed :class:`~decimal.Decimal`:

        - **positive** → *debtor* owes *creditor*
        - **negative** → *creditor* owes *debtor*
        - **zero** → settled up (always the case for ``debtor == creditor``)
    """
    if debtor == creditor:
        return ZERO

    share = aggregates.equal_share
    items = aggregates.item_debts
    payments = aggregates.direct_payments

    base = (share.get(creditor, ZERO) - share.get(debtor, ZERO)) / aggregates.split_count
    item = items.get((debtor, creditor), ZERO) - items.get((creditor, debtor), ZERO)
    paid = payments.get((creditor, debtor), ZERO) - payments.get((debtor, creditor), ZERO)
    return base + item + paid


def debt_matrix(aggregates: Aggregates) -> dict[str, dict[str, Decimal]]:
    """Full N×N table: ``matrix[debtor][creditor] == debt(debtor, creditor)``."""
    names = aggregates.participants
    return {i: {j: debt(i, j, aggregates) for j in names} for i in names}


def net_position(name: str, aggregates: Aggregates) -> Decimal:
    """What everyone else owes *name* in total (negative: what *name* owes)."""
    return sum(
        (debt(other, name, aggregates) for other in aggregates.participants),
        ZERO,
    )
