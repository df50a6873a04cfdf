"""Settlement instructions: who pays whom, how much, and why.

Provides :func:`settlement_instructions`, which walks the debt matrix and
emits one :class:`SettlementInstruction` per positive pairwise debt, and
:func:`settle`, the one-call pipeline used by the monthly breakdown and the
CLI.

Each instruction carries a provenance breakdown (``details``) assembled
from the raw records rather than from the debt value.  The lines are signed
so that they always add up to the instruction amount:

- category shares of the creditor's equal-split expenses (+) and of the
  debtor's (−);
- individual shared purchases the debtor owes the creditor for (+) and
  the creditor owes the debtor for (−);
- settlements already paid by the debtor (−) or by the creditor (+).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum

from roomledger.config import settings
from roomledger.ledger.balance import (
    ZERO,
    Aggregates,
    aggregate,
    debt,
    participant_names,
    purchase_debts,
    settlement_recipient,
)
from roomledger.ledger.dates import filter_by_date_range
from roomledger.ledger.dedup import DuplicateFilter, extract_item_name
from roomledger.ledger.models import (
    DedupScope,
    Expense,
    Participant,
    Settlement,
    SharedPurchase,
    is_settlement,
)

logger = logging.getLogger(__name__)


class ProvenanceKind(StrEnum):
    """What a provenance line accounts for."""

    CATEGORY_SHARE = "category_share"
    ITEM_SPLIT = "item_split"
    DIRECT_DEBT = "direct_debt"
    SETTLEMENT = "settlement"


@dataclass(frozen=True)
class ProvenanceLine:
    """One signed component of a settlement instruction.

    Attributes:
        kind: What the line accounts for.
        label: Expense category, purchased item name, or ``"Settlement"``.
        paid_by: The roommate who originally fronted the money.
        amount: Signed contribution to the instruction amount.
        total_amount: The full underlying amount before splitting.
        items: Item names mentioned by the grouped expenses, if any.
    """

    kind: ProvenanceKind
    label: str
    paid_by: str
    amount: Decimal
    total_amount: Decimal
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class SettlementInstruction:
    """``from_name`` should pay ``to_name`` the given ``amount``."""

    from_name: str
    to_name: str
    amount: Decimal
    details: tuple[ProvenanceLine, ...] = ()

    @property
    def details_total(self) -> Decimal:
        return sum((line.amount for line in self.details), ZERO)


@dataclass(frozen=True)
class SettlementReport:
    """Aggregates and the instructions derived from them."""

    aggregates: Aggregates
    instructions: tuple[SettlementInstruction, ...]

    @property
    def total_to_settle(self) -> Decimal:
        return sum((i.amount for i in self.instructions), ZERO)


# ── Provenance ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _Records:
    """Record lists pre-sorted once for the per-pair provenance walk."""

    pooled: list[Expense]
    settlements: list[Expense | Settlement]
    purchases: list[SharedPurchase]
    split_count: int

    @classmethod
    def prepare(
        cls,
        aggregates: Aggregates,
        expenses: Iterable[Expense | Settlement],
        purchases: Iterable[SharedPurchase],
    ) -> _Records:
        purchases = list(purchases)
        is_duplicate = DuplicateFilter(purchases, aggregates.dedup_scope)
        pooled: list[Expense] = []
        paid: list[Expense | Settlement] = []
        for entry in expenses:
            if is_settlement(entry):
                paid.append(entry)
            elif not is_duplicate(entry):
                pooled.append(entry)
        return cls(pooled, paid, purchases, aggregates.split_count)


def _category_lines(records: _Records, payer: str, sign: int) -> list[ProvenanceLine]:
    """Per-category share of *payer*'s pooled expenses, signed by *sign*."""
    totals: dict[str, Decimal] = {}
    items: dict[str, list[str]] = {}
    for expense in records.pooled:
        if expense.payer_name != payer:
            continue
        category = str(expense.category)
        totals[category] = totals.get(category, ZERO) + expense.amount
        names = items.setdefault(category, [])
        item_name = extract_item_name(expense.note)
        if item_name and item_name not in names:
            names.append(item_name)

    return [
        ProvenanceLine(
            kind=ProvenanceKind.CATEGORY_SHARE,
            label=category,
            paid_by=payer,
            amount=sign * total / records.split_count,
            total_amount=total,
            items=tuple(items[category]),
        )
        for category, total in totals.items()
    ]


def _purchase_lines(records: _Records, debtor: str, creditor: str) -> list[ProvenanceLine]:
    lines: list[ProvenanceLine] = []
    for purchase in records.purchases:
        if purchase.payer_name == creditor:
            owing, sign = debtor, 1
        elif purchase.payer_name == debtor:
            owing, sign = creditor, -1
        else:
            continue

        owed = sum((amt for name, amt in purchase_debts(purchase) if name == owing), ZERO)
        if not owed:
            continue
        lines.append(
            ProvenanceLine(
                kind=ProvenanceKind.ITEM_SPLIT if purchase.has_split else ProvenanceKind.DIRECT_DEBT,
                label=purchase.item_name,
                paid_by=purchase.payer_name,
                amount=sign * owed,
                total_amount=purchase.amount,
                items=(purchase.item_name,),
            )
        )
    return lines


def _settlement_lines(records: _Records, debtor: str, creditor: str) -> list[ProvenanceLine]:
    lines: list[ProvenanceLine] = []
    for entry in records.settlements:
        recipient = settlement_recipient(entry)
        if entry.payer_name == debtor and recipient == creditor:
            sign = -1
        elif entry.payer_name == creditor and recipient == debtor:
            sign = 1
        else:
            continue
        lines.append(
            ProvenanceLine(
                kind=ProvenanceKind.SETTLEMENT,
                label="Settlement",
                paid_by=entry.payer_name,
                amount=sign * entry.amount,
                total_amount=entry.amount,
            )
        )
    return lines


def _explain(records: _Records, debtor: str, creditor: str) -> tuple[ProvenanceLine, ...]:
    return (
        *_category_lines(records, creditor, 1),
        *_category_lines(records, debtor, -1),
        *_purchase_lines(records, debtor, creditor),
        *_settlement_lines(records, debtor, creditor),
    )


def explain_debt(
    debtor: str,
    creditor: str,
    aggregates: Aggregates,
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
) -> tuple[ProvenanceLine, ...]:
    """Provenance lines whose amounts sum to ``debt(debtor, creditor)``."""
    return _explain(_Records.prepare(aggregates, expenses, purchases), debtor, creditor)


# ── Instructions ──────────────────────────────────────────────────────────────


def settlement_instructions(
    aggregates: Aggregates,
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    participants: Sequence[Participant | str] | None = None,
    *,
    epsilon: Decimal | None = None,
) -> list[SettlementInstruction]:
    """List every "pay X to Y" instruction, in participant order.

    Only the positive direction of each pair is emitted, and only when the
    debt exceeds *epsilon* (``settings.settlement_epsilon`` by default).

    Args:
        aggregates: Output of :func:`~roomledger.ledger.balance.aggregate`.
        expenses: The expense/settlement records *aggregates* was built from.
        purchases: The shared purchase records *aggregates* was built from.
        participants: Roommates to pair up; defaults to
            ``aggregates.participants``.
        epsilon: Noise threshold below which a debt is considered settled.
    """
    names = participant_names(participants) if participants is not None else list(aggregates.participants)
    threshold = settings.settlement_epsilon if epsilon is None else epsilon
    records = _Records.prepare(aggregates, expenses, purchases)

    instructions: list[SettlementInstruction] = []
    for debtor in names:
        for creditor in names:
            if debtor == creditor:
                continue
            amount = debt(debtor, creditor, aggregates)
            if amount <= threshold:
                continue
            instructions.append(
                SettlementInstruction(
                    from_name=debtor,
                    to_name=creditor,
                    amount=amount,
                    details=_explain(records, debtor, creditor),
                )
            )

    logger.debug("Derived %d settlement instruction(s) for %d participant(s)", len(instructions), len(names))
    return instructions


def settle(
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    participants: Sequence[Participant | str],
    *,
    start: str | date | None = None,
    end: str | date | None = None,
    dedup_scope: DedupScope | None = None,
    epsilon: Decimal | None = None,
) -> SettlementReport:
    """Run the full pipeline, optionally scoped to a ``[start, end]`` date range."""
    expenses = filter_by_date_range(expenses, start, end)
    purchases = filter_by_date_range(purchases, start, end)
    aggregates = aggregate(expenses, purchases, participants, dedup_scope=dedup_scope)
    instructions = settlement_instructions(
        aggregates, expenses, purchases, participants, epsilon=epsilon
    )
    return SettlementReport(aggregates=aggregates, instructions=tuple(instructions))
