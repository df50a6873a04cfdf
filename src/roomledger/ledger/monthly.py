"""Month-by-month settlement snapshots.

Each calendar month is settled on its own: the pipeline is re-run on that
month's records only and nothing carries over from earlier months.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar

from roomledger.ledger.balance import Aggregates
from roomledger.ledger.dates import month_key, month_label, sort_month_keys
from roomledger.ledger.models import (
    DedupScope,
    Expense,
    Participant,
    Settlement,
    SharedPurchase,
    date_of,
)
from roomledger.ledger.settlement import SettlementInstruction, settle

T = TypeVar("T")


@dataclass(frozen=True)
class MonthlySnapshot:
    """Settlement for a single ``MM-YYYY`` month."""

    month_key: str
    aggregates: Aggregates
    instructions: tuple[SettlementInstruction, ...]

    @property
    def label(self) -> str:
        return month_label(self.month_key)

    @property
    def total_to_settle(self) -> Decimal:
        return sum((i.amount for i in self.instructions), Decimal("0"))


def group_by_month(entries: Iterable[T]) -> dict[str, list[T]]:
    """Bucket entries by month key, preserving their original order."""
    months: dict[str, list[T]] = {}
    for entry in entries:
        months.setdefault(month_key(date_of(entry)), []).append(entry)
    return months


def monthly_breakdown(
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    participants: Sequence[Participant | str],
    *,
    dedup_scope: DedupScope | None = None,
    epsilon: Decimal | None = None,
) -> list[MonthlySnapshot]:
    """Settle every month that has at least one record, newest month first."""
    expense_months = group_by_month(expenses)
    purchase_months = group_by_month(purchases)

    snapshots: list[MonthlySnapshot] = []
    for key in sort_month_keys([*expense_months, *purchase_months]):
        report = settle(
            expense_months.get(key, []),
            purchase_months.get(key, []),
            participants,
            dedup_scope=dedup_scope,
            epsilon=epsilon,
        )
        snapshots.append(
            MonthlySnapshot(
                month_key=key,
                aggregates=report.aggregates,
                instructions=report.instructions,
            )
        )
    return snapshots
