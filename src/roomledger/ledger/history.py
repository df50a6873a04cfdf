"""Per-roommate payment history.

Summarises one roommate's position: what they paid, what they still owe
and to whom, what others owe them, and the records they are party to.  Dues
and credits are read off the same settlement instructions the matrix shows,
so the history view can never disagree with it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from roomledger.ledger.balance import ZERO, Aggregates
from roomledger.ledger.models import Expense, Settlement, SharedPurchase, is_settlement
from roomledger.ledger.settlement import SettlementInstruction, settlement_instructions


@dataclass(frozen=True)
class ParticipantHistory:
    """A single roommate's view of the ledger."""

    name: str
    total_paid: Decimal
    due: tuple[SettlementInstruction, ...]
    owed: tuple[SettlementInstruction, ...]
    expenses: tuple[Expense, ...]
    settlements: tuple[Expense | Settlement, ...]
    shared_purchases: tuple[SharedPurchase, ...]

    @property
    def total_due(self) -> Decimal:
        """What this roommate still has to pay others."""
        return sum((i.amount for i in self.due), ZERO)

    @property
    def total_owed(self) -> Decimal:
        """What others still have to pay this roommate."""
        return sum((i.amount for i in self.owed), ZERO)

    @property
    def net(self) -> Decimal:
        return self.total_owed - self.total_due

    @property
    def is_empty(self) -> bool:
        return not (self.expenses or self.settlements or self.shared_purchases)


def participant_history(
    name: str,
    aggregates: Aggregates,
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    *,
    epsilon: Decimal | None = None,
) -> ParticipantHistory:
    """Build the history of roommate *name*.

    Args:
        name: Roommate name (need not be a current participant).
        aggregates: Output of :func:`~roomledger.ledger.balance.aggregate`.
        expenses: Records *aggregates* was built from.
        purchases: Shared purchases *aggregates* was built from.
        epsilon: Noise threshold forwarded to the instruction generator.
    """
    expenses = list(expenses)
    purchases = list(purchases)
    instructions = settlement_instructions(aggregates, expenses, purchases, epsilon=epsilon)

    return ParticipantHistory(
        name=name,
        total_paid=aggregates.display_spend.get(name, ZERO),
        due=tuple(i for i in instructions if i.from_name == name),
        owed=tuple(i for i in instructions if i.to_name == name),
        expenses=tuple(
            e for e in expenses if e.payer_name == name and not is_settlement(e)
        ),
        settlements=tuple(
            e for e in expenses if e.payer_name == name and is_settlement(e)
        ),
        shared_purchases=tuple(
            p for p in purchases if name in (p.buyer_name, p.payer_name)
        ),
    )
