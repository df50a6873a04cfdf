"""Household spending summary.

Totals for the dashboard: what the household spent on shared expenses and
fixed bills, the resulting per-person share, item purchases, personal
purchases, per-category totals and each roommate's contribution.

Fixed costs (rent and electricity kept outside the expense list) only feed
the summary; they never create pairwise debts.  Expense classification
follows the balance aggregator, so a mirror expense is never counted next
to the shared purchase it was generated from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from roomledger.config import settings
from roomledger.ledger.balance import ZERO, aggregate, participant_names
from roomledger.ledger.dedup import DuplicateFilter
from roomledger.ledger.models import (
    DedupScope,
    Expense,
    FixedCosts,
    Participant,
    Settlement,
    SharedPurchase,
    is_settlement,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HouseholdSummary:
    """Household-level totals for one set of ledger records.

    Attributes:
        participant_count: Number of current roommates.
        shared_total: Equal-split expenses (mirror expenses excluded).
        fixed_costs: Rent and electricity for the period.
        item_total: Shared purchases that create debts (split or legacy).
        personal_total: Purchases a roommate bought and paid for alone.
        category_totals: Equal-split expense totals per category, largest first.
        contributions: Out-of-pocket spend per roommate, largest first.
    """

    participant_count: int
    shared_total: Decimal
    fixed_costs: FixedCosts
    item_total: Decimal
    personal_total: Decimal
    category_totals: dict[str, Decimal] = field(default_factory=dict)
    contributions: dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_spend(self) -> Decimal:
        """Shared expenses plus fixed costs."""
        return self.shared_total + self.fixed_costs.total

    @property
    def per_person(self) -> Decimal:
        return self.total_spend / max(1, self.participant_count)


def is_personal_purchase(purchase: SharedPurchase) -> bool:
    """No split set and bought by the payer: nobody else owes anything."""
    return not purchase.has_split and purchase.buyer_name == purchase.payer_name


def _largest_first(totals: dict[str, Decimal]) -> dict[str, Decimal]:
    return dict(sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])))


def summarize(
    expenses: Iterable[Expense | Settlement],
    purchases: Iterable[SharedPurchase],
    participants: Sequence[Participant | str],
    fixed_costs: FixedCosts | None = None,
    *,
    dedup_scope: DedupScope | None = None,
) -> HouseholdSummary:
    """Build the household summary.

    Args:
        expenses: Expense and settlement records (settlements are ignored).
        purchases: Shared purchase records.
        participants: Current roommates.
        fixed_costs: Rent and electricity; zero when omitted.
        dedup_scope: Duplicate-detection policy; defaults to
            ``settings.dedup_scope``.
    """
    scope = dedup_scope or settings.dedup_scope
    expenses = list(expenses)
    purchases = list(purchases)
    is_duplicate = DuplicateFilter(purchases, scope)

    shared_total = ZERO
    categories: dict[str, Decimal] = {}
    for entry in expenses:
        if is_settlement(entry) or is_duplicate(entry):
            continue
        shared_total += entry.amount
        key = str(entry.category)
        categories[key] = categories.get(key, ZERO) + entry.amount

    item_total = ZERO
    personal_total = ZERO
    for purchase in purchases:
        if is_personal_purchase(purchase):
            personal_total += purchase.amount
        else:
            item_total += purchase.amount

    aggregates = aggregate(expenses, purchases, participants, dedup_scope=scope)
    count = len(participant_names(participants))
    logger.debug("Summarized %d expense(s) and %d purchase(s)", len(expenses), len(purchases))

    return HouseholdSummary(
        participant_count=count,
        shared_total=shared_total,
        fixed_costs=fixed_costs if fixed_costs is not None else FixedCosts(),
        item_total=item_total,
        personal_total=personal_total,
        category_totals=_largest_first(categories),
        contributions=_largest_first(aggregates.display_spend),
    )
