"""RoomLedger — shared-expense settlement for roommates.

Entry points for callers (the API/UI layer):

- :func:`aggregate` — reduce ledger records into per-roommate totals.
- :func:`debt` — net amount one roommate owes another.
- :func:`settlement_instructions` — "pay X to Y" list with provenance.
- :func:`monthly_breakdown` — independent settlement per calendar month.
- :func:`summarize` — household totals, fixed costs and per-person share.
"""

from roomledger.ledger.balance import Aggregates, aggregate, debt, debt_matrix
from roomledger.ledger.models import (
    Expense,
    ExpenseCategory,
    Participant,
    PaymentMode,
    Settlement,
    SharedPurchase,
)
from roomledger.ledger.monthly import MonthlySnapshot, monthly_breakdown
from roomledger.ledger.settlement import SettlementInstruction, settle, settlement_instructions
from roomledger.ledger.summary import HouseholdSummary, summarize

__version__ = "0.1.0"

__all__ = [
    "Aggregates",
    "Expense",
    "ExpenseCategory",
    "HouseholdSummary",
    "MonthlySnapshot",
    "Participant",
    "PaymentMode",
    "Settlement",
    "SettlementInstruction",
    "SharedPurchase",
    "aggregate",
    "debt",
    "debt_matrix",
    "monthly_breakdown",
    "settle",
    "settlement_instructions",
    "summarize",
]
