"""Plain-text formatters for settlement output.

Converts the structured results of the settlement engine (instructions,
debt matrices, monthly snapshots, roommate histories, household summaries)
into terminal-friendly text.  Amounts are always shown to two decimal
places with the configured currency symbol.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from roomledger.config import settings
from roomledger.ledger.balance import Aggregates, debt_matrix
from roomledger.ledger.history import ParticipantHistory
from roomledger.ledger.monthly import MonthlySnapshot
from roomledger.ledger.settlement import (
    ProvenanceKind,
    ProvenanceLine,
    SettlementInstruction,
)
from roomledger.ledger.summary import HouseholdSummary


def format_amount(amount: Decimal, symbol: str | None = None) -> str:
    """Format *amount* as e.g. ``"₹1,250.00"`` (sign kept for negatives)."""
    symbol = settings.currency_symbol if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def _format_detail(line: ProvenanceLine) -> str:
    amount = format_amount(line.amount)
    total = format_amount(line.total_amount)
    if line.kind == ProvenanceKind.CATEGORY_SHARE:
        items = f" ({', '.join(line.items)})" if line.items else ""
        return f"{line.label}{items} paid by {line.paid_by}: {amount} (from {total})"
    if line.kind == ProvenanceKind.ITEM_SPLIT:
        return f"Item split: {line.label}: {amount} (from {total})"
    if line.kind == ProvenanceKind.DIRECT_DEBT:
        return f"Item bought: {line.label}: {amount}"
    return f"Settlement paid by {line.paid_by}: {amount}"


def format_instruction(instruction: SettlementInstruction, *, with_details: bool = True) -> str:
    """One instruction, e.g. ``"B → A: ₹50.00"`` followed by its provenance."""
    lines = [f"{instruction.from_name} → {instruction.to_name}: {format_amount(instruction.amount)}"]
    if with_details:
        lines.extend(f"    - {_format_detail(d)}" for d in instruction.details)
    return "\n".join(lines)


def format_instructions(
    instructions: Sequence[SettlementInstruction],
    title: str = "All Time Settlement",
    *,
    with_details: bool = True,
) -> str:
    """Format a full instruction list under *title*."""
    if not instructions:
        return f"{title}\nEveryone is settled up."
    body = "\n".join(format_instruction(i, with_details=with_details) for i in instructions)
    return f"{title}\n{body}"


def format_matrix(aggregates: Aggregates) -> str:
    """Render the debt matrix with a spend column, one row per debtor.

    Cell ``[row][col]`` is what *row* owes *col*; negative means *col* owes
    *row*.
    """
    names = list(aggregates.participants)
    if not names:
        return "Add roommates to see the settlement matrix."

    matrix = debt_matrix(aggregates)
    header = ["Name", "Spent", *names]
    rows = [header]
    for row in names:
        spent = aggregates.display_spend.get(row, Decimal("0"))
        cells = ["-" if row == col else format_amount(matrix[row][col]) for col in names]
        rows.append([row, format_amount(spent), *cells])

    widths = [max(len(r[c]) for r in rows) for c in range(len(header))]
    return "\n".join(
        "  ".join(cell.rjust(width) if c else cell.ljust(width) for c, (cell, width) in enumerate(zip(r, widths)))
        for r in rows
    )


def format_monthly_breakdown(snapshots: Sequence[MonthlySnapshot]) -> str:
    """Format each monthly snapshot, newest first, separated by blank lines."""
    if not snapshots:
        return "No monthly data available."
    return "\n\n".join(
        format_instructions(s.instructions, title=s.label, with_details=False)
        for s in snapshots
    )


def format_history(history: ParticipantHistory) -> str:
    """Format a roommate's totals, dues and credits."""
    lines = [
        f"{history.name}",
        f"Total paid: {format_amount(history.total_paid)}",
        f"Total due: {format_amount(history.total_due)}",
        f"Total owed to them: {format_amount(history.total_owed)}",
    ]
    if history.due:
        lines.append("Owes:")
        lines.extend(f"  {format_instruction(i)}" for i in history.due)
    if history.owed:
        lines.append("Is owed:")
        lines.extend(f"  {format_instruction(i)}" for i in history.owed)
    if history.is_empty:
        lines.append("No transactions found.")
    return "\n".join(lines)


def format_summary(summary: HouseholdSummary) -> str:
    """Format household totals, category totals and contributions."""
    fixed = summary.fixed_costs
    lines = [
        "Household Summary",
        f"Roommates: {summary.participant_count}",
        f"Shared expenses: {format_amount(summary.shared_total)}",
        f"Fixed costs: {format_amount(fixed.total)} "
        f"(rent {format_amount(fixed.rent)}, electricity {format_amount(fixed.electricity)})",
        f"Total spend: {format_amount(summary.total_spend)}",
        f"Per person: {format_amount(summary.per_person)}",
        f"Item purchases: {format_amount(summary.item_total)}",
    ]
    if summary.personal_total:
        lines.append(f"Personal purchases: {format_amount(summary.personal_total)}")
    if summary.category_totals:
        lines.append("By category:")
        lines.extend(f"  {name}: {format_amount(total)}" for name, total in summary.category_totals.items())
    if summary.contributions:
        lines.append("Contributions:")
        lines.extend(f"  {name}: {format_amount(total)}" for name, total in summary.contributions.items())
    return "\n".join(lines)
