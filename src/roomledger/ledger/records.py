"""Adapters from the roommate store's JSON document to ledger models.

The store (an HTTP API backed by a single JSON file) owns persistence; this
module only reads its document shape::

    {
        "roommates": [{"id": ..., "name": ...}],
        "expenses": [{"id", "name", "to"?, "type", "date", "amount", "paymode", "note"?}],
        "sharedPurchases": [{"id", "itemName", "amount", "buyer", "payer", ...}],
        "paidRoommateIds": [...],
        "fixedCosts": {"rent": ..., "electricity": ...}
    }

Expense records with ``type == "Settlement"`` (any case) become
:class:`Settlement` models; all others become :class:`Expense`.  Unknown
categories and payment modes are tolerated (see :mod:`roomledger.ledger.models`);
records missing required fields raise :class:`pydantic.ValidationError`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from roomledger.ledger.models import (
    Expense,
    ExpenseCategory,
    FixedCosts,
    LedgerDocument,
    LedgerEntry,
    Participant,
    Settlement,
    SharedPurchase,
)

logger = logging.getLogger(__name__)


_ENTRY_ADAPTER: TypeAdapter[Expense | Settlement | SharedPurchase] = TypeAdapter(LedgerEntry)


def parse_entry(record: Mapping[str, Any]) -> Expense | Settlement | SharedPurchase:
    """Validate a record that already carries its ``kind`` discriminator."""
    return _ENTRY_ADAPTER.validate_python(record)


def entry_from_record(record: Mapping[str, Any]) -> Expense | Settlement:
    """Build an :class:`Expense` or :class:`Settlement` from a store expense record."""
    category = str(record.get("type") or "").strip().lower()
    kind = "settlement" if category == ExpenseCategory.SETTLEMENT.lower() else "expense"
    return parse_entry({**record, "kind": kind})


def purchase_from_record(record: Mapping[str, Any]) -> SharedPurchase:
    return parse_entry({**record, "kind": "shared_purchase"})


def participant_from_record(record: Mapping[str, Any]) -> Participant:
    return Participant.model_validate(record)


def load_document(payload: Mapping[str, Any]) -> LedgerDocument:
    """Convert a decoded store document into a :class:`LedgerDocument`.

    Missing collections are treated as empty.
    """
    return LedgerDocument(
        participants=tuple(participant_from_record(r) for r in payload.get("roommates") or ()),
        expenses=tuple(entry_from_record(r) for r in payload.get("expenses") or ()),
        shared_purchases=tuple(
            purchase_from_record(r) for r in payload.get("sharedPurchases") or ()
        ),
        paid_participant_ids=tuple(payload.get("paidRoommateIds") or ()),
        fixed_costs=FixedCosts.model_validate(payload.get("fixedCosts") or {}),
    )


def read_document(path: str | Path) -> LedgerDocument:
    """Read and convert the store's JSON document at *path*.

    Raises:
        OSError: The file cannot be read.
        json.JSONDecodeError: The file is not valid JSON.
        pydantic.ValidationError: A record does not fit its model.
    """
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    document = load_document(payload)
    logger.info(
        "Loaded %d participant(s), %d expense(s), %d shared purchase(s) from %s",
        len(document.participants),
        len(document.expenses),
        len(document.shared_purchases),
        path,
    )
    return document


def without_participant(document: LedgerDocument, participant_id: str) -> LedgerDocument:
    """Drop a roommate by id, purging it from the paid-status list too.

    Historical records naming the roommate are kept; their debts stay on
    the books under the (now unknown) name.
    """
    remaining = tuple(p for p in document.participants if p.id != participant_id)
    if len(remaining) == len(document.participants):
        logger.warning("No participant with id %s; document unchanged", participant_id)
        return document
    return document.model_copy(
        update={
            "participants": remaining,
            "paid_participant_ids": tuple(
                pid for pid in document.paid_participant_ids if pid != participant_id
            ),
        }
    )
