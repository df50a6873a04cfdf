"""Typed ledger records for the RoomLedger settlement engine.

Maps the three record kinds kept by the roommate store to pydantic models:

- :class:`Expense` — an equal-split cost paid by one roommate.
- :class:`Settlement` — a direct payment from one roommate to another.
- :class:`SharedPurchase` — an item bought for an explicit subset of
  roommates (or, in the legacy mode, owed in full by the buyer).

The three kinds form a closed union discriminated on ``kind``.  Downstream
code reads them only through the accessors at the bottom of this module.

Field aliases match the store's JSON document (``name``, ``to``,
``paymode``, ``splitBetween`` ...) so records can be validated straight from
it; Python field names are accepted as well.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# ── Enumerations ──────────────────────────────────────────────────────────────


class ExpenseCategory(StrEnum):
    """Expense categories known to the store."""

    GROCERY = "Grocery"
    MART = "Mart"
    VEGETABLE = "Vegetable"
    RENT = "Rent"
    ELECTRICITY = "Electricity"
    SETTLEMENT = "Settlement"
    OTHER = "Other"


class PaymentMode(StrEnum):
    """How a roommate paid."""

    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"
    NET_BANKING = "Net Banking"
    OTHER = "Other"


class DedupScope(StrEnum):
    """Which shared purchases feed the duplicate-expense key set."""

    ALL = "all"
    SPLIT_ONLY = "split_only"


# ── Records ───────────────────────────────────────────────────────────────────


class _Record(BaseModel):
    """Shared model configuration for every ledger record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _lenient_enum(value: Any, enum_cls: type[StrEnum], fallback: StrEnum, field: str) -> Any:
    """Match *value* against *enum_cls* case-insensitively, else return *fallback*.

    The store writes these fields verbatim, so unknown or null values are
    logged and replaced rather than rejected.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == text:
                return member
    logger.warning("Unknown %s %r; using %r", field, value, str(fallback))
    return fallback


class _Entry(_Record):
    """Base for the three ledger entry kinds."""

    @field_validator("payment_mode", mode="before", check_fields=False)
    @classmethod
    def lenient_payment_mode(cls, v: Any) -> Any:
        return _lenient_enum(v, PaymentMode, PaymentMode.OTHER, "payment mode")


class Participant(_Record):
    """A roommate.  ``name`` is the natural key used throughout the ledger."""

    id: str
    name: str


class Expense(_Entry):
    """An equal-split expense: divided evenly across every roommate."""

    kind: Literal["expense"] = "expense"
    id: str
    payer_name: str = Field(alias="name")
    category: ExpenseCategory = Field(default=ExpenseCategory.OTHER, alias="type")
    date: str = ""
    amount: Decimal
    payment_mode: PaymentMode = Field(default=PaymentMode.CASH, alias="paymode")
    note: str | None = None
    mirrors_purchase_id: str | None = Field(
        default=None,
        alias="mirrorsPurchaseId",
        description="Id of the shared purchase this expense was generated from.",
    )

    @field_validator("category", mode="before")
    @classmethod
    def lenient_category(cls, v: Any) -> Any:
        return _lenient_enum(v, ExpenseCategory, ExpenseCategory.OTHER, "expense category")


class Settlement(_Entry):
    """A direct transfer from ``payer_name`` to ``recipient_name``.

    Older store records may lack ``recipient_name``; the recipient is then
    recovered from a ``"Settlement payment to <name>"`` note.
    """

    kind: Literal["settlement"] = "settlement"
    id: str
    payer_name: str = Field(alias="name")
    recipient_name: str | None = Field(default=None, alias="to")
    date: str = ""
    amount: Decimal
    payment_mode: PaymentMode = Field(default=PaymentMode.UPI, alias="paymode")
    note: str | None = None

    @property
    def category(self) -> ExpenseCategory:
        return ExpenseCategory.SETTLEMENT


class SharedPurchase(_Entry):
    """An item purchase split among a named subset of roommates.

    With ``split_participants`` every listed roommate other than the payer
    owes :attr:`share` to the payer.  Without it (legacy mode) the buyer
    owes the payer the full amount when the two differ.
    """

    kind: Literal["shared_purchase"] = "shared_purchase"
    id: str
    item_name: str = Field(alias="itemName")
    amount: Decimal
    buyer_name: str = Field(alias="buyer")
    payer_name: str = Field(alias="payer")
    date: str = ""
    payment_mode: PaymentMode = Field(default=PaymentMode.CASH, alias="paymode")
    note: str | None = None
    split_participants: tuple[str, ...] | None = Field(default=None, alias="splitBetween")
    per_person_amount: Decimal | None = Field(default=None, alias="perPersonAmount")

    @property
    def has_split(self) -> bool:
        """True when an explicit, non-empty split set is present."""
        return bool(self.split_participants)

    @property
    def share(self) -> Decimal:
        """Amount owed per split participant.

        Falls back to ``amount / len(split_participants)``; without a split
        set the full amount is one share.
        """
        if self.per_person_amount is not None:
            return self.per_person_amount
        if self.split_participants:
            return self.amount / len(self.split_participants)
        return self.amount


LedgerEntry = Annotated[
    Expense | Settlement | SharedPurchase,
    Field(discriminator="kind"),
]


class FixedCosts(_Record):
    """Monthly household bills kept outside the expense list."""

    rent: Decimal = Decimal("0")
    electricity: Decimal = Decimal("0")

    @field_validator("rent", "electricity", mode="before")
    @classmethod
    def zero_if_missing(cls, v: Any) -> Any:
        return Decimal("0") if v is None or v == "" else v

    @property
    def total(self) -> Decimal:
        return self.rent + self.electricity


class LedgerDocument(_Record):
    """Typed view of the roommate store's JSON document."""

    participants: tuple[Participant, ...] = Field(default=(), alias="roommates")
    expenses: tuple[Expense | Settlement, ...] = ()
    shared_purchases: tuple[SharedPurchase, ...] = Field(default=(), alias="sharedPurchases")
    paid_participant_ids: tuple[str, ...] = Field(default=(), alias="paidRoommateIds")
    fixed_costs: FixedCosts = Field(default_factory=FixedCosts, alias="fixedCosts")

    @property
    def participant_names(self) -> list[str]:
        return [p.name for p in self.participants]


# ── Normalized accessors ──────────────────────────────────────────────────────


def is_settlement(entry: Expense | Settlement | SharedPurchase) -> bool:
    """Whether *entry* is a direct settlement payment.

    An :class:`Expense` tagged with the ``Settlement`` category counts too;
    the store never produces one, but hand-built lists might.
    """
    if entry.kind == "settlement":
        return True
    return entry.kind == "expense" and entry.category == ExpenseCategory.SETTLEMENT


def amount_of(entry: Expense | Settlement | SharedPurchase) -> Decimal:
    return entry.amount


def date_of(entry: Expense | Settlement | SharedPurchase) -> str:
    """The entry's date exactly as recorded (see :mod:`roomledger.ledger.dates`)."""
    return entry.date


def payer_of(entry: Expense | Settlement | SharedPurchase) -> str:
    return entry.payer_name
