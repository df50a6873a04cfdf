"""Date normalization for ledger records.

The store keeps dates as text in either ``DD-MM-YYYY`` or ``YYYY-MM-DD``
form (occasionally a full ISO timestamp).  These helpers parse both, derive
``MM-YYYY`` month keys, and filter records by date range.

Nothing here raises on bad input: an unparseable date string is returned
unchanged (or excluded from a range filter) so one malformed record never
aborts a whole computation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date
from typing import TypeVar

from roomledger.ledger.models import date_of

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEPARATORS = re.compile(r"[-/.]")
_MONTH_KEY = re.compile(r"^(\d{2})-(\d{4})$")


def parse_ledger_date(text: str | None) -> date | None:
    """Parse a ``DD-MM-YYYY`` or ``YYYY-MM-DD`` string into a :class:`date`.

    A trailing time component (``2025-01-05T10:00:00Z``) is ignored.
    Returns ``None`` when the string cannot be interpreted.
    """
    if not text:
        return None
    head = text.strip().split("T", 1)[0].split(" ", 1)[0]
    parts = _SEPARATORS.split(head)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    if len(parts[0]) == 4:
        year, month, day = parts
    elif len(parts[2]) == 4:
        day, month, year = parts
    else:
        return None

    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def _coerce(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return parse_ledger_date(value)


def month_key(text: str) -> str:
    """Return the ``MM-YYYY`` month key for a record date.

    ``MM-YYYY`` input is passed through.  Unparseable input is returned
    as-is so it still lands in a (best-effort) bucket of its own.
    """
    if _MONTH_KEY.match(text or ""):
        return text
    parsed = parse_ledger_date(text)
    if parsed is None:
        logger.warning("Unparseable ledger date %r; bucketing as-is", text)
        return text
    return f"{parsed.month:02d}-{parsed.year}"


def month_label(key: str) -> str:
    """Human-readable label for a month key, e.g. ``"October 2026"``."""
    match = _MONTH_KEY.match(key)
    if not match:
        return key
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return key
    return date(year, month, 1).strftime("%B %Y")


def to_display_date(text: str) -> str:
    """Convert to ``DD-MM-YYYY``; unparseable input is returned unchanged."""
    parsed = parse_ledger_date(text)
    return parsed.strftime("%d-%m-%Y") if parsed else text


def to_iso_date(text: str) -> str:
    """Convert to ``YYYY-MM-DD``; unparseable input is returned unchanged."""
    parsed = parse_ledger_date(text)
    return parsed.isoformat() if parsed else text


def parse_cli_date(text: str) -> date:
    """Strict variant of :func:`parse_ledger_date` for argparse ``type=``."""
    parsed = parse_ledger_date(text)
    if parsed is None:
        raise ValueError(f"not a DD-MM-YYYY or YYYY-MM-DD date: {text!r}")
    return parsed


def is_date_in_range(
    text: str,
    start: str | date | None = None,
    end: str | date | None = None,
) -> bool:
    """Whether *text* falls within ``[start, end]`` (both inclusive).

    With no bounds every date matches, even an unparseable one.  With a
    bound, an unparseable date never matches.
    """
    if start is None and end is None:
        return True

    parsed = parse_ledger_date(text)
    if parsed is None:
        return False

    lower = _coerce(start)
    upper = _coerce(end)
    if lower is not None and parsed < lower:
        return False
    if upper is not None and parsed > upper:
        return False
    return True


def filter_by_date_range(
    entries: Iterable[T],
    start: str | date | None = None,
    end: str | date | None = None,
) -> list[T]:
    """Keep the ledger entries whose date lies within ``[start, end]``."""
    return [e for e in entries if is_date_in_range(date_of(e), start, end)]


def _month_sort_key(key: str) -> tuple[int, int, int, str]:
    match = _MONTH_KEY.match(key)
    if match:
        return (0, -int(match.group(2)), -int(match.group(1)), key)
    return (1, 0, 0, key)


def sort_month_keys(keys: Iterable[str]) -> list[str]:
    """Sort unique month keys newest first; unparseable keys go last."""
    return sorted(set(keys), key=_month_sort_key)
