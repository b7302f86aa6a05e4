"""Sequential bill identifiers (A100, A101, ...)"""

from typing import Iterable

from smartcart.core.exceptions import ConfigurationError
from smartcart.models import Bill

DEFAULT_PREFIX = "A"
DEFAULT_START = 100


def check_prefix(prefix: str) -> str:
    """Bill ids carry a single-character prefix"""
    if len(prefix) != 1:
        raise ConfigurationError(f"Bill id prefix must be one character, got {prefix!r}")
    return prefix


def parse_bill_number(bill_id: str) -> int:
    """
    Numeric part of a bill id, e.g. ``A107`` -> ``107``.

    The first character is the prefix, whatever it was when the bill was
    issued, so a ledger stays readable after the prefix is changed.
    """
    return int(bill_id[1:])


def next_bill_id(
    existing_bills: Iterable[Bill],
    prefix: str = DEFAULT_PREFIX,
    start: int = DEFAULT_START,
) -> str:
    """
    Derive the next bill id from the bills issued so far.

    The result is one above the highest number already issued, or ``start``
    for an empty ledger. Bills are appended in increasing order, so this is
    the last bill's number plus one; taking the maximum keeps the sequence
    monotonic even if the snapshot was reordered by hand.

    Not safe to call concurrently: callers hold the store's commit lock.
    """
    check_prefix(prefix)
    highest = start - 1
    for bill in existing_bills:
        highest = max(highest, parse_bill_number(bill.bill_id))
    return f"{prefix}{highest + 1}"
