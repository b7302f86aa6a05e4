"""Unit tests for bill id allocation."""

import pytest

from smartcart.core.exceptions import ConfigurationError
from smartcart.models import Bill
from smartcart.services.bill_ids import next_bill_id, parse_bill_number


def _bill(bill_id: str) -> Bill:
    return Bill(
        bill_id=bill_id,
        session_id="s",
        items=[],
        total=0,
        gateway_order_id="order_x",
        gateway_payment_id="pay_x",
    )


def test_first_bill_id_is_a100():
    assert next_bill_id([]) == "A100"


def test_next_bill_id_follows_last_bill():
    assert next_bill_id([_bill("A100")]) == "A101"
    assert next_bill_id([_bill("A100"), _bill("A101"), _bill("A102")]) == "A103"


def test_next_bill_id_uses_highest_number():
    assert next_bill_id([_bill("A105"), _bill("A101")]) == "A106"


def test_number_grows_past_three_digits():
    assert next_bill_id([_bill("A999")]) == "A1000"


def test_custom_prefix_and_start():
    assert next_bill_id([], prefix="B", start=1) == "B1"
    assert next_bill_id([_bill("B7")], prefix="B", start=1) == "B8"


def test_parse_bill_number():
    assert parse_bill_number("A100") == 100
    assert parse_bill_number("X100") == 100


def test_prefix_change_continues_existing_ledger():
    bills = [_bill("A100"), _bill("A105")]
    assert next_bill_id(bills, prefix="B") == "B106"
    assert next_bill_id(bills + [_bill("B106")], prefix="B") == "B107"


@pytest.mark.parametrize("prefix", ["", "AB"])
def test_multi_character_prefix_rejected(prefix):
    with pytest.raises(ConfigurationError):
        next_bill_id([], prefix=prefix)
