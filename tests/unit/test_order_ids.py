"""Unit tests for order id generation and rupee formatting"""

import re
from decimal import Decimal
from canteen_gateway.domain.money import format_rupees, to_amount
from canteen_gateway.domain.order_ids import generate_order_id


def test_generate_order_id_format():
    """Prefix + 4 chars with at least one letter and one digit, never I or O"""
    for _ in range(200):
        order_id = generate_order_id()
        suffix = order_id[len("SAITM"):]

        assert order_id.startswith("SAITM")
        assert re.fullmatch(r"[A-HJ-NP-Z0-9]{4}", suffix)
        assert any(c.isdigit() for c in suffix)
        assert any(c.isalpha() for c in suffix)


def test_generate_order_id_custom_prefix():
    """Prefix is configurable"""
    assert generate_order_id("CAFE").startswith("CAFE")


def test_format_rupees_drops_zero_paise():
    """Whole rupee amounts render without decimals"""
    assert format_rupees(Decimal("50.00")) == "₹50"
    assert format_rupees(100) == "₹100"
    assert format_rupees(None) == "₹0"


def test_format_rupees_keeps_paise():
    """Fractional amounts keep two decimals"""
    assert format_rupees(Decimal("12.5")) == "₹12.50"
    assert format_rupees("99.99") == "₹99.99"


def test_to_amount_rounds_to_paise():
    """Amounts are normalised to two decimal places"""
    assert to_amount("10.005") == Decimal("10.01")
    assert to_amount(3) == Decimal("3.00")
