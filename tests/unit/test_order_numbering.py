"""Unit tests for order number generation."""

import re
from datetime import UTC, datetime

from poscore.orders.numbering import generate_order_number

PATTERN = re.compile(r"^ORD-\d{14}-[0-9A-F]{10}$")


def test_format():
    number = generate_order_number()
    assert PATTERN.match(number), number


def test_embeds_creation_time():
    now = datetime(2026, 3, 4, 5, 6, 7, tzinfo=UTC)
    number = generate_order_number(now=now)
    assert number.startswith("ORD-20260304050607-")


def test_custom_prefix():
    assert generate_order_number("POS").startswith("POS-")


def test_numbers_generated_in_same_second_differ():
    now = datetime(2026, 1, 1, tzinfo=UTC)
    numbers = {generate_order_number(now=now) for _ in range(500)}
    assert len(numbers) == 500
