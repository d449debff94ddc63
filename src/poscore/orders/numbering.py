"""Order number generation.

Numbers look like ``ORD-20260118093012-01A2B3C4D5``: a prefix, the UTC
creation time, and ten hex digits taken from the random tail of a UUIDv7.
The random part makes collisions unlikely; the unique constraint on
``orders.order_number`` plus the retry in OrderService makes them impossible.
"""

from datetime import UTC, datetime

from uuid_utils.compat import uuid7


def generate_order_number(prefix: str = "ORD", now: datetime | None = None) -> str:
    """Build a human-referenceable order number.

    Args:
        prefix: Leading label, e.g. "ORD"
        now: Creation time (defaults to current UTC time)

    Returns:
        Order number string
    """
    now = now or datetime.now(UTC)
    suffix = uuid7().hex[-10:].upper()
    return f"{prefix}-{now:%Y%m%d%H%M%S}-{suffix}"
