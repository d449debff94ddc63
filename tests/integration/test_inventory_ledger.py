"""Integration tests for the inventory ledger."""

import pytest
from uuid_utils.compat import uuid7

from poscore.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from poscore.inventory.ledger import InventoryLedger


class TestLock:
    async def test_lock_returns_product(self, db_session, ctx_a, make_product):
        product = await make_product(ctx_a, stock=4)

        locked = await InventoryLedger(db_session, ctx_a).lock(product.product_id)

        assert locked.product_id == product.product_id
        assert locked.stock_quantity == 4

    async def test_lock_foreign_product_is_not_found(self, db_session, ctx_a, ctx_b, make_product):
        product = await make_product(ctx_a)

        with pytest.raises(NotFoundError):
            await InventoryLedger(db_session, ctx_b).lock(product.product_id)


class TestSufficiency:
    async def test_has_sufficient_stock(self, db_session, ctx_a, make_product):
        product = await make_product(ctx_a, stock=5)
        ledger = InventoryLedger(db_session, ctx_a)

        assert await ledger.has_sufficient_stock(product.product_id, 5)
        assert not await ledger.has_sufficient_stock(product.product_id, 6)

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
    async def test_rejects_non_positive_quantity(self, db_session, ctx_a, make_product, quantity):
        product = await make_product(ctx_a)

        with pytest.raises(InvalidInputError):
            await InventoryLedger(db_session, ctx_a).has_sufficient_stock(
                product.product_id, quantity
            )


class TestDecrement:
    async def test_decrement_returns_remaining(self, db_session, ctx_a, make_product, stock_of):
        product = await make_product(ctx_a, stock=5)
        ledger = InventoryLedger(db_session, ctx_a)

        remaining = await ledger.decrement(product.product_id, 3)
        await db_session.commit()

        assert remaining == 2
        assert await stock_of(ctx_a, product.product_id) == 2

    async def test_decrement_to_zero(self, db_session, ctx_a, make_product):
        product = await make_product(ctx_a, stock=3)

        assert await InventoryLedger(db_session, ctx_a).decrement(product.product_id, 3) == 0

    async def test_decrement_never_goes_negative(self, db_session, ctx_a, make_product, stock_of):
        product = await make_product(ctx_a, stock=2)

        with pytest.raises(InsufficientStockError) as exc_info:
            await InventoryLedger(db_session, ctx_a).decrement(product.product_id, 3)
        await db_session.rollback()

        assert exc_info.value.available == 2
        assert exc_info.value.requested == 3
        assert await stock_of(ctx_a, product.product_id) == 2

    async def test_decrement_unknown_product(self, db_session, ctx_a):
        with pytest.raises(NotFoundError):
            await InventoryLedger(db_session, ctx_a).decrement(uuid7(), 1)

    async def test_decrement_foreign_product(
        self, db_session, ctx_a, ctx_b, make_product, stock_of
    ):
        product = await make_product(ctx_a, stock=5)

        with pytest.raises(NotFoundError):
            await InventoryLedger(db_session, ctx_b).decrement(product.product_id, 1)
        await db_session.rollback()

        assert await stock_of(ctx_a, product.product_id) == 5


class TestIncrement:
    async def test_increment(self, db_session, ctx_a, make_product, stock_of):
        product = await make_product(ctx_a, stock=1)

        assert await InventoryLedger(db_session, ctx_a).increment(product.product_id, 4) == 5
        await db_session.commit()

        assert await stock_of(ctx_a, product.product_id) == 5

    async def test_increment_missing_product_is_tolerated(self, db_session, ctx_a):
        assert await InventoryLedger(db_session, ctx_a).increment(uuid7(), 2) is None


class TestLowStock:
    async def test_low_stock_lists_at_or_below_threshold(
        self, db_session, ctx_a, ctx_b, make_product
    ):
        at = await make_product(ctx_a, stock=2, low_stock_threshold=2)
        below = await make_product(ctx_a, stock=0, low_stock_threshold=2)
        await make_product(ctx_a, stock=3, low_stock_threshold=2)
        await make_product(ctx_b, stock=0, low_stock_threshold=2)

        low = await InventoryLedger(db_session, ctx_a).low_stock()

        assert [p.product_id for p in low] == [below.product_id, at.product_id]
        assert all(p.is_low_stock for p in low)
