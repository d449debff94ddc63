"""Integration tests for read scopes on the shared SQLite write lock."""

import asyncio

import pytest
from uuid_utils.compat import uuid7

from poscore.catalog.service import CatalogService
from poscore.core.exceptions import NotFoundError
from poscore.db.repositories.product import ProductRepository
from poscore.db.transaction import read_scope, unit_of_work


async def test_read_scope_ends_the_transaction_it_opened(db_session, ctx_a, make_product):
    product = await make_product(ctx_a, stock=4)

    async with read_scope(db_session):
        assert await ProductRepository(db_session, ctx_a).current_stock(product.product_id) == 4
        assert db_session.in_transaction()

    assert not db_session.in_transaction()


async def test_read_scope_leaves_an_open_unit_of_work_alone(db_session, ctx_a, make_product):
    product = await make_product(ctx_a, stock=4)
    repo = ProductRepository(db_session, ctx_a)

    async with unit_of_work(db_session, lock_timeout_ms=0):
        await repo.conditional_update(product.product_id, {"stock_quantity": 9})
        async with read_scope(db_session):
            await repo.current_stock(product.product_id)
        assert db_session.in_transaction()

    assert not db_session.in_transaction()
    assert await repo.current_stock(product.product_id) == 9


async def test_catalog_reads_do_not_block_writers(
    db_session, session_factory, ctx_a, make_product, make_customer, test_settings
):
    product = await make_product(ctx_a, stock=1)
    customer = await make_customer(ctx_a)
    reader = CatalogService(db_session, ctx_a, test_settings)

    await reader.get_product(product.product_id)
    await reader.list_products()
    await reader.low_stock_products()
    await reader.find_product_by_sku(product.sku)
    await reader.get_customer(customer.customer_id)
    await reader.list_customers()
    await reader.find_customers_by_email("ada@example.com")

    async with session_factory() as other:
        restocked = await asyncio.wait_for(
            CatalogService(other, ctx_a, test_settings).restock(product.product_id, 1),
            timeout=5,
        )
    assert restocked.stock_quantity == 2


async def test_failed_read_rolls_back(db_session, ctx_a, test_settings):
    with pytest.raises(NotFoundError):
        await CatalogService(db_session, ctx_a, test_settings).get_product(uuid7())

    assert not db_session.in_transaction()
