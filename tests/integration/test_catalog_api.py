"""API tests for products, customers and health endpoints."""

from decimal import Decimal

from httpx import ASGITransport, AsyncClient
from uuid_utils.compat import uuid7


class TestHealth:
    async def test_health_needs_no_tenant(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"]

    async def test_health_db(self, test_client):
        response = await test_client.get("/health/db")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["status"] == "healthy"
        assert body["schema"]["status"] == "healthy"
        assert body["details"] == {"backend": "sqlite", "active_tenants": 0}

    async def test_health_db_counts_active_tenants(self, test_client, tenant_a, tenant_b):
        response = await test_client.get("/health/db")

        assert response.json()["details"]["active_tenants"] == 2

    async def test_health_db_is_degraded_without_schema(self, test_settings):
        from poscore.api.app import create_app

        # test_settings alone, without test_engine, leaves the database empty
        app = create_app(settings=test_settings)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/health/db")
        await app.state.engine.dispose()

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "degraded"
        assert body["database"]["status"] == "healthy"
        assert body["schema"]["status"] == "unhealthy"
        assert body["details"]["active_tenants"] is None


class TestProducts:
    async def test_create_and_get_product(self, tenant_client):
        response = await tenant_client.post(
            "/v1/products",
            json={"name": "Notebook", "sku": "NB-1", "price": "3.5", "stock_quantity": 12},
        )

        assert response.status_code == 201
        created = response.json()
        assert Decimal(created["price"]) == Decimal("3.50")
        assert created["stock_quantity"] == 12

        response = await tenant_client.get(f"/v1/products/{created['product_id']}")
        assert response.status_code == 200
        assert response.json()["sku"] == "NB-1"

    async def test_duplicate_sku_is_conflict(self, tenant_client, ctx_a, make_product):
        await make_product(ctx_a, sku="DUP-1")

        response = await tenant_client.post(
            "/v1/products", json={"name": "Again", "sku": "DUP-1", "price": "1.00"}
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "duplicate_sku"
        assert body["details"] == {"sku": "DUP-1"}

    async def test_same_sku_in_another_tenant_is_allowed(self, tenant_client, ctx_b, make_product):
        await make_product(ctx_b, sku="SHARED")

        response = await tenant_client.post(
            "/v1/products", json={"name": "Mine", "sku": "SHARED", "price": "1.00"}
        )

        assert response.status_code == 201

    async def test_negative_price_fails_validation(self, tenant_client):
        response = await tenant_client.post(
            "/v1/products", json={"name": "Bad", "sku": "BAD-1", "price": "-1.00"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "validation_error"

    async def test_list_only_shows_own_products(self, tenant_client, ctx_a, ctx_b, make_product):
        mine = await make_product(ctx_a, sku="A-1")
        await make_product(ctx_b, sku="B-1")

        response = await tenant_client.get("/v1/products")

        assert response.status_code == 200
        assert [p["product_id"] for p in response.json()] == [str(mine.product_id)]

    async def test_get_product_by_sku(self, tenant_client, ctx_a, ctx_b, make_product):
        mine = await make_product(ctx_a, sku="LOOK-1")
        await make_product(ctx_b, sku="LOOK-2")

        response = await tenant_client.get("/v1/products/by-sku/LOOK-1")
        assert response.status_code == 200
        assert response.json()["product_id"] == str(mine.product_id)

        response = await tenant_client.get("/v1/products/by-sku/LOOK-2")
        assert response.status_code == 404
        assert response.json()["details"] == {"resource": "Product", "resource_id": "LOOK-2"}

    async def test_other_tenants_product_is_not_found(self, tenant_client, ctx_b, make_product):
        foreign = await make_product(ctx_b)

        response = await tenant_client.get(f"/v1/products/{foreign.product_id}")

        assert response.status_code == 404

    async def test_update_product(self, tenant_client, ctx_a, make_product):
        product = await make_product(ctx_a, price="5.00")

        response = await tenant_client.patch(
            f"/v1/products/{product.product_id}", json={"price": "7.25", "name": "Renamed"}
        )

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["price"]) == Decimal("7.25")
        assert body["name"] == "Renamed"

    async def test_stock_cannot_be_patched(self, tenant_client, ctx_a, make_product, stock_of):
        product = await make_product(ctx_a, stock=3)

        response = await tenant_client.patch(
            f"/v1/products/{product.product_id}", json={"stock_quantity": 999}
        )

        assert response.status_code == 422
        assert await stock_of(ctx_a, product.product_id) == 3

    async def test_restock(self, tenant_client, ctx_a, make_product, stock_of):
        product = await make_product(ctx_a, stock=1)

        response = await tenant_client.post(
            f"/v1/products/{product.product_id}/restock", json={"quantity": 9}
        )

        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 10
        assert await stock_of(ctx_a, product.product_id) == 10

    async def test_restock_unknown_product(self, tenant_client):
        response = await tenant_client.post(f"/v1/products/{uuid7()}/restock", json={"quantity": 1})

        assert response.status_code == 404

    async def test_low_stock(self, tenant_client, ctx_a, make_product):
        low = await make_product(ctx_a, stock=2, low_stock_threshold=5)
        await make_product(ctx_a, stock=50, low_stock_threshold=5)

        response = await tenant_client.get("/v1/products/low-stock")

        assert response.status_code == 200
        body = response.json()
        assert [p["product_id"] for p in body] == [str(low.product_id)]
        assert body[0]["is_low_stock"] is True

    async def test_delete_product(self, tenant_client, ctx_a, make_product):
        product = await make_product(ctx_a)

        response = await tenant_client.delete(f"/v1/products/{product.product_id}")

        assert response.status_code == 204
        response = await tenant_client.get(f"/v1/products/{product.product_id}")
        assert response.status_code == 404

    async def test_delete_other_tenants_product_is_not_found(
        self, tenant_client, ctx_b, make_product, stock_of
    ):
        foreign = await make_product(ctx_b, stock=4)

        response = await tenant_client.delete(f"/v1/products/{foreign.product_id}")

        assert response.status_code == 404
        assert await stock_of(ctx_b, foreign.product_id) == 4


class TestCustomers:
    async def test_create_customer_lowercases_email(self, tenant_client):
        response = await tenant_client.post(
            "/v1/customers", json={"name": "Grace", "email": "Grace@Example.COM"}
        )

        assert response.status_code == 201
        assert response.json()["email"] == "grace@example.com"

    async def test_list_and_get_customers(self, tenant_client, ctx_a, ctx_b, make_customer):
        mine = await make_customer(ctx_a, name="Zoe")
        await make_customer(ctx_b, name="Other")

        response = await tenant_client.get("/v1/customers")
        assert [c["customer_id"] for c in response.json()] == [str(mine.customer_id)]

        response = await tenant_client.get(f"/v1/customers/{mine.customer_id}")
        assert response.json()["name"] == "Zoe"

    async def test_filter_customers_by_email(self, tenant_client, ctx_a, ctx_b, make_customer):
        mine = await make_customer(ctx_a)
        await make_customer(ctx_b)

        response = await tenant_client.get(
            "/v1/customers", params={"email": "ADA@example.com"}
        )

        assert response.status_code == 200
        assert [c["customer_id"] for c in response.json()] == [str(mine.customer_id)]

    async def test_update_customer(self, tenant_client, customer_a):
        response = await tenant_client.patch(
            f"/v1/customers/{customer_a.customer_id}", json={"phone": "555-0100"}
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "555-0100"

    async def test_other_tenants_customer_is_not_found(self, tenant_client, ctx_b, make_customer):
        foreign = await make_customer(ctx_b)

        response = await tenant_client.get(f"/v1/customers/{foreign.customer_id}")

        assert response.status_code == 404
