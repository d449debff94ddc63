"""Customer repository."""

from poscore.db.models.customer import Customer
from poscore.db.repositories.base import TenantScopedRepository


class CustomerRepository(TenantScopedRepository[Customer]):
    """Repository for the tenant's customers."""

    model = Customer

    async def find_by_email(self, email: str) -> list[Customer]:
        stmt = self._scoped_select().where(Customer.email == email.lower())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
