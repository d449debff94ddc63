"""Tenant-scoped base repository.

This is the only data-access path for tenant-owned models. A repository is
bound to one TenantContext at construction and composes the
``tenant_id = :tenant`` predicate into every read, update and delete it
issues. Rows owned by another tenant are indistinguishable from rows that do
not exist.

Usage:
    from poscore.db.repositories.base import TenantScopedRepository

    class ProductRepository(TenantScopedRepository[Product]):
        model = Product

    repo = ProductRepository(db_session, ctx)
    product = await repo.get(product_id)      # None if absent or foreign
    product = await repo.get_or_raise(pid)    # NotFoundError if absent or foreign
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.core.context import TenantContext
from poscore.core.exceptions import (
    InvalidInputError,
    NotFoundError,
    TenantMismatchError,
)
from poscore.db.models.base import Base, TenantOwnedMixin

ModelType = TypeVar("ModelType", bound=Base)

# Attributes that callers may never change through update()
_PROTECTED_FIELDS = frozenset({"tenant_id"})


class TenantScopedRepository(Generic[ModelType]):
    """Generic repository for tenant-owned SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class (must use TenantOwnedMixin)

    Attributes:
        model: The model class
        db: The database session
        ctx: The tenant context every statement is scoped to
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession, ctx: TenantContext):
        """Initialize repository with a session and the active tenant context.

        Args:
            db: Async SQLAlchemy session
            ctx: Resolved tenant context (mandatory)
        """
        if not issubclass(self.model, TenantOwnedMixin):
            raise TypeError(f"{self.model.__name__} is not a tenant-owned model")
        self.db = db
        self.ctx = ctx

    @property
    def resource_name(self) -> str:
        return self.model.__name__

    # -------------------------------------------------------------------------
    # Predicate composition
    # -------------------------------------------------------------------------

    def _tenant_clause(self) -> ColumnElement[bool]:
        return self.model.tenant_id == self.ctx.tenant_id

    def _scoped_select(self) -> Select:
        """Base SELECT for this model, already restricted to the tenant."""
        return select(self.model).where(self._tenant_clause())

    def _pk_column(self):
        mapper = self.model.__mapper__
        pk_cols = mapper.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]

    def _assert_owned(self, obj: ModelType) -> None:
        if not self.ctx.owns(obj.tenant_id):
            raise NotFoundError(self.resource_name, self._pk_value(obj))

    def _pk_value(self, obj: ModelType) -> Any:
        return getattr(obj, self._pk_column().key)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, pk: UUID, *, options: Sequence[Any] = ()) -> ModelType | None:
        """Get a single record by primary key within the tenant.

        Args:
            pk: Primary key value
            options: Loader options (e.g. selectinload)

        Returns:
            Model instance or None if not found (or owned by another tenant)
        """
        stmt = self._scoped_select().where(self._pk_column() == pk)
        if options:
            stmt = stmt.options(*options)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_raise(self, pk: UUID, *, options: Sequence[Any] = ()) -> ModelType:
        """Get a single record by primary key or raise.

        Raises:
            NotFoundError: If the record does not exist for this tenant
        """
        obj = await self.get(pk, options=options)
        if obj is None:
            raise NotFoundError(self.resource_name, pk)
        return obj

    async def get_for_update(
        self, pk: UUID, *, options: Sequence[Any] = ()
    ) -> ModelType | None:
        """Get a record and hold an exclusive row lock until the transaction ends.

        The row is re-read from the database even if it is already present in
        the session, so a caller that waited for the lock sees the values
        committed by the previous holder.

        Returns:
            Locked model instance or None if not found for this tenant
        """
        stmt = (
            self._scoped_select()
            .where(self._pk_column() == pk)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if options:
            stmt = stmt.options(*options)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, pks: Sequence[UUID]) -> list[ModelType]:
        """Get multiple records by primary keys (missing/foreign ids are skipped)."""
        if not pks:
            return []
        stmt = self._scoped_select().where(self._pk_column().in_(pks))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list(
        self,
        *,
        limit: int = 100,
        offset: int = 0,
        order_by: str | None = None,
        descending: bool = False,
        criteria: Sequence[ColumnElement[bool]] = (),
        options: Sequence[Any] = (),
    ) -> list[ModelType]:
        """List the tenant's records with pagination.

        Args:
            limit: Maximum records to return (capped at 1000)
            offset: Number of records to skip
            order_by: Column name to order by (default: primary key)
            descending: Sort in descending order
            criteria: Extra WHERE clauses, ANDed with the tenant predicate
            options: Loader options

        Returns:
            List of model instances
        """
        stmt = self._scoped_select()
        if criteria:
            stmt = stmt.where(*criteria)

        col = getattr(self.model, order_by, None) if order_by else None
        if col is None:
            col = self._pk_column()
        stmt = stmt.order_by(col.desc() if descending else col)

        stmt = stmt.limit(min(limit, 1000)).offset(offset)
        if options:
            stmt = stmt.options(*options)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count the tenant's records, optionally filtered."""
        stmt = select(func.count(self._pk_column())).where(self._tenant_clause(), *criteria)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def exists(self, pk: UUID) -> bool:
        """Check whether a record exists for this tenant."""
        return await self.count(self._pk_column() == pk) > 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, obj: ModelType) -> ModelType:
        """Stamp a new record with the context tenant and flush it.

        Args:
            obj: Model instance to create

        Returns:
            The flushed instance

        Raises:
            TenantMismatchError: If the instance is explicitly owned by another tenant
        """
        if obj.tenant_id is None:
            obj.tenant_id = self.ctx.tenant_id
        elif not self.ctx.owns(obj.tenant_id):
            raise TenantMismatchError(self.resource_name, self.ctx.tenant_id)

        self.db.add(obj)
        await self.db.flush()
        return obj

    async def update(self, obj: ModelType, updates: dict[str, Any]) -> ModelType:
        """Update a record owned by this tenant.

        Args:
            obj: Model instance previously loaded through this repository
            updates: Dictionary of field: value to update

        Returns:
            Updated model instance

        Raises:
            NotFoundError: If the instance belongs to another tenant
            InvalidInputError: If the update tries to change ownership
        """
        self._assert_owned(obj)
        protected = _PROTECTED_FIELDS.intersection(updates)
        if protected:
            raise InvalidInputError(
                f"Cannot modify {', '.join(sorted(protected))}", field=sorted(protected)[0]
            )

        for field, value in updates.items():
            if hasattr(obj, field):
                setattr(obj, field, value)

        await self.db.flush()
        return obj

    async def conditional_update(
        self,
        pk: UUID,
        values: dict[str, Any],
        *criteria: ColumnElement[bool],
        returning: Any = None,
    ) -> Any:
        """Issue a single UPDATE restricted to the tenant, the row and ``criteria``.

        The statement only touches the row when every condition holds at the
        moment it executes, which makes it usable as a compare-and-set.

        Args:
            pk: Primary key of the row
            values: Column values (may be SQL expressions)
            criteria: Additional conditions that must hold
            returning: Column to return from the updated row

        Returns:
            The returned value, or None if no row matched. When ``returning``
            is not given, the number of rows updated.
        """
        stmt = (
            update(self.model)
            .where(self._tenant_clause(), self._pk_column() == pk, *criteria)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        if returning is None:
            result = await self.db.execute(stmt)
            return result.rowcount

        result = await self.db.execute(stmt.returning(returning))
        return result.scalar_one_or_none()

    async def delete(self, obj: ModelType) -> None:
        """Delete a record owned by this tenant.

        Raises:
            NotFoundError: If the instance belongs to another tenant
        """
        self._assert_owned(obj)
        await self.db.delete(obj)
        await self.db.flush()

    async def delete_by_pk(self, pk: UUID) -> bool:
        """Delete a record by primary key.

        Returns:
            True if deleted, False if not found for this tenant
        """
        obj = await self.get(pk)
        if obj is None:
            return False
        await self.delete(obj)
        return True
