"""Tenant management and resolution for multi-tenancy support."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.core.context import TenantContext, create_context
from poscore.core.exceptions import InvalidTenantError, NotFoundError, UnresolvedTenantError
from poscore.core.logging import get_logger
from poscore.db.models.tenant import Tenant

logger = get_logger(__name__)


class TenantService:
    """Service for tenant CRUD operations and per-request tenant resolution.

    Tenants are not tenant-owned themselves, so this service queries the
    ``tenants`` table directly rather than through a scoped repository.
    Writes are flushed; the caller owns the commit.
    """

    def __init__(self, db: AsyncSession):
        """Initialize tenant service with database session.

        Args:
            db: Async SQLAlchemy session for database operations
        """
        self.db = db

    async def create_tenant(self, name: str, slug: str) -> Tenant:
        """Create a new tenant.

        Args:
            name: Display name for the tenant
            slug: URL-safe identifier (must be unique)

        Returns:
            Created Tenant instance

        Raises:
            IntegrityError: If slug already exists
        """
        tenant = Tenant(
            name=name,
            slug=slug.lower(),
            is_active=True,
        )

        self.db.add(tenant)
        await self.db.flush()

        logger.info("tenant_created", tenant_id=str(tenant.tenant_id), slug=tenant.slug)
        return tenant

    async def get_tenant(self, tenant_id: UUID) -> Tenant | None:
        """Get a tenant by ID.

        Args:
            tenant_id: The tenant's unique identifier

        Returns:
            Tenant if found, None otherwise
        """
        query = select(Tenant).where(Tenant.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_tenant_or_raise(self, tenant_id: UUID) -> Tenant:
        """Get a tenant by ID, raising if not found.

        Raises:
            NotFoundError: If tenant does not exist
        """
        tenant = await self.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    async def get_tenant_by_slug(self, slug: str) -> Tenant | None:
        query = select(Tenant).where(Tenant.slug == slug.lower())
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_tenants(
        self,
        active_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Tenant]:
        """List tenants with pagination.

        Args:
            active_only: If True, only return active tenants
            limit: Maximum number of tenants to return (max 1000)
            offset: Pagination offset

        Returns:
            List of Tenant instances
        """
        query = select(Tenant).order_by(Tenant.created_at.desc(), Tenant.tenant_id.desc())

        if active_only:
            query = query.where(Tenant.is_active == True)  # noqa: E712

        query = query.limit(min(limit, 1000)).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def deactivate_tenant(self, tenant_id: UUID) -> Tenant:
        """Deactivate a tenant. Its data is kept but requests are rejected.

        Raises:
            NotFoundError: If tenant does not exist
        """
        tenant = await self.get_tenant_or_raise(tenant_id)
        if tenant.is_active:
            tenant.is_active = False
            await self.db.flush()
            logger.warning("tenant_deactivated", tenant_id=str(tenant_id), slug=tenant.slug)
        return tenant

    async def activate_tenant(self, tenant_id: UUID) -> Tenant:
        """Reactivate a previously deactivated tenant.

        Raises:
            NotFoundError: If tenant does not exist
        """
        tenant = await self.get_tenant_or_raise(tenant_id)
        if not tenant.is_active:
            tenant.is_active = True
            await self.db.flush()
            logger.info("tenant_activated", tenant_id=str(tenant_id), slug=tenant.slug)
        return tenant

    async def validate_tenant_active(self, tenant_id: UUID) -> Tenant:
        """Validate that a tenant exists and is active.

        Args:
            tenant_id: The tenant's unique identifier

        Returns:
            The active Tenant instance

        Raises:
            InvalidTenantError: If tenant does not exist or is deactivated
        """
        tenant = await self.get_tenant(tenant_id)
        if tenant is None:
            raise InvalidTenantError(tenant_id, reason="not_found")
        if not tenant.is_active:
            raise InvalidTenantError(tenant_id, reason="inactive")
        return tenant

    async def resolve(
        self,
        tenant_ref: str | None,
        *,
        request_id: UUID | None = None,
    ) -> TenantContext:
        """Resolve a caller-supplied tenant identifier into a TenantContext.

        Args:
            tenant_ref: Raw tenant id as supplied (e.g. the X-Tenant-ID header)
            request_id: Request id to carry in the context

        Returns:
            Context scoped to the active tenant

        Raises:
            UnresolvedTenantError: If no identifier was supplied
            InvalidTenantError: If the identifier is malformed, unknown or inactive
        """
        if tenant_ref is None or not tenant_ref.strip():
            logger.info("tenant_resolution_failed", reason="missing")
            raise UnresolvedTenantError()

        raw = tenant_ref.strip()
        try:
            tenant_id = UUID(raw)
        except ValueError:
            logger.info("tenant_resolution_failed", reason="malformed", tenant_ref=raw[:64])
            raise InvalidTenantError(raw, reason="malformed") from None

        try:
            tenant = await self.validate_tenant_active(tenant_id)
        except InvalidTenantError as exc:
            logger.info("tenant_resolution_failed", reason=exc.reason, tenant_ref=raw)
            raise

        ctx = create_context(tenant_id=tenant.tenant_id, request_id=request_id)
        logger.debug("tenant_resolved", **ctx.to_log_dict())
        return ctx
