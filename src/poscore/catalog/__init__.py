"""Product and customer catalog."""

from poscore.catalog.service import CatalogService

__all__ = ["CatalogService"]
