"""poscore: tenant-isolated order processing and inventory for point-of-sale."""

__version__ = "0.1.0"
