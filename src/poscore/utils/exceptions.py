"""Custom exceptions for poscore."""


class PosCoreError(Exception):
    """Base exception for all poscore errors."""

    pass

