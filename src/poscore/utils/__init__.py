"""Shared utilities for poscore."""
