"""Database layer for poscore."""
