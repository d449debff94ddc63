"""Inventory ledger."""

from .ledger import InventoryLedger

__all__ = ["InventoryLedger"]
