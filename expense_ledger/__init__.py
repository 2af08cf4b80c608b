"""Shared-expense splitting and balance ledger."""

__version__ = "0.1.0"
