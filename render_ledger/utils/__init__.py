"""Helpers shared by the render ledger modules."""
