"""Uniform inventory reconciliation: variant grouping, order matching, ledger and health stats."""

__version__ = "0.1.0"
