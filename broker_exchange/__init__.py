"""Broker exchange simulator: stock catalog, broker accounts and a time-accelerated trading clock."""

__version__ = "1.0.0"
