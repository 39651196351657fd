"""
Exception hierarchy for the exchange.

ExchangeError (base)
├── NotFoundError
├── ConflictError
├── StorageError
├── InvalidPriceError
└── ResetError
"""


class ExchangeError(Exception):
    """Base class for all exchange errors."""


class NotFoundError(ExchangeError):
    """Referenced stock symbol or broker id does not exist."""


class ConflictError(ExchangeError):
    """Record with the same key already exists."""


class StorageError(ExchangeError):
    """Document store failed for a reason other than a missing key."""


class InvalidPriceError(ExchangeError, ValueError):
    """Price string is not a '$'-prefixed decimal."""


class ResetError(ExchangeError):
    """Baseline restore could not be performed."""
