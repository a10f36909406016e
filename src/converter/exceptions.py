"""Custom exceptions for the converter engine.

Kept in one module so the source, cache and pricing layers can share
them without circular imports.
"""


class ConverterError(Exception):
    """Base exception for all converter errors."""


class RateSourceError(ConverterError):
    """Raised when a rate source call fails (network, bad status, malformed payload)."""


class NoDataAvailableError(ConverterError):
    """Raised when a quantity has never been successfully observed."""


class InvalidInputError(ConverterError, ValueError):
    """Raised when a conversion request has a bad direction or amount."""
