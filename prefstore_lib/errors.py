"""Exceptions raised by prefstore_lib."""
from __future__ import annotations


class PrefStoreError(Exception):
    """Base exception for all prefstore errors."""


class UnsupportedTypeError(PrefStoreError, TypeError):
    """Raised when a value outside the supported primitive types is stored."""

    def __init__(self, value: object, detail: str = "") -> None:
        self.value = value
        msg = f"Unsupported value type {type(value).__name__!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class MalformedValueError(PrefStoreError, ValueError):
    """Raised when persisted text cannot be parsed for its recorded type."""


class TypeMismatchError(PrefStoreError, TypeError):
    """Raised when a typed getter is used on a key stored with another type."""

    def __init__(self, key: str, stored: str, requested: str) -> None:
        self.key = key
        self.stored = stored
        self.requested = requested
        super().__init__(f"Key {key!r} is stored as {stored}, not {requested}")


class BackingMediumUnavailableError(PrefStoreError):
    """Raised when the backing medium fails to read or write a field."""

    def __init__(self, operation: str, name: str = "", detail: str = "") -> None:
        self.operation = operation
        self.name = name
        msg = f"Backing medium error during '{operation}'"
        if name:
            msg += f" of {name!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigError(PrefStoreError):
    """Raised when the configuration file cannot be parsed or validated."""
