"""prefstore_lib: typed key/value namespaces persisted through simple string adapters."""

from prefstore_lib.codec import TypeTag, TypedValue
from prefstore_lib.errors import (
    BackingMediumUnavailableError,
    ConfigError,
    MalformedValueError,
    PrefStoreError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from prefstore_lib.namespace import NamespaceStore
from prefstore_lib.registry import NamespaceRegistry

__all__ = [
    "BackingMediumUnavailableError",
    "ConfigError",
    "MalformedValueError",
    "NamespaceRegistry",
    "NamespaceStore",
    "PrefStoreError",
    "TypeMismatchError",
    "TypeTag",
    "TypedValue",
    "UnsupportedTypeError",
]
