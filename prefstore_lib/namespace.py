"""Namespace store: typed fields persisted as three parallel sequences.

Each namespace writes exactly three fields to its backing adapter, all
prefixed with a digest of the namespace name:

    <prefix>keys    'level,name'
    <prefix>values  '5,A\\,B\\\\C'
    <prefix>types   'i,s'

Writes are buffered in memory until `save()`, which rewrites the whole
namespace. Reads go buffer -> cache -> persisted sequences; the value and
type sequences are re-read from the adapter every time a persisted value
has to be resolved, only the key list is held in memory. `items()` reads
them once for a whole listing.
"""
from __future__ import annotations
import hashlib
import logging
from typing import Any, Dict, List, Optional, Tuple

from prefstore_lib.codec import TypeTag, TypedValue, join_sequence, split_sequence
from prefstore_lib.errors import (
    BackingMediumUnavailableError,
    MalformedValueError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from prefstore_lib.storage.base import BackingAdapter

logger = logging.getLogger(__name__)

FIELD_NAME_KEYS = "keys"
FIELD_NAME_VALUES = "values"
FIELD_NAME_TYPES = "types"

# Typed getters accept lossless widenings of the stored type.
_ACCEPTED_TAGS = {
    TypeTag.BOOLEAN: (TypeTag.BOOLEAN,),
    TypeTag.INT32: (TypeTag.INT32,),
    TypeTag.INT64: (TypeTag.INT64, TypeTag.INT32),
    TypeTag.FLOAT32: (TypeTag.FLOAT32,),
    TypeTag.FLOAT64: (TypeTag.FLOAT64, TypeTag.FLOAT32),
    TypeTag.STRING: (TypeTag.STRING,),
}


def namespace_prefix(name: str) -> str:
    """Return the field-name prefix for a namespace: md5 of ``"p_" + name``."""
    digest = hashlib.md5(("p_" + name).encode("utf-8")).hexdigest()
    return digest + "_"


def sanitize_field_name(name: str) -> str:
    """Replace path-hazard characters so field names are safe as file names."""
    return name.replace(".", "_").replace("/", "_").replace("\\", "_")


class NamespaceStore:
    """Typed key/value fields of one namespace.

    Instances are meant to be obtained from a `NamespaceRegistry`, which
    guarantees one store per name. A store is not thread-safe.
    """

    def __init__(self, name: str, adapter: BackingAdapter, caching_enabled: bool = True) -> None:
        self._name = name
        self._prefix = namespace_prefix(name)
        self._adapter = adapter
        self._caching_enabled = caching_enabled
        self._pending: Dict[str, TypedValue] = {}
        self._cache: Dict[str, TypedValue] = {}
        # True when keys were removed since the last save.
        self._keys_dirty = False

        # `_persisted_keys` mirrors the keys field on the medium and is the
        # index into the values/types fields; `_keys` is what callers see.
        self._persisted_keys: List[str] = self._load_sequence(FIELD_NAME_KEYS)
        self._keys: List[str] = list(self._persisted_keys)
        logger.debug("Loaded namespace %r with %d keys", name, len(self._keys))

    def __repr__(self) -> str:
        return f"NamespaceStore(name={self._name!r}, keys={len(self._keys)}, pending={len(self._pending)})"

    # Properties ----------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def caching_enabled(self) -> bool:
        return self._caching_enabled

    @caching_enabled.setter
    def caching_enabled(self, value: bool) -> None:
        self.set_caching_enabled(value)

    def set_caching_enabled(self, enabled: bool) -> None:
        """Toggle the read cache. Disabling drops every cached value."""
        if self._caching_enabled != enabled:
            self._caching_enabled = enabled
            if not enabled:
                self.clear_cache()

    @property
    def pending_keys(self) -> List[str]:
        return list(self._pending)

    # Reads ---------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the native value stored under `key`, or `default`."""
        typed = self._lookup(key)
        return default if typed is None else typed.value

    def get_typed(self, key: str) -> Optional[TypedValue]:
        """Return the value together with its tag, or None if absent."""
        return self._lookup(key)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._get_as(key, default, TypeTag.BOOLEAN)

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_as(key, default, TypeTag.INT32)

    def get_long(self, key: str, default: int = 0) -> int:
        return self._get_as(key, default, TypeTag.INT64)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._get_as(key, default, TypeTag.FLOAT32)

    def get_double(self, key: str, default: float = 0.0) -> float:
        return self._get_as(key, default, TypeTag.FLOAT64)

    def get_string(self, key: str, default: str = "") -> str:
        return self._get_as(key, default, TypeTag.STRING)

    def has_key(self, key: str) -> bool:
        return key in self._pending or key in self._keys

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has_key(key)

    def keys(self) -> List[str]:
        """Visible keys: persisted ones in stored order, then unsaved ones."""
        known = set(self._keys)
        return self._keys + [k for k in self._pending if k not in known]

    def items(self) -> List[Tuple[str, TypedValue]]:
        """Return ``(key, value)`` pairs in `keys()` order.

        Values not buffered or cached are resolved from one read of the
        stored sequences, however many keys the namespace holds.
        """
        values: Optional[List[str]] = None
        types: List[str] = []
        positions: Dict[str, int] = {}
        result: List[Tuple[str, TypedValue]] = []
        for key in self.keys():
            typed = self._pending.get(key)
            if typed is None and self._caching_enabled:
                typed = self._cache.get(key)
            if typed is None:
                if values is None:
                    values = self._load_sequence(FIELD_NAME_VALUES)
                    types = self._load_sequence(FIELD_NAME_TYPES)
                    positions = {k: i for i, k in enumerate(self._persisted_keys)}
                typed = self._parse_at(key, positions[key], values, types)
            result.append((key, typed))
        return result

    # Writes --------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Buffer `value`, tagging it from its runtime type."""
        self._put(key, TypedValue.of(value))

    def set_bool(self, key: str, value: bool) -> None:
        self._put(key, TypedValue.boolean(value))

    def set_int(self, key: str, value: int) -> None:
        self._put(key, TypedValue.int32(value))

    def set_long(self, key: str, value: int) -> None:
        self._put(key, TypedValue.int64(value))

    def set_float(self, key: str, value: float) -> None:
        self._put(key, TypedValue.float32(value))

    def set_double(self, key: str, value: float) -> None:
        self._put(key, TypedValue.float64(value))

    def set_string(self, key: str, value: str) -> None:
        self._put(key, TypedValue.string(value))

    def set_typed(self, key: str, value: TypedValue) -> None:
        self._put(key, value)

    def remove_key(self, key: str) -> None:
        """Forget `key`.

        The persisted record still holds the key until the next `save()`,
        which always rewrites the namespace when removals are pending.
        """
        self._pending.pop(key, None)
        self._cache.pop(key, None)
        if key in self._keys:
            self._keys.remove(key)
            self._keys_dirty = True

    def clear(self) -> None:
        """Drop every key and persist the empty namespace immediately."""
        self._keys = []
        self._pending.clear()
        self.clear_cache()
        self._keys_dirty = True
        self.save(forced=True)

    def drop(self) -> None:
        """Delete the namespace's fields from the medium and forget every key.

        Unlike `clear()`, nothing is written back: the namespace reads as
        never saved afterwards.
        """
        for field in (FIELD_NAME_KEYS, FIELD_NAME_VALUES, FIELD_NAME_TYPES):
            self._adapter.delete_saved_string(self._field_name(field))
        self._persisted_keys = []
        self._keys = []
        self._pending.clear()
        self.clear_cache()
        self._keys_dirty = False
        logger.debug("Dropped namespace %r", self._name)

    def clear_cache(self) -> None:
        self._cache.clear()

    def save(self, forced: bool = False) -> bool:
        """Merge buffered writes into the persisted sequences and write them.

        The whole namespace is rewritten as one batch. Returns False when
        there was nothing to do. If the adapter fails, buffered writes and
        pending removals are kept so that `save()` can be retried.
        """
        if not self._pending and not self._keys_dirty and not forced:
            return False

        old_keys = self._persisted_keys
        old_values = self._load_sequence(FIELD_NAME_VALUES)
        old_types = self._load_sequence(FIELD_NAME_TYPES)
        live = set(self._keys)
        if live and not len(old_keys) == len(old_values) == len(old_types):
            raise MalformedValueError(
                f"Namespace {self._name!r} is inconsistent: "
                f"{len(old_keys)} keys, {len(old_values)} values, {len(old_types)} types"
            )

        keys: List[str] = []
        values: List[str] = []
        types: List[str] = []
        for k, v, t in zip(old_keys, old_values, old_types):
            if k in live:
                keys.append(k)
                values.append(v)
                types.append(t)

        positions = {k: i for i, k in enumerate(keys)}
        for key, typed in self._pending.items():
            pos = positions.get(key)
            if pos is None:
                positions[key] = len(keys)
                keys.append(key)
                values.append(typed.to_text())
                types.append(typed.tag.marker)
            else:
                values[pos] = typed.to_text()
                types[pos] = typed.tag.marker

        batch = {
            self._field_name(FIELD_NAME_KEYS): join_sequence(keys),
            self._field_name(FIELD_NAME_VALUES): join_sequence(values),
            self._field_name(FIELD_NAME_TYPES): join_sequence(types),
        }
        try:
            self._adapter.set_saved_strings(batch)
        except BackingMediumUnavailableError:
            logger.exception("Failed to save namespace %r; %d writes kept for retry", self._name, len(self._pending))
            raise

        logger.debug("Saved namespace %r: %d keys (%d updated)", self._name, len(keys), len(self._pending))
        self._persisted_keys = keys
        self._keys = list(keys)
        self._pending.clear()
        self._keys_dirty = False
        return True

    # Internals -----------------------------------------------------------

    def _field_name(self, field: str) -> str:
        return self._prefix + sanitize_field_name(field)

    def _load_sequence(self, field: str) -> List[str]:
        return split_sequence(self._adapter.get_saved_string(self._field_name(field)))

    def _put(self, key: str, typed: TypedValue) -> None:
        if not isinstance(key, str):
            raise UnsupportedTypeError(key, "keys must be str")
        self._pending[key] = typed
        self._cache.pop(key, None)

    def _lookup(self, key: str) -> Optional[TypedValue]:
        if key in self._pending:
            return self._pending[key]
        if key not in self._keys:
            return None
        if self._caching_enabled and key in self._cache:
            return self._cache[key]

        pos = self._persisted_keys.index(key)
        values = self._load_sequence(FIELD_NAME_VALUES)
        types = self._load_sequence(FIELD_NAME_TYPES)
        return self._parse_at(key, pos, values, types)

    def _parse_at(self, key: str, pos: int, values: List[str], types: List[str]) -> TypedValue:
        if pos >= len(values) or pos >= len(types):
            raise MalformedValueError(
                f"Namespace {self._name!r} has no stored value for {key!r} "
                f"({len(self._persisted_keys)} keys, {len(values)} values, {len(types)} types)"
            )
        typed = TypedValue.parse(values[pos], TypeTag.from_marker(types[pos]))
        if self._caching_enabled:
            self._cache[key] = typed
        return typed

    def _get_as(self, key: str, default: Any, tag: TypeTag) -> Any:
        typed = self._lookup(key)
        if typed is None:
            return default
        if typed.tag not in _ACCEPTED_TAGS[tag]:
            raise TypeMismatchError(key, typed.tag.name.lower(), tag.name.lower())
        return typed.value
