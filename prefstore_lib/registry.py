from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Dict, List

from prefstore_lib.namespace import NamespaceStore
from prefstore_lib.storage import create_adapter
from prefstore_lib.storage.base import BackingAdapter
from prefstore_lib.storage.interfaces import BackingAdapterProtocol

if TYPE_CHECKING:
    from prefstore_lib.config.config import StoreConfig

logger = logging.getLogger(__name__)


class NamespaceRegistry:
    """Hands out one `NamespaceStore` per name over a shared adapter.

    Stores are built lazily on first lookup and kept for the life of the
    registry. Create one registry per backing medium and pass it to the code
    that needs namespaces; tests can simply build their own.
    """

    def __init__(self, adapter: BackingAdapter | BackingAdapterProtocol, caching_enabled: bool = True) -> None:
        if not isinstance(adapter, BackingAdapterProtocol):
            raise TypeError(f"{type(adapter).__name__} does not implement the backing adapter interface")
        self._adapter = adapter
        self._caching_enabled = caching_enabled
        self._namespaces: Dict[str, NamespaceStore] = {}

    @classmethod
    def from_config(cls, config: "StoreConfig") -> "NamespaceRegistry":
        adapter = create_adapter(
            backend=config.backend,
            serializer=config.serializer,
            data_dir=config.data_dir,
            file_path=config.file_path,
        )
        return cls(adapter, caching_enabled=config.caching_enabled)

    @property
    def adapter(self) -> BackingAdapter:
        return self._adapter

    def get(self, name: str = "") -> NamespaceStore:
        if name in self._namespaces:
            return self._namespaces[name]
        store = NamespaceStore(name, self._adapter, caching_enabled=self._caching_enabled)
        self._namespaces[name] = store
        logger.debug("Registered namespace %r", name)
        return store

    def names(self) -> List[str]:
        return list(self._namespaces)

    def __contains__(self, name: object) -> bool:
        return name in self._namespaces

    def __len__(self) -> int:
        return len(self._namespaces)

    def save_all(self, forced: bool = False) -> int:
        """Save every registered namespace; returns how many were written."""
        return sum(1 for store in self._namespaces.values() if store.save(forced=forced))
