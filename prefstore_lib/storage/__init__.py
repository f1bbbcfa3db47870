"""Backing adapters for prefstore namespaces."""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from prefstore_lib.errors import ConfigError

from .base import BackingAdapter
from .interfaces import BackingAdapterProtocol
from .file_backend import FileBackingAdapter
from .memory_backend import MemoryBackingAdapter
from .single_file_backend import SingleFileBackingAdapter
from .serializer import SERIALIZER_NAMES

DEFAULT_DATA_DIR = "./data/prefs"


def create_adapter(
    backend: str = "file",
    serializer: Optional[str] = None,
    data_dir: str | Path = DEFAULT_DATA_DIR,
    file_path: str | Path | None = None,
) -> BackingAdapter:
    """Build a backing adapter by name.

    - ``file``: one file per field under `data_dir` (serializer defaults to text)
    - ``single_file``: all fields in one mapping file (serializer defaults to yaml)
    - ``memory``: process-local dict; `serializer` and paths are ignored

    Unknown names and a ``text`` single file raise `ConfigError`.
    """
    if backend == "memory":
        return MemoryBackingAdapter()

    adapter: BackingAdapter
    if backend == "file":
        mode = serializer or "text"
        adapter = FileBackingAdapter(data_dir=data_dir)
    elif backend == "single_file":
        mode = serializer or "yaml"
        if mode == "text":
            raise ConfigError("serializer 'text' cannot store the single_file mapping; use yaml, json or pickle")
        adapter = SingleFileBackingAdapter(file_path or Path(data_dir) / "preferences")
    else:
        raise ConfigError(f"Unknown backend {backend!r}; expected 'file', 'single_file' or 'memory'")

    if mode not in SERIALIZER_NAMES:
        raise ConfigError(f"Unknown serializer {mode!r}; expected one of {', '.join(SERIALIZER_NAMES)}")
    adapter.configure(mode=mode)
    return adapter


__all__ = [
    "BackingAdapter",
    "BackingAdapterProtocol",
    "FileBackingAdapter",
    "MemoryBackingAdapter",
    "SingleFileBackingAdapter",
    "create_adapter",
]
