"""File-backed adapter storing one file per field.

Fields live under `<data_dir>/<name><ext>`, where the extension comes from
the configured serializer. Writes go to a temporary sibling which is fsynced
and then renamed over the target, so each field is replaced atomically.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterable

from prefstore_lib.errors import BackingMediumUnavailableError
from .base import BackingAdapter
from .serializer import Serializer, TextSerializer, get_serializer

logger = logging.getLogger(__name__)


class FileBackingAdapter(BackingAdapter):
    def __init__(self, data_dir: str | Path = "./data/prefs", serializer: Serializer | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.serializer: Serializer = serializer or TextSerializer()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackingMediumUnavailableError("init", str(self.data_dir), str(e)) from e

    def _path_for(self, name: str) -> Path:
        safe_name = name.replace("/", "_").replace("\\", "_")
        return self.data_dir / f"{safe_name}{self.serializer.extension}"

    def get_saved_string(self, name: str) -> str:
        path = self._path_for(name)
        if not path.exists():
            return ""
        try:
            with open(path, "rb") as f:
                content = self.serializer.load(f.read())
        except Exception as e:
            raise BackingMediumUnavailableError("read", name, str(e)) from e
        if not isinstance(content, str):
            raise BackingMediumUnavailableError("read", name, f"expected text, found {type(content).__name__}")
        return content

    def set_saved_string(self, name: str, value: str) -> None:
        path = self._path_for(name)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            payload = self.serializer.dump(value)
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except Exception as e:
            logger.error("Failed to write %s: %s", path, e)
            raise BackingMediumUnavailableError("write", name, str(e)) from e
        logger.debug("Wrote %s (%d bytes)", path, len(payload))

    def delete_saved_string(self, name: str) -> None:
        path = self._path_for(name)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise BackingMediumUnavailableError("delete", name, str(e)) from e

    def list_saved_names(self) -> Iterable[str]:
        ext = self.serializer.extension
        return sorted(
            p.name[: -len(ext)] if ext else p.name
            for p in self.data_dir.iterdir()
            if p.is_file() and (not ext or p.name.endswith(ext))
        )

    def configure(self, **options) -> None:
        # `mode` selects the on-disk format; `data_dir` relocates the files.
        mode = options.get("mode") or options.get("serializer")
        if mode:
            self.serializer = get_serializer(mode)
        data_dir = options.get("data_dir")
        if data_dir:
            self.data_dir = Path(data_dir)
            self.data_dir.mkdir(parents=True, exist_ok=True)
