"""Adapter that keeps every field of every namespace in one file.

This is the shared "preference store" medium: namespaces stay apart through
their field prefixes, not through separate files. The file holds a flat
mapping of field name to text, written with the configured serializer
(YAML by default). Batches are applied with a single atomic rewrite, so the
three sequences of a namespace are always replaced together.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Dict, Iterable, Mapping
import logging

from prefstore_lib.errors import BackingMediumUnavailableError
from .base import BackingAdapter
from .serializer import Serializer, YAMLSerializer, get_serializer

logger = logging.getLogger(__name__)


class SingleFileBackingAdapter(BackingAdapter):
    """Backend that targets a single on-disk file.

    Parameters
    - file_path: path of the file. If it has no suffix, the serializer's
      extension is appended. A missing file reads as an empty store.
    """

    def __init__(self, file_path: str | Path, serializer: Serializer | None = None) -> None:
        self.file_path = Path(file_path)
        self.serializer: Serializer = serializer or YAMLSerializer()
        if not self.file_path.parent.exists():
            os.makedirs(self.file_path.parent, exist_ok=True)

    def _target_path(self) -> Path:
        # An explicit suffix on the configured path wins over the serializer's.
        p = self.file_path
        if p.suffix:
            return p
        return p.with_name(p.name + self.serializer.extension)

    def _read_all(self) -> Dict[str, str]:
        path = self._target_path()
        if not path.exists():
            return {}
        try:
            with open(path, "rb") as f:
                data = f.read()
            content = self.serializer.load(data) if data else {}
        except Exception as e:
            raise BackingMediumUnavailableError("read", str(path), str(e)) from e
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise BackingMediumUnavailableError("read", str(path), "expected a mapping of field names")
        logger.debug("SingleFileBackingAdapter loaded %s (%d fields)", path, len(content))
        return {str(k): "" if v is None else str(v) for k, v in content.items()}

    def _write_all(self, fields: Dict[str, str]) -> None:
        path = self._target_path()
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            payload = self.serializer.dump(fields)
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except Exception as e:
            logger.error("Failed to write %s: %s", path, e)
            raise BackingMediumUnavailableError("write", str(path), str(e)) from e

    def get_saved_string(self, name: str) -> str:
        return self._read_all().get(name, "")

    def set_saved_string(self, name: str, value: str) -> None:
        self.set_saved_strings({name: value})

    def set_saved_strings(self, values: Mapping[str, str]) -> None:
        fields = self._read_all()
        fields.update(values)
        self._write_all(fields)

    def delete_saved_string(self, name: str) -> None:
        fields = self._read_all()
        if name in fields:
            del fields[name]
            self._write_all(fields)

    def list_saved_names(self) -> Iterable[str]:
        return sorted(self._read_all().keys())

    def configure(self, **options) -> None:
        # Allow overriding the file path and format at runtime.
        fp = options.get("file_path") or options.get("path")
        if fp:
            self.file_path = Path(fp)
            if not self.file_path.parent.exists():
                os.makedirs(self.file_path.parent, exist_ok=True)
        mode = options.get("mode") or options.get("serializer")
        if mode:
            self.serializer = get_serializer(mode)
