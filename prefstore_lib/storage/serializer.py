"""Serializers turning saved field text (or a mapping of fields) into bytes.

File-based adapters delegate their on-disk format to one of these. All
implementations are symmetric: `load(dump(value)) == value`.
"""
from typing import Any, Protocol
import pickle
import json
import yaml


class Serializer(Protocol):
    """Serialize/deserialize values for adapters that store bytes."""

    extension: str

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class TextSerializer:
    """Plain UTF-8 text. Only accepts strings."""

    extension = ".txt"

    def dump(self, value: Any) -> bytes:
        if not isinstance(value, str):
            raise TypeError(f"TextSerializer expects str, got {type(value).__name__}")
        return value.encode("utf-8")

    def load(self, data: bytes) -> Any:
        return data.decode("utf-8")


class PickleSerializer:
    """Binary serializer using pickle; files are not meant to be edited by hand."""

    extension = ".pkl"

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer:
    """Serializer using JSON (text). Caller must ensure values are JSON-serializable."""

    extension = ".json"

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, sort_keys=True).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text). Caller must ensure values are YAML-serializable."""

    extension = ".yml"

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value, allow_unicode=True, default_flow_style=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


_SERIALIZERS = {
    "text": TextSerializer,
    "pickle": PickleSerializer,
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
}

SERIALIZER_NAMES = tuple(_SERIALIZERS)


def get_serializer(name: str) -> Serializer:
    """Return a serializer instance by name (text, pickle, json, yaml)."""
    try:
        return _SERIALIZERS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown serializer {name!r}; expected one of {sorted(_SERIALIZERS)}") from None
