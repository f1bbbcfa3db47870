"""Command line access to prefstore namespaces.

    prefstore.py [--config PATH] [--backend file|single_file|memory] get profile level
    prefstore.py set profile level 5 --type int
    prefstore.py list profile
    prefstore.py fields
    prefstore.py drop profile

Exit codes: 0 on success, 1 when the key does not exist, 2 on errors.
"""
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from prefstore_lib.codec import TypeTag, TypedValue
from prefstore_lib.config.config import load_config
from prefstore_lib.errors import PrefStoreError
from prefstore_lib.logging_config import configure_logging
from prefstore_lib.registry import NamespaceRegistry

logger = logging.getLogger(__name__)

TYPE_NAMES = {
    "bool": TypeTag.BOOLEAN,
    "int": TypeTag.INT32,
    "long": TypeTag.INT64,
    "float": TypeTag.FLOAT32,
    "double": TypeTag.FLOAT64,
    "string": TypeTag.STRING,
}
_TAG_NAMES = {tag: name for name, tag in TYPE_NAMES.items()}


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="prefstore", description="Inspect and edit prefstore namespaces")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--backend", choices=["file", "single_file", "memory"], default=None)
    p.add_argument("--data-dir", default=None, help="Directory for the file backend")
    p.add_argument("--file-path", default=None, help="File for the single_file backend")
    p.add_argument("--log-level", default=None)

    sub = p.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="List keys with their types and values")
    ls.add_argument("namespace")

    get = sub.add_parser("get", help="Print the value of a key")
    get.add_argument("namespace")
    get.add_argument("key")

    st = sub.add_parser("set", help="Set a key and save the namespace")
    st.add_argument("namespace")
    st.add_argument("key")
    st.add_argument("value")
    st.add_argument("--type", choices=sorted(TYPE_NAMES), default="string", dest="type_name")

    rm = sub.add_parser("remove", help="Remove a key and save the namespace")
    rm.add_argument("namespace")
    rm.add_argument("key")

    cl = sub.add_parser("clear", help="Remove every key of a namespace")
    cl.add_argument("namespace")

    dr = sub.add_parser("drop", help="Delete the stored fields of a namespace")
    dr.add_argument("namespace")

    sub.add_parser("fields", help="List every field name saved on the backing medium")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return get_parser().parse_args(list(argv) if argv is not None else None)


def _run(args: argparse.Namespace, registry: NamespaceRegistry) -> int:
    if args.command == "fields":
        for name in registry.adapter.list_saved_names():
            print(name)
        return 0

    store = registry.get(args.namespace)

    if args.command == "list":
        for key, typed in store.items():
            print(f"{key}\t{_TAG_NAMES[typed.tag]}\t{typed.to_text()}")
        return 0

    if args.command == "get":
        typed = store.get_typed(args.key)
        if typed is None:
            print(f"Key {args.key!r} not found in namespace {args.namespace!r}", file=sys.stderr)
            return 1
        print(typed.to_text())
        return 0

    if args.command == "set":
        store.set_typed(args.key, TypedValue.parse(args.value, TYPE_NAMES[args.type_name]))
        store.save()
        return 0

    if args.command == "remove":
        if not store.has_key(args.key):
            print(f"Key {args.key!r} not found in namespace {args.namespace!r}", file=sys.stderr)
            return 1
        store.remove_key(args.key)
        store.save()
        return 0

    if args.command == "drop":
        store.drop()
        return 0

    store.clear()
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.config, level=args.log_level)
    try:
        config = load_config(
            args.config,
            backend=args.backend,
            data_dir=args.data_dir,
            file_path=args.file_path,
        )
        registry = NamespaceRegistry.from_config(config)
        return _run(args, registry)
    except PrefStoreError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2
