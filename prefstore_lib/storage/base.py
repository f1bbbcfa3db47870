"""Backing adapter interface definitions.

A backing adapter is the durable medium behind a namespace: a flat mapping
from fully-qualified field names to text. Namespace stores never write
anything but strings through it.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class BackingAdapter(ABC):
    """Abstract backing adapter.

    Each `set_saved_string` call must be atomic from the caller's point of
    view: a subsequent read sees either the old or the new text, never a mix.
    Failures are reported as `BackingMediumUnavailableError`.
    """

    @abstractmethod
    def get_saved_string(self, name: str) -> str:
        """Return the text saved under `name`, or ``""`` if never saved."""

    @abstractmethod
    def set_saved_string(self, name: str, value: str) -> None:
        """Durably save `value` under `name`."""

    def set_saved_strings(self, values: Mapping[str, str]) -> None:
        """Save a batch of fields.

        The default writes them one at a time, so a failure part way leaves
        earlier fields written. Adapters that can do better override this.
        """
        for name, value in values.items():
            self.set_saved_string(name, value)

    @abstractmethod
    def delete_saved_string(self, name: str) -> None:
        """Forget `name`. No-op if it was never saved."""

    @abstractmethod
    def list_saved_names(self) -> Iterable[str]:
        """Return every field name currently saved."""

    def configure(self, **options) -> None:
        """Accept runtime options. Adapters without options ignore them."""
        return
