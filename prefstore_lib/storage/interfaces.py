from typing import Protocol, Iterable, Mapping, runtime_checkable


@runtime_checkable
class BackingAdapterProtocol(Protocol):
    """Structural twin of `prefstore_lib.storage.base.BackingAdapter`.

    Lets callers accept duck-typed adapters (test doubles, thin wrappers
    around other stores) without subclassing the ABC.
    """

    def get_saved_string(self, name: str) -> str: ...

    def set_saved_string(self, name: str, value: str) -> None: ...

    def set_saved_strings(self, values: Mapping[str, str]) -> None: ...

    def delete_saved_string(self, name: str) -> None: ...

    def list_saved_names(self) -> Iterable[str]: ...

    def configure(self, **options) -> None: ...
