from typing import Mapping

from prefstore_lib.errors import BackingMediumUnavailableError
from prefstore_lib.storage.memory_backend import MemoryBackingAdapter


class CountingAdapter(MemoryBackingAdapter):
    """Memory adapter that records how often the medium is touched.

    `reads` counts single-field reads, `batches` counts write batches.
    Setting `fail_writes` makes every write raise as if the disk were gone.
    """

    def __init__(self):
        super().__init__()
        self.reads = 0
        self.batches = 0
        self.fail_writes = False

    def get_saved_string(self, name: str) -> str:
        self.reads += 1
        return super().get_saved_string(name)

    def set_saved_string(self, name: str, value: str) -> None:
        self.set_saved_strings({name: value})

    def set_saved_strings(self, values: Mapping[str, str]) -> None:
        if self.fail_writes:
            raise BackingMediumUnavailableError("write", next(iter(values), ""), "disk unavailable")
        self.batches += 1
        super().set_saved_strings(values)


def store_fields(adapter, prefix: str, keys: str, values: str, types: str) -> None:
    """Write a raw namespace record straight to an adapter."""
    adapter.set_saved_string(prefix + "keys", keys)
    adapter.set_saved_string(prefix + "values", values)
    adapter.set_saved_string(prefix + "types", types)
