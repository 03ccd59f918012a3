from __future__ import annotations
from typing import Protocol

class StorageSink(Protocol):
    """Destination for attachment bytes.

    Implementations must be safe to call from several worker threads at once and
    raise StorageError for any non-success response from their backend.
    """

    @property
    def name(self) -> str: ...

    def upload(self, data: bytes, filename: str) -> None: ...
