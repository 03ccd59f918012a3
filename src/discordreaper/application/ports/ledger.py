from __future__ import annotations
from typing import Protocol

class IdempotencyLedger(Protocol):
    def contains(self, key: str) -> bool: ...

    def record_if_absent(self, key: str) -> bool: ...

    def claim(self, key: str) -> bool: ...

    def release(self, key: str) -> None: ...
