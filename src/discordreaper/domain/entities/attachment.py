from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class Attachment:
    # The source URL doubles as the idempotency key
    source_url: str
    filename: str
    content_type: str = ""
    size: int = 0
