from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol

@dataclass(frozen=True)
class DownloadedFile:
    status_code: int
    content_type: str
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

class Downloader(Protocol):
    def fetch(self, url: str) -> DownloadedFile: ...
