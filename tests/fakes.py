from __future__ import annotations

import threading
from typing import Optional

from discordreaper.application.ports.downloader import DownloadedFile
from discordreaper.application.ports.errors import StorageError
from discordreaper.domain.entities.attachment import Attachment
from discordreaper.domain.entities.message import SourceMessage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 32


def make_message(message_id: str, *urls: str, channel_id: str = "c1") -> SourceMessage:
    return SourceMessage(
        id=message_id,
        channel_id=channel_id,
        attachments=tuple(
            Attachment(source_url=url, filename=url.rsplit("/", 1)[-1] + ".png", content_type="image/png", size=len(PNG_BYTES))
            for url in urls
        ),
    )

class FakeSource:
    """Scripted message source: one list of pages (or exceptions) per channel."""

    def __init__(self, pages: Optional[dict[str, list]] = None, channels: Optional[list[str]] = None) -> None:
        self.pages = {k: list(v) for k, v in (pages or {}).items()}
        self.channels = channels or list(self.pages)
        self.calls: list[tuple[str, Optional[str]]] = []
        self.messages: dict[tuple[str, str], SourceMessage] = {}
        # Raised, in order, before the lookup calls succeed
        self.list_failures: list[Exception] = []
        self.message_failures: list[Exception] = []
        self.list_calls = 0

    def fetch_page(self, channel_id, *, limit, before=None, after=None):
        self.calls.append((channel_id, before))
        script = self.pages.get(channel_id, [])
        if not script:
            return []
        step = script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def fetch_message(self, channel_id, message_id):
        if self.message_failures:
            raise self.message_failures.pop(0)
        return self.messages[(channel_id, message_id)]

    def list_channel_ids(self, guild_id):
        self.list_calls += 1
        if self.list_failures:
            raise self.list_failures.pop(0)
        return list(self.channels)

class FakeSink:
    def __init__(self, fail_for: tuple[str, ...] = ()) -> None:
        self.fail_for = set(fail_for)
        self.uploads: list[tuple[str, bytes]] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "Fake"

    def upload(self, data: bytes, filename: str) -> None:
        if filename in self.fail_for:
            raise StorageError(f"refused {filename}")
        with self._lock:
            self.uploads.append((filename, data))

    @property
    def filenames(self) -> list[str]:
        with self._lock:
            return [name for name, _ in self.uploads]

class FakeDownloader:
    def __init__(self, responses: Optional[dict[str, DownloadedFile]] = None) -> None:
        self.responses = responses or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> DownloadedFile:
        with self._lock:
            self.calls.append(url)
        if url in self.responses:
            return self.responses[url]
        return DownloadedFile(status_code=200, content_type="image/png", content=PNG_BYTES)

