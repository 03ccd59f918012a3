from __future__ import annotations
from typing import Optional, Protocol

from discordreaper.domain.entities.message import Page, SourceMessage

class MessageSource(Protocol):
    def fetch_page(
        self,
        channel_id: str,
        *,
        limit: int,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Page: ...

    def fetch_message(self, channel_id: str, message_id: str) -> SourceMessage: ...

    def list_channel_ids(self, guild_id: str) -> list[str]: ...
