from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence

from discordreaper.domain.entities.attachment import Attachment

@dataclass(frozen=True)
class SourceMessage:
    id: str
    channel_id: str
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

# Most-recent-first; an empty page ends the traversal
Page = Sequence[SourceMessage]
