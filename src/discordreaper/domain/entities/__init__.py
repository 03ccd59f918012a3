"""Domain entities."""

from discordreaper.domain.entities.attachment import Attachment
from discordreaper.domain.entities.message import Page, SourceMessage
from discordreaper.domain.entities.stats import ArchiveStats

__all__ = [
    "Attachment",
    "SourceMessage",
    "Page",
    "ArchiveStats",
]
