"""Domain models and entities."""

from discordreaper.domain.entities import ArchiveStats, Attachment, Page, SourceMessage

__all__ = [
    "Attachment",
    "SourceMessage",
    "Page",
    "ArchiveStats",
]
