"""Use cases for the attachment archive pipeline."""

from discordreaper.application.use_cases.archive_guild import ArchiveGuildUseCase, ArchiveReport
from discordreaper.application.use_cases.process_attachment import AttachmentProcessor, Outcome
from discordreaper.application.use_cases.scan_channel import (
    ChannelScanner,
    RateLimitedPageFetcher,
    ScanResult,
    ScanState,
)

__all__ = [
    "ArchiveGuildUseCase",
    "ArchiveReport",
    "AttachmentProcessor",
    "Outcome",
    "ChannelScanner",
    "RateLimitedPageFetcher",
    "ScanResult",
    "ScanState",
]
