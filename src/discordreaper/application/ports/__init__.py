"""Ports implemented by infrastructure adapters."""

from discordreaper.application.ports.downloader import DownloadedFile, Downloader
from discordreaper.application.ports.errors import (
    ConfigurationError,
    DownloadError,
    RateLimitedError,
    SourceError,
    StorageError,
)
from discordreaper.application.ports.ledger import IdempotencyLedger
from discordreaper.application.ports.message_source import MessageSource
from discordreaper.application.ports.storage_sink import StorageSink

__all__ = [
    "DownloadedFile",
    "Downloader",
    "IdempotencyLedger",
    "MessageSource",
    "StorageSink",
    "SourceError",
    "RateLimitedError",
    "DownloadError",
    "StorageError",
    "ConfigurationError",
]
