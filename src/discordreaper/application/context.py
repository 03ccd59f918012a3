"""Explicit per-run context handed to the pipeline components."""

from __future__ import annotations

from dataclasses import dataclass, field

from discordreaper.application.ports.downloader import Downloader
from discordreaper.application.ports.ledger import IdempotencyLedger
from discordreaper.application.ports.message_source import MessageSource
from discordreaper.application.ports.storage_sink import StorageSink
from discordreaper.application.worker_pool import DEFAULT_MAX_WORKERS
from discordreaper.domain.entities.stats import ArchiveStats

PAGE_SIZE = 100


@dataclass
class RunContext:
    """Everything one archive run needs, built once at startup."""

    source: MessageSource
    sink: StorageSink
    ledger: IdempotencyLedger
    downloader: Downloader
    max_workers: int = DEFAULT_MAX_WORKERS
    page_size: int = PAGE_SIZE
    stats: ArchiveStats = field(default_factory=ArchiveStats)
