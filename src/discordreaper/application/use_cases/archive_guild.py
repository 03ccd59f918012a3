"""Archive every attachment of a guild into the configured storage sink."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from loguru import logger

from discordreaper.application.context import RunContext
from discordreaper.application.ports.errors import SourceError
from discordreaper.application.rate_limit import call_with_rate_limit
from discordreaper.application.use_cases.process_attachment import AttachmentProcessor
from discordreaper.application.use_cases.scan_channel import ChannelScanner, ScanResult
from discordreaper.application.worker_pool import BoundedWorkerPool
from discordreaper.domain.entities.message import Page


@dataclass
class ArchiveReport:
    """Outcome of one archive run."""

    channels: list[ScanResult] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def failed_channels(self) -> list[str]:
        return [r.channel_id for r in self.channels if not r.ok]

    @property
    def success(self) -> bool:
        # Attachment-level failures never fail the run; fetch-level ones do
        return not self.failed_channels

    def summary(self) -> str:
        return (
            f"channels={len(self.channels)}, "
            f"failed_channels={len(self.failed_channels)}, "
            f"messages={self.counters.get('messages_scanned', 0)}, "
            f"attachments={self.counters.get('attachments_seen', 0)}, "
            f"uploaded={self.counters.get('uploaded', 0)}, "
            f"skipped={self.counters.get('skipped', 0)}, "
            f"failed={self.counters.get('failed', 0)}, "
            f"failed_batches={self.counters.get('failed_batches', 0)}"
        )


class ArchiveGuildUseCase:
    """Scan channels one after another, each fully drained before the next starts."""

    def __init__(self, context: RunContext, sleep: Callable[[float], None] = time.sleep) -> None:
        self.context = context
        self.processor = AttachmentProcessor(context.ledger, context.downloader, context.stats)
        self._sleep = sleep

    def run(self, guild_id: str) -> ArchiveReport:
        """Discover the guild's channels and archive all of them.

        Channel discovery failures propagate: without a channel list there is
        nothing meaningful to report.
        """
        channel_ids = call_with_rate_limit(
            lambda: self.context.source.list_channel_ids(guild_id),
            label=f"guild {guild_id} channel list",
            sleep=self._sleep,
        )
        logger.info(f"Got {len(channel_ids)} channels for guild {guild_id}")
        return self.run_channels(channel_ids)

    def run_channels(self, channel_ids: Iterable[str]) -> ArchiveReport:
        report = ArchiveReport()
        with BoundedWorkerPool(self.context.max_workers) as pool:
            scanner = ChannelScanner(
                self.context.source,
                pool,
                self._handle_batch,
                page_size=self.context.page_size,
                sleep=self._sleep,
            )
            for channel_id in channel_ids:
                logger.info(f"Scanning channel {channel_id}")
                result = scanner.scan(channel_id)
                # Batches from a failed scan still finish before the next channel
                pool.join_all()
                report.channels.append(result)
            self.context.stats.increment("failed_batches", pool.failures)

        report.counters = self.context.stats.snapshot()
        logger.info(f"Archive run finished: {report.summary()}")
        return report

    def validate_message(self, channel_id: str, message_id: str) -> ArchiveReport:
        """Push the attachments of a single known message through the full upload path."""
        message = call_with_rate_limit(
            lambda: self.context.source.fetch_message(channel_id, message_id),
            label=f"message {message_id}",
            sleep=self._sleep,
        )
        logger.debug(f"Validation: got message {message.id} with {len(message.attachments)} attachments")
        if not message.attachments:
            raise SourceError(f"No attachments found in message with ID {message_id}")

        self._handle_batch([message])
        report = ArchiveReport(counters=self.context.stats.snapshot())
        logger.info(f"Validation finished: {report.summary()}")
        return report

    def _handle_batch(self, page: Page) -> None:
        start = time.monotonic()
        self.processor.process_batch(page, self.context.sink)
        logger.debug(f"Batch of {len(page)} messages processed in {time.monotonic() - start:.2f}s")
