"""Walk a channel backwards page by page and fan pages out to the worker pool."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from discordreaper.application.context import PAGE_SIZE
from discordreaper.application.ports.errors import RateLimitedError, SourceError
from discordreaper.application.ports.message_source import MessageSource
from discordreaper.application.rate_limit import call_with_rate_limit
from discordreaper.application.worker_pool import BoundedWorkerPool
from discordreaper.domain.entities.message import Page


class RateLimitedPageFetcher:
    """Fetch one page, sleeping out every rate limit the source reports.

    There is no retry cap: the server-provided wait is honoured as many times as
    the server asks. Any other SourceError propagates unchanged.
    """

    def __init__(
        self,
        source: MessageSource,
        channel_id: str,
        page_size: int = PAGE_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.channel_id = channel_id
        self.page_size = page_size
        self.retries = 0
        self._sleep = sleep

    def fetch(self, cursor: Optional[str]) -> Page:
        return call_with_rate_limit(
            lambda: self.source.fetch_page(self.channel_id, limit=self.page_size, before=cursor),
            label=f"channel {self.channel_id}",
            sleep=self._sleep,
            on_wait=self._count_retry,
        )

    def _count_retry(self, error: RateLimitedError) -> None:
        self.retries += 1


class ScanState(str, Enum):
    FETCHING = "fetching"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScanResult:
    channel_id: str
    state: ScanState
    pages: int = 0
    messages: int = 0
    cursor: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is ScanState.DONE


BatchHandler = Callable[[Page], None]


class ChannelScanner:
    """Drive the cursor loop for a single channel.

    FETCHING -> DISPATCHING -> FETCHING ... -> DRAINING -> DONE, or FAILED on a
    non rate-limit fetch error. A failed scan does not drain the pool; the
    caller joins outstanding batches before moving to another channel.
    """

    def __init__(
        self,
        source: MessageSource,
        pool: BoundedWorkerPool,
        handle_batch: BatchHandler,
        page_size: int = PAGE_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.pool = pool
        self.handle_batch = handle_batch
        self.page_size = page_size
        self._sleep = sleep

    def scan(self, channel_id: str) -> ScanResult:
        fetcher = RateLimitedPageFetcher(self.source, channel_id, self.page_size, sleep=self._sleep)
        result = ScanResult(channel_id=channel_id, state=ScanState.FETCHING)

        while result.state is ScanState.FETCHING:
            try:
                page = fetcher.fetch(result.cursor)
            except SourceError as e:
                logger.error(f"Failed to fetch messages in channel {channel_id}: {e}")
                result.state = ScanState.FAILED
                result.error = str(e)
                return result

            if not page:
                result.state = ScanState.DRAINING
                break

            result.pages += 1
            result.messages += len(page)
            result.cursor = page[-1].id

            result.state = ScanState.DISPATCHING
            logger.debug(f"Dispatching batch of {len(page)} messages from {channel_id} (cursor {result.cursor})")
            self.pool.submit(self.handle_batch, list(page))
            result.state = ScanState.FETCHING

        self.pool.join_all()
        result.state = ScanState.DONE
        logger.info(f"Completed scan for channel {channel_id}: {result.pages} pages, {result.messages} messages")
        return result
