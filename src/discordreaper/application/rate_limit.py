"""Sleep out server-paced rate limits around any source call."""

from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

from loguru import logger

from discordreaper.application.ports.errors import RateLimitedError

T = TypeVar("T")


def call_with_rate_limit(
    call: Callable[[], T],
    *,
    label: str,
    sleep: Callable[[float], None] = time.sleep,
    on_wait: Optional[Callable[[RateLimitedError], None]] = None,
) -> T:
    """Invoke `call`, retrying the identical call after every rate limit.

    No retry cap; any other error propagates unchanged.
    """
    while True:
        try:
            return call()
        except RateLimitedError as e:
            if on_wait is not None:
                on_wait(e)
            logger.warning(f"Rate limit encountered on {label}, retrying after {e.retry_after:.3f}s")
            sleep(e.retry_after)
