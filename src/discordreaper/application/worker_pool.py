"""Bounded worker pool for batch tasks.

`submit` blocks the producer while every slot is busy, which is what keeps the
page fetch loop from running ahead of downloads and uploads.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable

from loguru import logger

DEFAULT_MAX_WORKERS = 5


class BoundedWorkerPool:
    """Run at most `max_workers` tasks at once; failures are contained and counted."""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, name: str = "reaper-batch") -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self._slots = threading.BoundedSemaphore(max_workers)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._failures = 0
        self._submitted = 0

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    @property
    def submitted(self) -> int:
        with self._lock:
            return self._submitted

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Start `fn` on a free slot, blocking until one is available."""
        self._slots.acquire()
        try:
            future = self._executor.submit(self._run, fn, args, kwargs)
        except Exception:
            self._slots.release()
            raise

        with self._lock:
            self._pending.add(future)
            self._submitted += 1
        future.add_done_callback(self._discard)
        return future

    def join_all(self) -> None:
        """Block until every submitted task has completed."""
        while True:
            with self._lock:
                pending = list(self._pending)
            if not pending:
                return
            wait(pending)

    def shutdown(self) -> None:
        self.join_all()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "BoundedWorkerPool":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def _run(self, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:
            with self._lock:
                self._failures += 1
            logger.exception("Batch task failed")
        finally:
            self._slots.release()

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
