"""Archive worker - re-runs the guild archive at a fixed interval."""

from __future__ import annotations

import signal
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from loguru import logger
from pydantic import ValidationError

from discordreaper.cli.archive_once import run_once
from discordreaper.infrastructure.log_config import configure_logging
from discordreaper.infrastructure.settings import Settings, get_settings


@dataclass
class WorkerStats:
    """Track worker statistics."""
    runs_completed: int = 0
    runs_failed: int = 0
    last_run: datetime | None = None


class ArchiveWorker:
    """
    Periodic archive worker.

    Runs one archive pass at startup, then one every `sleep_seconds`. Each
    pass reloads the ledger from disk, so the file is the only state carried
    between passes.
    """

    def __init__(
        self,
        settings: Settings,
        run_pass: Callable[[Settings], int] = run_once,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.sleep_seconds = settings.daemon_sleep_seconds
        self.running = False
        self.stats = WorkerStats()
        self._run_pass = run_pass
        self._sleep = sleep

    def _run_pass_once(self) -> None:
        self.stats.last_run = datetime.now()
        logger.info(f"Starting archive pass #{self.stats.runs_completed + self.stats.runs_failed + 1}")
        try:
            code = self._run_pass(self.settings)
        except Exception as e:
            logger.exception(f"Archive pass crashed: {e}")
            code = 1

        if code == 0:
            self.stats.runs_completed += 1
        else:
            self.stats.runs_failed += 1
        self._log_stats()

    def _log_stats(self) -> None:
        logger.info(
            f"Worker stats: "
            f"completed={self.stats.runs_completed}, "
            f"failed={self.stats.runs_failed}, "
            f"last_run={self.stats.last_run}"
        )

    def _handle_shutdown(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False

    def _wait_for_next_pass(self) -> None:
        # Sleep in small increments to respond to signals quickly
        remaining = float(self.sleep_seconds)
        while remaining > 0 and self.running:
            step = min(remaining, 10.0)
            self._sleep(step)
            remaining -= step

    def run(self, max_passes: int | None = None) -> int:
        """Run the worker loop; `max_passes` bounds it for tests."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        logger.info(f"Archive worker starting, interval {self.sleep_seconds}s")
        self.running = True
        passes = 0

        while self.running:
            self._run_pass_once()
            passes += 1
            if max_passes is not None and passes >= max_passes:
                break
            logger.debug(f"Sleeping {self.sleep_seconds} seconds before the next pass")
            self._wait_for_next_pass()

        self.running = False
        logger.info("Worker shutdown complete")
        self._log_stats()
        return 0


def main() -> int:
    """Entry point for the archive worker."""
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level, settings.enable_file_logging, settings.log_dir)

    logger.info("=" * 60)
    logger.info("Discord Reaper Worker")
    logger.info("=" * 60)

    return ArchiveWorker(settings).run()


if __name__ == "__main__":
    raise SystemExit(main())
