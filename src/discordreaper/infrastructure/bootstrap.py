"""Build a RunContext from settings."""

from __future__ import annotations

from loguru import logger

from discordreaper.application.context import RunContext
from discordreaper.infrastructure.discord.client import DiscordConfig, DiscordMessageSource
from discordreaper.infrastructure.http.downloader import HttpxDownloader
from discordreaper.infrastructure.ledger.file_ledger import FileLedger
from discordreaper.infrastructure.settings import Settings
from discordreaper.infrastructure.storage.factory import backend_from_settings, build_storage_sink


def build_context(settings: Settings) -> RunContext:
    """Wire up source, sink, ledger and downloader; raises ConfigurationError on bad config."""
    # Ledger first: it holds no resources to release if the sink fails
    ledger = FileLedger.load(settings.state_file)
    logger.info(f"State file init'ed: {settings.state_file}")

    sink = build_storage_sink(backend_from_settings(settings))
    logger.info(f"Storage init'ed: {sink.name}")

    source = DiscordMessageSource(
        DiscordConfig(
            token=settings.discord_bot_token.get_secret_value(),
            base_url=settings.discord_api_base,
            timeout_seconds=settings.http_timeout_seconds,
        )
    )
    downloader = HttpxDownloader(timeout_seconds=settings.http_timeout_seconds)

    return RunContext(
        source=source,
        sink=sink,
        ledger=ledger,
        downloader=downloader,
        max_workers=settings.max_concurrent_workers,
        page_size=settings.page_size,
    )


def close_context(context: RunContext) -> None:
    for resource in (context.source, context.downloader):
        close = getattr(resource, "close", None)
        if close is not None:
            close()
