"""One-shot archive of a Discord guild's attachments."""

from __future__ import annotations

import argparse

from loguru import logger
from pydantic import ValidationError

from discordreaper.application.ports.errors import ConfigurationError, SourceError
from discordreaper.application.use_cases.archive_guild import ArchiveGuildUseCase
from discordreaper.infrastructure.bootstrap import build_context, close_context
from discordreaper.infrastructure.log_config import configure_logging
from discordreaper.infrastructure.settings import Settings, get_settings


def run_once(settings: Settings, guild_id: str | None = None) -> int:
    """Archive every channel of the guild once. Returns a process exit code."""
    guild_id = guild_id or settings.discord_guild_id
    if not guild_id:
        logger.error("DISCORD_GUILD_ID is required (or pass --guild)")
        return 1

    try:
        context = build_context(settings)
    except ConfigurationError as e:
        logger.error(f"Initialization failed: {e}")
        return 1

    try:
        report = ArchiveGuildUseCase(context).run(guild_id)
    except SourceError as e:
        logger.error(f"Error fetching channels for guild {guild_id}: {e}")
        return 1
    finally:
        close_context(context)

    if not report.success:
        logger.error(f"Channels failed to scan: {', '.join(report.failed_channels)}")
        return 1
    logger.info("The application completed successfully.")
    return 0


def validate_once(settings: Settings, channel_id: str, message_id: str) -> int:
    """Upload the attachments of one known message to prove the whole path works."""
    logger.warning("Running validation against a single message")
    try:
        context = build_context(settings)
    except ConfigurationError as e:
        logger.error(f"Initialization failed: {e}")
        return 1

    try:
        report = ArchiveGuildUseCase(context).validate_message(channel_id, message_id)
    except SourceError as e:
        logger.error(f"Validation failed: {e}")
        return 1
    finally:
        close_context(context)

    if report.counters.get("failed", 0):
        logger.error("Validation failed: attachment transfer errors")
        return 1
    logger.info("Validation completed")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Archive Discord attachments into cloud storage")
    parser.add_argument("--guild", default=None, help="Override DISCORD_GUILD_ID")
    parser.add_argument(
        "--validate",
        nargs=2,
        metavar=("CHANNEL_ID", "MESSAGE_ID"),
        default=None,
        help="Only process the attachments of one message",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level, settings.enable_file_logging, settings.log_dir)

    if args.validate:
        return validate_once(settings, *args.validate)
    return run_once(settings, guild_id=args.guild)


if __name__ == "__main__":
    raise SystemExit(main())
