"""Discord message source."""

from discordreaper.infrastructure.discord.client import DiscordConfig, DiscordMessageSource

__all__ = ["DiscordConfig", "DiscordMessageSource"]
