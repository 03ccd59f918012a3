"""Infrastructure layer - external services, persistence, and configuration."""

from discordreaper.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
