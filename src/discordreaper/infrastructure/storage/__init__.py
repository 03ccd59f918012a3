"""Storage sinks and backend selection."""

from discordreaper.infrastructure.storage.backends import (
    GoogleDriveBackend,
    OneDriveBackend,
    S3Backend,
    StorageBackend,
)
from discordreaper.infrastructure.storage.factory import backend_from_settings, build_storage_sink

__all__ = [
    "GoogleDriveBackend",
    "OneDriveBackend",
    "S3Backend",
    "StorageBackend",
    "backend_from_settings",
    "build_storage_sink",
]
