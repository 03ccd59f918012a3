"""Resolve a storage backend variant into a concrete sink."""

from __future__ import annotations

from loguru import logger

from discordreaper.application.ports.errors import ConfigurationError
from discordreaper.application.ports.storage_sink import StorageSink
from discordreaper.infrastructure.settings import Settings
from discordreaper.infrastructure.storage.backends import (
    GoogleDriveBackend,
    OneDriveBackend,
    S3Backend,
    StorageBackend,
)


def backend_from_settings(settings: Settings) -> StorageBackend:
    """Pick the backend variant named by `storage_provider` and validate its fields."""
    provider = settings.storage_provider
    folder = settings.export_folder

    if provider == "gdrive":
        if settings.google_token_file is None:
            raise ConfigurationError("GOOGLE_TOKEN_FILE is required for the gdrive storage provider")
        return GoogleDriveBackend(token_file=settings.google_token_file, folder=folder)

    if provider == "onedrive":
        if not settings.onedrive_client_id or settings.onedrive_token_cache_file is None:
            raise ConfigurationError(
                "ONEDRIVE_CLIENT_ID and ONEDRIVE_TOKEN_CACHE_FILE are required for the onedrive storage provider"
            )
        return OneDriveBackend(
            client_id=settings.onedrive_client_id,
            token_cache_file=settings.onedrive_token_cache_file,
            folder=folder,
            authority=settings.onedrive_authority,
        )

    if provider == "s3":
        missing = [
            name
            for name, value in (
                ("S3_ENDPOINT", settings.s3_endpoint),
                ("S3_ACCESS_KEY", settings.s3_access_key),
                ("S3_SECRET_KEY", settings.s3_secret_key),
                ("S3_BUCKET", settings.s3_bucket),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing S3 settings: {', '.join(missing)}")
        return S3Backend(
            endpoint=settings.s3_endpoint,
            region=settings.s3_region,
            access_key=settings.s3_access_key.get_secret_value(),
            secret_key=settings.s3_secret_key.get_secret_value(),
            bucket=settings.s3_bucket,
            folder=folder,
            use_ssl=settings.s3_use_ssl,
            force_path_style=settings.s3_force_path_style,
        )

    raise ConfigurationError(f"Unknown storage provider: {provider}")


def build_storage_sink(backend: StorageBackend) -> StorageSink:
    """Create the sink for `backend`; imports stay lazy so unused SDKs are never loaded."""
    if isinstance(backend, GoogleDriveBackend):
        from discordreaper.infrastructure.storage.gdrive import GoogleDriveStorageSink

        sink = GoogleDriveStorageSink.from_backend(backend)
    elif isinstance(backend, OneDriveBackend):
        from discordreaper.infrastructure.storage.onedrive import OneDriveStorageSink

        sink = OneDriveStorageSink.from_backend(backend)
    elif isinstance(backend, S3Backend):
        from discordreaper.infrastructure.storage.s3 import S3StorageSink

        sink = S3StorageSink(backend)
    else:
        raise ConfigurationError(f"Unsupported storage backend: {type(backend).__name__}")

    logger.info(f"Storage sink ready: {sink.name} (folder {backend.folder})")
    return sink
