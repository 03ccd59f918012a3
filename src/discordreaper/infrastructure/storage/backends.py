"""Storage backend selection as a closed set of config variants."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

DEFAULT_EXPORT_FOLDER = "discord-export"


@dataclass(frozen=True)
class GoogleDriveBackend:
    token_file: Path
    folder: str = DEFAULT_EXPORT_FOLDER


@dataclass(frozen=True)
class OneDriveBackend:
    client_id: str
    token_cache_file: Path
    folder: str = DEFAULT_EXPORT_FOLDER
    authority: str = "https://login.microsoftonline.com/consumers"


@dataclass(frozen=True)
class S3Backend:
    endpoint: str
    region: str
    access_key: str
    secret_key: str
    bucket: str
    folder: str = DEFAULT_EXPORT_FOLDER
    use_ssl: bool = False
    force_path_style: bool = True


StorageBackend = Union[GoogleDriveBackend, OneDriveBackend, S3Backend]
