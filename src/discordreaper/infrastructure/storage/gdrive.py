"""Google Drive storage sink."""

from __future__ import annotations

import io
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from loguru import logger

from discordreaper.application.ports.errors import ConfigurationError, StorageError
from discordreaper.infrastructure.storage.backends import DEFAULT_EXPORT_FOLDER, GoogleDriveBackend

SCOPES = ["https://www.googleapis.com/auth/drive"]
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def load_credentials(token_file: Path) -> Credentials:
    """Load an authorized-user token file, refreshing and re-saving it when expired."""
    if not token_file.exists():
        raise ConfigurationError(f"Google token file {token_file} not found")

    try:
        creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    except ValueError as e:
        raise ConfigurationError(f"Invalid Google token file {token_file}: {e}") from e

    if creds.valid:
        return creds
    if not (creds.expired and creds.refresh_token):
        raise ConfigurationError("Google credentials are invalid and cannot be refreshed")

    try:
        creds.refresh(Request())
    except GoogleAuthError as e:
        raise ConfigurationError(f"Failed to refresh Google credentials: {e}") from e
    token_file.write_text(creds.to_json(), encoding="utf-8")
    logger.info("Google credentials refreshed")
    return creds


class GoogleDriveStorageSink:
    """Upload files into a named Drive folder, creating the folder on first use.

    Drive service objects sit on httplib2, which is not thread-safe, so each
    worker thread builds its own from the shared credentials.
    """

    def __init__(
        self,
        service_factory: Callable[[], Any],
        folder: str = DEFAULT_EXPORT_FOLDER,
    ) -> None:
        self.folder = folder
        self._service_factory = service_factory
        self._local = threading.local()
        self._folder_lock = threading.Lock()
        self._folder_id: Optional[str] = None

    @classmethod
    def from_backend(cls, backend: GoogleDriveBackend) -> "GoogleDriveStorageSink":
        creds = load_credentials(backend.token_file)
        return cls(
            lambda: build("drive", "v3", credentials=creds, cache_discovery=False),
            folder=backend.folder,
        )

    @property
    def name(self) -> str:
        return "Google Drive"

    def upload(self, data: bytes, filename: str) -> None:
        folder_id = self._ensure_folder()
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype="application/octet-stream", resumable=False)
        try:
            uploaded = (
                self._service()
                .files()
                .create(body={"name": filename, "parents": [folder_id]}, media_body=media, fields="id")
                .execute()
            )
        except HttpError as e:
            raise StorageError(f"failed to upload {filename} to Google Drive: {e}") from e

        logger.debug(f"File uploaded to Google Drive in folder {self.folder} with ID: {uploaded.get('id')}")

    def _service(self) -> Any:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._service_factory()
            self._local.service = service
        return service

    def _ensure_folder(self) -> str:
        with self._folder_lock:
            if self._folder_id is None:
                self._folder_id = self._get_or_create_folder()
            return self._folder_id

    def _get_or_create_folder(self) -> str:
        escaped = self.folder.replace("\\", "\\\\").replace("'", "\\'")
        query = f"name='{escaped}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        files = self._service().files()
        try:
            found = files.list(q=query, fields="files(id, name)").execute().get("files", [])
            if found:
                return found[0]["id"]

            logger.info(f"Creating Google Drive folder {self.folder}")
            folder = files.create(body={"name": self.folder, "mimeType": FOLDER_MIME_TYPE}, fields="id").execute()
        except HttpError as e:
            raise StorageError(f"error ensuring Google Drive folder {self.folder} exists: {e}") from e
        return folder["id"]
