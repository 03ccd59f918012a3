"""OneDrive storage sink over Microsoft Graph."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote

import httpx
import msal
from loguru import logger

from discordreaper.application.ports.errors import ConfigurationError, StorageError
from discordreaper.infrastructure.storage.backends import DEFAULT_EXPORT_FOLDER, OneDriveBackend

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
ONEDRIVE_SCOPES = ["Files.ReadWrite"]


class MsalTokenProvider:
    """Silent token acquisition from a serialized MSAL cache.

    The cache must already hold an account; interactive consent is done out of
    band. Refreshed tokens are written back to the cache file.
    """

    def __init__(self, client_id: str, cache_file: Path, authority: str, scopes: Optional[list[str]] = None) -> None:
        self.cache_file = cache_file
        self.scopes = scopes or list(ONEDRIVE_SCOPES)
        self._lock = threading.Lock()
        self._cache = msal.SerializableTokenCache()
        if cache_file.exists():
            self._cache.deserialize(cache_file.read_text(encoding="utf-8"))
        self._app = msal.PublicClientApplication(client_id=client_id, authority=authority, token_cache=self._cache)

    def __call__(self) -> str:
        with self._lock:
            accounts = self._app.get_accounts()
            if not accounts:
                raise ConfigurationError(f"No cached OneDrive account in {self.cache_file}")

            result = self._app.acquire_token_silent(self.scopes, account=accounts[0])
            if self._cache.has_state_changed:
                self.cache_file.write_text(self._cache.serialize(), encoding="utf-8")

        if not result or "access_token" not in result:
            detail = (result or {}).get("error_description") or "empty response"
            raise ConfigurationError(f"Could not acquire OneDrive token silently: {detail}")
        return result["access_token"]


class OneDriveStorageSink:
    """Upload into a folder under the drive root using simple PUT uploads.

    Simple upload is limited to 4MB per file by Graph; larger files need an
    upload session.
    """

    def __init__(
        self,
        token_provider: Callable[[], str],
        folder: str = DEFAULT_EXPORT_FOLDER,
        client: Optional[httpx.Client] = None,
        base_url: str = GRAPH_BASE_URL,
    ) -> None:
        self.folder = folder
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = client or httpx.Client(timeout=None)
        self._folder_lock = threading.Lock()
        self._folder_ready = False

    @classmethod
    def from_backend(cls, backend: OneDriveBackend) -> "OneDriveStorageSink":
        provider = MsalTokenProvider(backend.client_id, backend.token_cache_file, backend.authority)
        # Fail at startup, not on the first upload
        provider()
        return cls(provider, folder=backend.folder)

    @property
    def name(self) -> str:
        return "OneDrive"

    def upload(self, data: bytes, filename: str) -> None:
        self._ensure_folder()
        path = f"{_quote_path(self.folder)}/{_quote_path(filename)}"
        response = self._request(
            "PUT",
            f"/me/drive/root:/{path}:/content",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        if response.status_code not in (200, 201):
            raise StorageError(f"failed to upload {filename} to OneDrive, status: {response.status_code}")

        try:
            item_id = response.json().get("id")
        except ValueError:
            logger.warning("Could not decode OneDrive upload response, but upload may have succeeded")
            item_id = None
        logger.debug(f"File uploaded to OneDrive in folder {self.folder} with ID: {item_id}")

    def _ensure_folder(self) -> None:
        with self._folder_lock:
            if self._folder_ready:
                return

            response = self._request("GET", f"/me/drive/root:/{_quote_path(self.folder)}")
            if response.status_code == 404:
                logger.info(f"Creating OneDrive folder {self.folder}")
                response = self._request(
                    "POST",
                    "/me/drive/root/children",
                    json={"name": self.folder, "folder": {}, "@microsoft.graph.conflictBehavior": "fail"},
                )
                # 409: created concurrently by someone else
                if response.status_code not in (200, 201, 409):
                    raise StorageError(f"error creating OneDrive folder, status: {response.status_code}")
            elif response.status_code != 200:
                raise StorageError(f"error looking up OneDrive folder, status: {response.status_code}")
            self._folder_ready = True

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {self._token_provider()}"
        try:
            return self._client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"OneDrive request {method} {path} failed: {e}") from e


def _quote_path(value: str) -> str:
    return quote(value.strip("/"), safe="")
