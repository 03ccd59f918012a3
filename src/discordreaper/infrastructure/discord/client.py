"""Discord REST message source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx
from loguru import logger

from discordreaper.application.ports.errors import RateLimitedError, SourceError
from discordreaper.application.ports.message_source import MessageSource
from discordreaper.domain.entities.message import Page, SourceMessage
from discordreaper.infrastructure.discord.mapper import message_from_payload

DISCORD_API_BASE = "https://discord.com/api/v10"
DEFAULT_RETRY_AFTER_SECONDS = 1.0
MAX_PAGE_SIZE = 100

# Channel types that hold a message history (text, voice, announcement, threads, stage)
MESSAGE_CHANNEL_TYPES = {0, 2, 5, 10, 11, 12, 13}


@dataclass
class DiscordConfig:
    token: str
    base_url: str = DISCORD_API_BASE
    timeout_seconds: Optional[float] = None


class DiscordMessageSource(MessageSource):
    def __init__(self, cfg: DiscordConfig, client: Optional[httpx.Client] = None) -> None:
        self.cfg = cfg
        self._client = client or httpx.Client(timeout=cfg.timeout_seconds)
        self._headers = {
            "Authorization": f"Bot {cfg.token}",
            "Accept": "application/json",
            "User-Agent": "DiscordBot (discord-reaper, 0.1.0)",
        }

    def close(self) -> None:
        self._client.close()

    def fetch_page(
        self,
        channel_id: str,
        *,
        limit: int = MAX_PAGE_SIZE,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> Page:
        params: dict[str, Any] = {"limit": max(1, min(int(limit), MAX_PAGE_SIZE))}
        if before:
            params["before"] = before
        if after:
            params["after"] = after

        payload = self._get(f"/channels/{_quote_segment(channel_id)}/messages", params=params)
        if not isinstance(payload, list):
            raise SourceError(f"Unexpected message list payload for channel {channel_id}")
        return [message_from_payload(m, channel_id) for m in payload]

    def fetch_message(self, channel_id: str, message_id: str) -> SourceMessage:
        payload = self._get(f"/channels/{_quote_segment(channel_id)}/messages/{_quote_segment(message_id)}")
        return message_from_payload(payload, channel_id)

    def list_channel_ids(self, guild_id: str) -> list[str]:
        payload = self._get(f"/guilds/{_quote_segment(guild_id)}/channels")
        if not isinstance(payload, list):
            raise SourceError(f"Unexpected channel list payload for guild {guild_id}")

        channel_ids = []
        for channel in payload:
            if channel.get("type") not in MESSAGE_CHANNEL_TYPES:
                continue
            logger.debug(f"Got channel {channel.get('name')} {channel.get('id')}")
            channel_ids.append(str(channel["id"]))
        return channel_ids

    def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self.cfg.base_url.rstrip('/')}{path}"
        try:
            response = self._client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            raise SourceError(f"Discord request to {path} failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError(_retry_after_seconds(response))
        if response.status_code >= 400:
            raise SourceError(_extract_discord_error(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise SourceError(f"Discord returned invalid JSON for {path}", status_code=response.status_code) from e


def _retry_after_seconds(response: httpx.Response) -> float:
    # The header carries milliseconds; the JSON body carries seconds
    header = response.headers.get("Retry-After")
    if header:
        try:
            return max(0.0, float(header) / 1000.0)
        except ValueError:
            pass
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("retry_after") is not None:
        try:
            return max(0.0, float(body["retry_after"]))
        except (TypeError, ValueError):
            pass
    return DEFAULT_RETRY_AFTER_SECONDS


def _extract_discord_error(response: httpx.Response) -> str:
    prefix = f"Discord API request failed with status {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        body = (response.text or "").strip()
        return f"{prefix}: {body[:500]}" if body else prefix

    if isinstance(payload, dict) and payload.get("message"):
        code = payload.get("code")
        return f"{prefix}: {code} - {payload['message']}" if code else f"{prefix}: {payload['message']}"
    return prefix


def _quote_segment(value: str) -> str:
    return quote(str(value), safe="")
