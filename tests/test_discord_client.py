from __future__ import annotations

import httpx
import pytest

from discordreaper.application.ports.errors import RateLimitedError, SourceError
from discordreaper.infrastructure.discord.client import DiscordConfig, DiscordMessageSource

BASE_URL = "https://discord.test/api/v10"


def _source(handler) -> tuple[DiscordMessageSource, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(record))
    return DiscordMessageSource(DiscordConfig(token="secret", base_url=BASE_URL), client=client), seen


def _message(message_id: str, *attachments: dict) -> dict:
    return {"id": message_id, "channel_id": "c1", "attachments": list(attachments)}


def test_fetch_page_maps_messages_and_attachments():
    payload = [
        _message(
            "200",
            {"url": "https://cdn.test/a.png", "filename": "a.png", "content_type": "image/png", "size": 10},
            {"url": "https://cdn.test/b.bin", "filename": "b.bin", "size": 3},
        ),
        _message("199"),
    ]
    source, seen = _source(lambda request: httpx.Response(200, json=payload))

    page = source.fetch_page("c1", limit=100, before="250")

    request = seen[0]
    assert request.url.path == "/api/v10/channels/c1/messages"
    assert request.url.params["limit"] == "100"
    assert request.url.params["before"] == "250"
    assert "after" not in request.url.params
    assert request.headers["Authorization"] == "Bot secret"

    assert [m.id for m in page] == ["200", "199"]
    first = page[0].attachments
    assert first[0].source_url == "https://cdn.test/a.png"
    assert first[0].content_type == "image/png"
    assert first[1].content_type == ""
    assert first[1].size == 3
    assert page[1].attachments == ()


def test_first_page_has_no_cursor():
    source, seen = _source(lambda request: httpx.Response(200, json=[]))

    assert source.fetch_page("c1", limit=100) == []
    assert "before" not in seen[0].url.params


def test_page_size_is_capped():
    source, seen = _source(lambda request: httpx.Response(200, json=[]))

    source.fetch_page("c1", limit=500)

    assert seen[0].url.params["limit"] == "100"


def test_rate_limit_header_is_milliseconds():
    source, _ = _source(lambda request: httpx.Response(429, headers={"Retry-After": "250"}, json={}))

    with pytest.raises(RateLimitedError) as excinfo:
        source.fetch_page("c1", limit=100)

    assert excinfo.value.retry_after == pytest.approx(0.25)
    assert excinfo.value.status_code == 429


def test_rate_limit_falls_back_to_body_seconds():
    source, _ = _source(lambda request: httpx.Response(429, json={"retry_after": 1.5, "global": False}))

    with pytest.raises(RateLimitedError) as excinfo:
        source.fetch_page("c1", limit=100)

    assert excinfo.value.retry_after == pytest.approx(1.5)


def test_http_error_becomes_source_error():
    source, _ = _source(lambda request: httpx.Response(403, json={"message": "Missing Access", "code": 50001}))

    with pytest.raises(SourceError) as excinfo:
        source.fetch_page("c1", limit=100)

    assert not isinstance(excinfo.value, RateLimitedError)
    assert excinfo.value.status_code == 403
    assert "Missing Access" in str(excinfo.value)


def test_transport_error_becomes_source_error():
    def fail(request):
        raise httpx.ConnectError("unreachable", request=request)

    source, _ = _source(fail)

    with pytest.raises(SourceError):
        source.fetch_page("c1", limit=100)


def test_list_channel_ids_keeps_message_channels():
    channels = [
        {"id": "1", "name": "general", "type": 0},
        {"id": "2", "name": "Category", "type": 4},
        {"id": "3", "name": "voice", "type": 2},
        {"id": "4", "name": "forum", "type": 15},
    ]
    source, seen = _source(lambda request: httpx.Response(200, json=channels))

    assert source.list_channel_ids("g1") == ["1", "3"]
    assert seen[0].url.path == "/api/v10/guilds/g1/channels"


def test_fetch_message():
    payload = _message("42", {"url": "https://cdn.test/x.jpg", "filename": "x.jpg", "content_type": "image/jpeg", "size": 1})
    source, seen = _source(lambda request: httpx.Response(200, json=payload))

    message = source.fetch_message("c1", "42")

    assert seen[0].url.path == "/api/v10/channels/c1/messages/42"
    assert message.id == "42"
    assert message.attachments[0].filename == "x.jpg"
