from __future__ import annotations

import httpx
import pytest

from discordreaper.application.context import RunContext
from discordreaper.application.ports.errors import RateLimitedError, SourceError
from discordreaper.application.use_cases.archive_guild import ArchiveGuildUseCase
from discordreaper.application.use_cases.scan_channel import ScanState
from discordreaper.domain.entities.message import SourceMessage
from discordreaper.infrastructure.discord.client import DiscordConfig, DiscordMessageSource
from discordreaper.infrastructure.ledger.file_ledger import FileLedger

from fakes import FakeDownloader, FakeSink, FakeSource, make_message


def _context(source, ledger_path, sink=None, downloader=None, max_workers=5):
    return RunContext(
        source=source,
        sink=sink or FakeSink(),
        ledger=FileLedger.load(ledger_path),
        downloader=downloader or FakeDownloader(),
        max_workers=max_workers,
    )


def _single_page_source():
    item_a = make_message("a", "u1")
    item_b = make_message("b")
    return FakeSource({"c1": [[item_a, item_b], []]})


def test_first_run_uploads_and_records(tmp_path):
    ledger_path = tmp_path / "state.txt"
    source = _single_page_source()
    downloader = FakeDownloader()
    sink = FakeSink()

    report = ArchiveGuildUseCase(_context(source, ledger_path, sink, downloader)).run("guild")

    assert downloader.calls == ["u1"]
    assert sink.filenames == ["u1.png"]
    assert ledger_path.read_text(encoding="utf-8") == "u1\n"
    assert len(source.calls) == 2
    assert report.channels[0].state is ScanState.DONE
    assert report.success
    assert report.counters["messages_scanned"] == 2
    assert report.counters["uploaded"] == 1


def test_rerun_with_existing_ledger_does_nothing(tmp_path):
    ledger_path = tmp_path / "state.txt"
    ArchiveGuildUseCase(_context(_single_page_source(), ledger_path)).run("guild")
    before = ledger_path.read_text(encoding="utf-8")

    downloader = FakeDownloader()
    sink = FakeSink()
    report = ArchiveGuildUseCase(_context(_single_page_source(), ledger_path, sink, downloader)).run("guild")

    assert downloader.calls == []
    assert sink.uploads == []
    assert ledger_path.read_text(encoding="utf-8") == before
    assert report.channels[0].state is ScanState.DONE
    assert report.counters["skipped"] == 1


def test_failed_channel_does_not_stop_the_others(tmp_path):
    source = FakeSource(
        {
            "c1": [SourceError("missing access", status_code=403)],
            "c2": [[make_message("m1", "u2", channel_id="c2")], []],
        }
    )
    sink = FakeSink()

    report = ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink)).run("guild")

    assert [r.channel_id for r in report.channels] == ["c1", "c2"]
    assert report.failed_channels == ["c1"]
    assert not report.success
    assert sink.filenames == ["u2.png"]


def test_attachment_failures_do_not_fail_the_run(tmp_path):
    source = FakeSource({"c1": [[make_message("m2", "ok"), make_message("m1", "bad")], []]})
    sink = FakeSink(fail_for=("bad.png",))

    report = ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink)).run("guild")

    assert report.success
    assert report.counters["uploaded"] == 1
    assert report.counters["failed"] == 1


def test_duplicate_urls_across_pages_upload_once(tmp_path):
    pages = [[make_message(f"m{i}", "shared")] for i in range(10, 0, -1)]
    source = FakeSource({"c1": [*pages, []]})
    sink = FakeSink()

    ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink, max_workers=4)).run("guild")

    assert sink.filenames == ["shared.png"]
    assert (tmp_path / "state.txt").read_text(encoding="utf-8") == "shared\n"


def test_channels_are_processed_sequentially(tmp_path):
    order: list[str] = []

    class OrderingSink(FakeSink):
        def upload(self, data, filename):
            order.append(filename)
            super().upload(data, filename)

    source = FakeSource(
        {
            "c1": [[make_message(f"a{i}", f"a{i}", channel_id="c1")] for i in range(5)] + [[]],
            "c2": [[make_message(f"b{i}", f"b{i}", channel_id="c2")] for i in range(5)] + [[]],
        }
    )

    ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", OrderingSink(), max_workers=3)).run("guild")

    assert {name[0] for name in order[:5]} == {"a"}
    assert {name[0] for name in order[5:]} == {"b"}


def test_validate_message_processes_one_message(tmp_path):
    source = FakeSource()
    source.messages[("c1", "m1")] = make_message("m1", "u9")
    sink = FakeSink()

    report = ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink)).validate_message("c1", "m1")

    assert sink.filenames == ["u9.png"]
    assert report.counters["uploaded"] == 1
    assert source.calls == []


def test_validate_message_without_attachments_raises(tmp_path):
    source = FakeSource()
    source.messages[("c1", "m1")] = SourceMessage(id="m1", channel_id="c1")

    with pytest.raises(SourceError):
        ArchiveGuildUseCase(_context(source, tmp_path / "state.txt")).validate_message("c1", "m1")


def test_rate_limited_channel_discovery_is_retried(tmp_path):
    source = FakeSource({"c1": [[make_message("m1", "u1")], []]})
    source.list_failures = [RateLimitedError(0.01)]
    sleeps: list[float] = []
    sink = FakeSink()

    report = ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink), sleep=sleeps.append).run("guild")

    assert source.list_calls == 2
    assert sleeps == [0.01]
    assert report.success
    assert sink.filenames == ["u1.png"]


def test_channel_discovery_429_over_http_does_not_fail_the_run(tmp_path):
    responses = iter(
        [
            httpx.Response(429, headers={"Retry-After": "10"}, json={"message": "You are being rate limited."}),
            httpx.Response(200, json=[{"id": "c1", "type": 0, "name": "general"}]),
            httpx.Response(200, json=[]),
        ]
    )
    client = httpx.Client(transport=httpx.MockTransport(lambda request: next(responses)))
    source = DiscordMessageSource(DiscordConfig(token="secret", base_url="https://discord.test/api/v10"), client=client)
    sleeps: list[float] = []

    report = ArchiveGuildUseCase(_context(source, tmp_path / "state.txt"), sleep=sleeps.append).run("g")

    assert sleeps == [0.01]
    assert [r.channel_id for r in report.channels] == ["c1"]
    assert report.success


def test_rate_limited_message_lookup_is_retried(tmp_path):
    source = FakeSource()
    source.messages[("c1", "m1")] = make_message("m1", "u9")
    source.message_failures = [RateLimitedError(0.5), RateLimitedError(0.5)]
    sleeps: list[float] = []
    sink = FakeSink()

    ArchiveGuildUseCase(_context(source, tmp_path / "state.txt", sink), sleep=sleeps.append).validate_message("c1", "m1")

    assert sleeps == [0.5, 0.5]
    assert sink.filenames == ["u9.png"]


def test_other_discovery_errors_still_propagate(tmp_path):
    source = FakeSource()
    source.list_failures = [SourceError("unknown guild", status_code=404)]

    with pytest.raises(SourceError):
        ArchiveGuildUseCase(_context(source, tmp_path / "state.txt"), sleep=lambda s: None).run("guild")
