"""Download one attachment, sanity-check it, and hand it to a storage sink."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from loguru import logger

from discordreaper.application.ports.downloader import Downloader
from discordreaper.application.ports.errors import DownloadError
from discordreaper.application.ports.ledger import IdempotencyLedger
from discordreaper.application.ports.storage_sink import StorageSink
from discordreaper.domain.entities.attachment import Attachment
from discordreaper.domain.entities.message import SourceMessage
from discordreaper.domain.entities.stats import ArchiveStats
from discordreaper.infrastructure.http.sniffing import content_type_matches, sniff_content_type


class Outcome(str, Enum):
    UPLOADED = "uploaded"
    ALREADY_DONE = "already_done"
    IN_FLIGHT = "in_flight"
    DOWNLOAD_FAILED = "download_failed"
    UPLOAD_FAILED = "upload_failed"


class AttachmentProcessor:
    """Move attachments from the source into a sink exactly once per ledger key.

    Flow per attachment:
    1. Skip if the ledger already holds the source URL
    2. Download the whole body into memory
    3. Warn (never fail) on content-type disagreements
    4. Upload; on success record the URL in the ledger

    Every failure stays local to its attachment. Nothing is recorded unless the
    upload succeeded, so failed attachments are retried on the next run.
    """

    def __init__(
        self,
        ledger: IdempotencyLedger,
        downloader: Downloader,
        stats: Optional[ArchiveStats] = None,
    ) -> None:
        self.ledger = ledger
        self.downloader = downloader
        self.stats = stats or ArchiveStats()

    def process_batch(self, messages: Iterable[SourceMessage], sink: StorageSink) -> None:
        """Process every attachment of a page, strictly in source order."""
        count = 0
        for message in messages:
            count += 1
            for attachment in message.attachments:
                logger.debug(f"Start download for file {attachment.source_url} {attachment.filename}")
                self.process(attachment, sink)
        self.stats.increment("messages_scanned", count)

    def process(self, attachment: Attachment, sink: StorageSink) -> Outcome:
        url = attachment.source_url
        self.stats.increment("attachments_seen")

        if self.ledger.contains(url):
            logger.debug(f"File already uploaded {url}")
            self.stats.increment("skipped")
            return Outcome.ALREADY_DONE

        if not self.ledger.claim(url):
            logger.debug(f"File already being processed by another batch {url}")
            self.stats.increment("skipped")
            return Outcome.IN_FLIGHT

        try:
            outcome = self._transfer(attachment, sink)
        except Exception as e:
            logger.exception(f"Unexpected error processing file from {url}: {e}")
            outcome = Outcome.DOWNLOAD_FAILED
        finally:
            self.ledger.release(url)

        if outcome is Outcome.UPLOADED:
            self.stats.increment("uploaded")
        else:
            self.stats.increment("failed")
        return outcome

    def _transfer(self, attachment: Attachment, sink: StorageSink) -> Outcome:
        url = attachment.source_url

        try:
            response = self.downloader.fetch(url)
        except DownloadError as e:
            logger.error(f"Error downloading file from {url}: {e}")
            return Outcome.DOWNLOAD_FAILED

        if not response.ok:
            logger.error(f"HTTP status code {response.status_code} while downloading file from {url}")
            return Outcome.DOWNLOAD_FAILED

        self._check_content_type(attachment, response.content_type, response.content)

        try:
            sink.upload(response.content, attachment.filename)
        except Exception as e:
            logger.error(f"Error uploading {url} to {sink.name}: {e}")
            return Outcome.UPLOAD_FAILED

        if not self.ledger.record_if_absent(url):
            logger.debug(f"Ledger already held {url}")
        logger.info(f"Uploaded {attachment.filename} ({len(response.content)} bytes) to {sink.name}")
        return Outcome.UPLOADED

    @staticmethod
    def _check_content_type(attachment: Attachment, header_type: str, data: bytes) -> None:
        declared = attachment.content_type
        if declared and header_type != declared:
            logger.warning(f"Unexpected content-type for {attachment.filename}: expected {declared}, got {header_type}")

        detected = sniff_content_type(data)
        if detected is None:
            if declared:
                logger.warning(f"Could not confirm content-type of {attachment.filename}: expected {declared}, detected nothing")
            else:
                logger.debug(f"Could not detect content-type of {attachment.filename}")
        elif not content_type_matches(detected, declared):
            logger.warning(f"Content-type mismatch for {attachment.filename}: expected {declared}, detected {detected}")
