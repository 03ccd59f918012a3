from __future__ import annotations
from typing import Any, Mapping

from discordreaper.domain.entities.attachment import Attachment
from discordreaper.domain.entities.message import SourceMessage

def attachment_from_payload(payload: Mapping[str, Any]) -> Attachment:
    return Attachment(
        source_url=str(payload.get("url") or ""),
        filename=str(payload.get("filename") or "attachment.bin"),
        content_type=str(payload.get("content_type") or ""),
        size=int(payload.get("size") or 0),
    )

def message_from_payload(payload: Mapping[str, Any], channel_id: str) -> SourceMessage:
    attachments = tuple(
        attachment_from_payload(a)
        for a in payload.get("attachments") or []
        if a.get("url")
    )
    return SourceMessage(
        id=str(payload["id"]),
        channel_id=str(payload.get("channel_id") or channel_id),
        attachments=attachments,
    )
