"""HTTP helpers for attachment transfer."""

from discordreaper.infrastructure.http.downloader import HttpxDownloader
from discordreaper.infrastructure.http.sniffing import content_type_matches, sniff_content_type

__all__ = [
    "HttpxDownloader",
    "content_type_matches",
    "sniff_content_type",
]
