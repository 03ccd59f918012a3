"""Idempotency ledger implementations."""

from discordreaper.infrastructure.ledger.file_ledger import FileLedger

__all__ = ["FileLedger"]
