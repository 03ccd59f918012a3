"""Append-only file ledger of processed attachment URLs."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from discordreaper.application.ports.errors import ConfigurationError


class FileLedger:
    """In-memory key set mirrored to a newline-delimited UTF-8 file.

    Keys are only ever added. `record_if_absent` is the single writer of the
    file: the first caller to add a key appends one line, everyone else is a
    no-op. Claims are kept in memory only and mark keys that are currently being
    transferred, so concurrent batches of one run do not upload a URL twice.
    """

    def __init__(self, path: Path, keys: Optional[Iterable[str]] = None) -> None:
        self.path = Path(path)
        self._keys: set[str] = set(keys or ())
        self._claims: set[str] = set()
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: Path) -> "FileLedger":
        """Read keys from `path`; a missing file yields an empty ledger."""
        path = Path(path)
        keys: set[str] = set()
        try:
            with path.open("r", encoding="utf-8") as fh:
                for line in fh:
                    key = line.strip()
                    if key:
                        keys.add(key)
        except FileNotFoundError:
            logger.info(f"No ledger file at {path}, starting empty")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read ledger file {path}: {e}") from e
        else:
            logger.info(f"Loaded {len(keys)} processed keys from {path}")
        return cls(path, keys)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    def record_if_absent(self, key: str) -> bool:
        """Add `key`; append it to the file only if this call added it."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            self._append(key)
            return True

    def claim(self, key: str) -> bool:
        """Reserve `key` for the calling task; False if done or already claimed."""
        with self._lock:
            if key in self._keys or key in self._claims:
                return False
            self._claims.add(key)
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._claims.discard(key)

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def _append(self, key: str) -> None:
        # No fsync: a lost line only costs a redundant upload on the next run
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(f"{key}\n")
        except OSError as e:
            logger.error(f"Error writing {key} to ledger file {self.path}: {e}")
