from __future__ import annotations
from typing import Optional

import filetype

def sniff_content_type(data: bytes) -> Optional[str]:
    """Guess a MIME type from magic bytes; None when the signature is unknown."""
    if not data:
        return None
    return filetype.guess_mime(data)

def content_type_matches(actual: str, declared: str) -> bool:
    # Declared types may omit parameters ("text/plain" vs "text/plain; charset=utf-8")
    if not declared:
        return True
    return actual.lower().startswith(declared.lower())
