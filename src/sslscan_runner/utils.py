from __future__ import annotations

import hashlib


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def split_warnings(stderr: bytes) -> list[str]:
    """Split captured stderr into lines, dropping trailing blank lines."""
    text = stderr.decode("utf-8", errors="replace").rstrip("\r\n")
    if not text:
        return []
    return [line.rstrip("\r") for line in text.split("\n")]
