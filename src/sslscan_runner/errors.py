from __future__ import annotations


class SSLScanError(Exception):
    """Base class for everything raised or reported by sslscan_runner."""


class ToolNotFoundError(SSLScanError):
    """The sslscan binary could not be located. Raised before any process is spawned."""


class ScanStartError(SSLScanError):
    """The OS refused to start the sslscan process."""

    def __init__(self, binary_path: str, os_error: OSError):
        super().__init__(f"failed to start {binary_path}: {os_error}")
        self.binary_path = binary_path
        self.os_error = os_error


class ScanTimeoutError(SSLScanError):
    """The scan was cancelled or hit its deadline before sslscan exited."""


class ParseError(SSLScanError, ValueError):
    """
    The captured output is not a well-formed document.

    `raw` holds the exact bytes that failed to decode.
    """

    def __init__(self, message: str, raw: bytes):
        super().__init__(message)
        self.raw = raw


class ParseOutputError(SSLScanError):
    """sslscan ran to completion but its output could not be decoded."""

    def __init__(self, parse_error: ParseError):
        super().__init__(f"could not parse sslscan output: {parse_error}")
        self.parse_error = parse_error

    @property
    def raw(self) -> bytes:
        return self.parse_error.raw
