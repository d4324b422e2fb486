"""Run sslscan as a subprocess and decode its XML report."""

__version__ = "0.1.0"

from .errors import (
    ParseError,
    ParseOutputError,
    ScanStartError,
    ScanTimeoutError,
    SSLScanError,
    ToolNotFoundError,
)
from .models import (
    Certificate,
    CipherEntry,
    Fallback,
    GroupEntry,
    Heartbleed,
    Protocol,
    PublicKey,
    Renegotiation,
    ScanResult,
    TLSAssessment,
)
from .parser import parse
from .scanner import OutcomeKind, ScanOutcome, ScanRequest, Scanner, run

__all__ = [
    "__version__",
    "Certificate",
    "CipherEntry",
    "Fallback",
    "GroupEntry",
    "Heartbleed",
    "OutcomeKind",
    "ParseError",
    "ParseOutputError",
    "Protocol",
    "PublicKey",
    "Renegotiation",
    "SSLScanError",
    "ScanOutcome",
    "ScanRequest",
    "ScanResult",
    "ScanStartError",
    "ScanTimeoutError",
    "Scanner",
    "TLSAssessment",
    "ToolNotFoundError",
    "parse",
    "run",
]
