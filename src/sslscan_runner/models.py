from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _serialize(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    if hasattr(value, "__dataclass_fields__"):
        return value.to_dict()
    return value


class _Node:
    """
    Shared camelCase serialization for the decoded tree.
    Fields not marked with metadata {"serialize": False} are emitted.
    """

    def to_dict(self) -> dict[str, Any]:
        return {
            _camel(f.name): _serialize(getattr(self, f.name))
            for f in fields(self)  # type: ignore[arg-type]
            if f.metadata.get("serialize", True)
        }


@dataclass(frozen=True)
class Protocol(_Node):
    type: str = ""
    version: str = ""
    enabled: str = ""


@dataclass(frozen=True)
class Fallback(_Node):
    """TLS_FALLBACK_SCSV downgrade protection."""
    supported: str = ""


@dataclass(frozen=True)
class Renegotiation(_Node):
    supported: str = ""
    secure: str = ""


@dataclass(frozen=True)
class Heartbleed(_Node):
    ssl_version: str = ""
    vulnerable: str = ""


@dataclass(frozen=True)
class CipherEntry(_Node):
    """
    One evaluated cipher suite. curve/ecdhe_bits are only set by the
    tool for (EC)DHE suites.
    """
    status: str = ""
    ssl_version: str = ""
    bits: str = ""
    cipher: str = ""
    id: str = ""
    strength: str = ""
    curve: str = ""
    ecdhe_bits: str = ""


@dataclass(frozen=True)
class GroupEntry(_Node):
    ssl_version: str = ""
    bits: str = ""
    name: str = ""
    id: str = ""


@dataclass(frozen=True)
class PublicKey(_Node):
    error: str = ""
    type: str = ""
    bits: str = ""


@dataclass(frozen=True)
class Certificate(_Node):
    """
    One certificate as reported by the tool. Dates are the tool's own
    (locale dependent) strings and are kept verbatim.
    """
    type: str = ""
    signature_algorithm: str = ""
    pk: PublicKey = field(default_factory=PublicKey)
    subject: str = ""
    alt_names: str = ""
    issuer: str = ""
    not_valid_before: str = ""
    not_valid_after: str = ""
    expired: str = ""
    # PEM text, only present when the tool ran with --show-certificate
    blob: str = ""


@dataclass(frozen=True)
class TLSAssessment(_Node):
    host: str = ""
    sni_name: str = ""
    port: str = ""
    protocols: tuple[Protocol, ...] = ()
    fallback: Fallback = field(default_factory=Fallback)
    renegotiation: Renegotiation = field(default_factory=Renegotiation)
    heartbleeds: tuple[Heartbleed, ...] = ()
    ciphers: tuple[CipherEntry, ...] = ()
    groups: tuple[GroupEntry, ...] = ()
    certificates: tuple[Certificate, ...] = ()


@dataclass(frozen=True)
class ScanResult(_Node):
    """
    Root of a decoded sslscan document.

    `raw` is the exact input the tree was decoded from. It is provenance
    only: excluded from equality, repr and to_dict().
    """
    title: str = ""
    version: str = ""
    ssltest: TLSAssessment | None = None
    raw: bytes = field(
        default=b"", compare=False, repr=False, metadata={"serialize": False}
    )
