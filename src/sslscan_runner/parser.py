"""
Decoder for the document sslscan writes with --xml.

Shape is strict (the input must be well-formed markup), content is
lenient: unknown elements are ignored and missing elements or attributes
decode to empty strings / empty tuples. Every value is passed through as
the text found in the document.
"""

from __future__ import annotations

from xml.etree import ElementTree

from .errors import ParseError
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


def _text(parent: ElementTree.Element, tag: str) -> str:
    child = parent.find(tag)
    if child is None:
        return ""
    return "".join(child.itertext())


def _protocol(el: ElementTree.Element) -> Protocol:
    return Protocol(
        type=el.get("type", ""),
        version=el.get("version", ""),
        enabled=el.get("enabled", ""),
    )


def _cipher(el: ElementTree.Element) -> CipherEntry:
    return CipherEntry(
        status=el.get("status", ""),
        ssl_version=el.get("sslversion", ""),
        bits=el.get("bits", ""),
        cipher=el.get("cipher", ""),
        id=el.get("id", ""),
        strength=el.get("strength", ""),
        curve=el.get("curve", ""),
        ecdhe_bits=el.get("ecdhebits", ""),
    )


def _group(el: ElementTree.Element) -> GroupEntry:
    return GroupEntry(
        ssl_version=el.get("sslversion", ""),
        bits=el.get("bits", ""),
        name=el.get("name", ""),
        id=el.get("id", ""),
    )


def _certificate(el: ElementTree.Element) -> Certificate:
    pk_el = el.find("pk")
    pk = PublicKey()
    if pk_el is not None:
        pk = PublicKey(
            error=pk_el.get("error", ""),
            type=pk_el.get("type", ""),
            bits=pk_el.get("bits", ""),
        )
    return Certificate(
        type=el.get("type", ""),
        signature_algorithm=_text(el, "signature-algorithm"),
        pk=pk,
        subject=_text(el, "subject"),
        alt_names=_text(el, "altnames"),
        issuer=_text(el, "issuer"),
        not_valid_before=_text(el, "not-valid-before"),
        not_valid_after=_text(el, "not-valid-after"),
        expired=_text(el, "expired"),
        blob=_text(el, "certificate-blob"),
    )


def _ssltest(el: ElementTree.Element) -> TLSAssessment:
    fallback = Fallback()
    fallback_el = el.find("fallback")
    if fallback_el is not None:
        fallback = Fallback(supported=fallback_el.get("supported", ""))

    renegotiation = Renegotiation()
    reneg_el = el.find("renegotiation")
    if reneg_el is not None:
        renegotiation = Renegotiation(
            supported=reneg_el.get("supported", ""),
            secure=reneg_el.get("secure", ""),
        )

    certificates: tuple[Certificate, ...] = ()
    certs_el = el.find("certificates")
    if certs_el is not None:
        certificates = tuple(_certificate(c) for c in certs_el.findall("certificate"))

    return TLSAssessment(
        host=el.get("host", ""),
        sni_name=el.get("sniname", ""),
        port=el.get("port", ""),
        protocols=tuple(_protocol(p) for p in el.findall("protocol")),
        fallback=fallback,
        renegotiation=renegotiation,
        heartbleeds=tuple(
            Heartbleed(
                ssl_version=h.get("sslversion", ""),
                vulnerable=h.get("vulnerable", ""),
            )
            for h in el.findall("heartbleed")
        ),
        ciphers=tuple(_cipher(c) for c in el.findall("cipher")),
        groups=tuple(_group(g) for g in el.findall("group")),
        certificates=certificates,
    )


def parse(content: bytes) -> ScanResult:
    """
    Decode sslscan XML output into a ScanResult.

    Raises ParseError (carrying `content` unchanged) when the input is not
    well-formed. The root element name is not checked; only the first
    `ssltest` element is decoded.
    """
    try:
        root = ElementTree.fromstring(content)
    except ElementTree.ParseError as e:
        raise ParseError(str(e), raw=content) from e

    ssltest_el = root.find("ssltest")
    return ScanResult(
        title=root.get("title", ""),
        version=root.get("version", ""),
        ssltest=_ssltest(ssltest_el) if ssltest_el is not None else None,
        raw=content,
    )
