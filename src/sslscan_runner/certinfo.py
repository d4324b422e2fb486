"""
X.509 details for certificates reported with --show-certificate.

sslscan only prints a few textual fields per certificate; when the PEM
blob is present it can be loaded to get the rest.
"""

from __future__ import annotations

from typing import Any

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .models import Certificate
from .utils import sha256_hex


def _name_to_str(name: x509.Name) -> str:
    # RFC4514
    try:
        return name.rfc4514_string()
    except ValueError:
        return str(name)


def _get_san_dns(cert: x509.Certificate) -> list[str]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return list(ext.value.get_values_for_type(x509.DNSName))


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return bool(bc.ca)


def _sig_alg(cert: x509.Certificate) -> str | None:
    try:
        algorithm = cert.signature_hash_algorithm
    except UnsupportedAlgorithm:
        return None
    return algorithm.name if algorithm else None


def _pubkey_type(cert: x509.Certificate) -> str | None:
    try:
        return cert.public_key().__class__.__name__
    except (UnsupportedAlgorithm, ValueError):
        return None


def load_certificate(entry: Certificate) -> x509.Certificate | None:
    """
    Load the PEM blob of `entry`. Returns None when the entry has no blob;
    a malformed blob raises ValueError (or UnsupportedAlgorithm) from
    cryptography.
    """
    pem = entry.blob.strip()
    if not pem:
        return None
    return x509.load_pem_x509_certificate(pem.encode("ascii"))


def summarize(entry: Certificate) -> dict[str, Any] | None:
    cert = load_certificate(entry)
    if cert is None:
        return None

    der = cert.public_bytes(serialization.Encoding.DER)
    return {
        "sha256": sha256_hex(der),
        "subject": _name_to_str(cert.subject),
        "issuer": _name_to_str(cert.issuer),
        "serialNumber": hex(cert.serial_number),
        "sanDns": _get_san_dns(cert),
        "isCa": _is_ca(cert),
        "signatureAlgorithm": _sig_alg(cert),
        "publicKeyType": _pubkey_type(cert),
    }
