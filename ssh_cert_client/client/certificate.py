"""Parsing of OpenSSH certificates in authorized-key text format."""

import base64
import hashlib
import logging
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    SSHCertificate,
    SSHCertificateType,
    SSHPublicKeyTypes,
    load_ssh_public_identity,
)

from .exceptions import ParseError
from .types import Certificate, CertType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertificateRecord:
    certificate: SSHCertificate


@dataclass(frozen=True)
class BareKey:
    key: SSHPublicKeyTypes


@dataclass(frozen=True)
class Malformed:
    reason: str


ParsedIdentity = CertificateRecord | BareKey | Malformed


def _records(raw: bytes) -> list[bytes]:
    lines = (line.strip() for line in raw.splitlines())
    return [line for line in lines if line and not line.startswith(b"#")]


def parse_identity(raw: bytes, first_only: bool = False) -> ParsedIdentity:
    """Decode a single authorized-key line into a certificate or bare key.

    Never raises for bad input: anything that is not exactly one well-formed
    record comes back as ``Malformed`` with a reason. With ``first_only``,
    records after the first are ignored instead of rejected.
    """
    records = _records(raw)
    if not records:
        return Malformed("no key found")
    if len(records) > 1 and not first_only:
        return Malformed(f"expected a single key, found {len(records)}")
    try:
        identity = load_ssh_public_identity(records[0])
    except (ValueError, UnsupportedAlgorithm) as e:
        return Malformed(str(e) or type(e).__name__)
    if isinstance(identity, SSHCertificate):
        return CertificateRecord(identity)
    return BareKey(identity)


def ssh_wire_blob(identity: SSHCertificate | SSHPublicKeyTypes) -> bytes:
    """Return the SSH wire encoding of a key or certificate.

    A certificate and the key it certifies have different encodings, so a
    certificate never compares equal to a bare key.
    """
    if isinstance(identity, SSHCertificate):
        encoded = identity.public_bytes()
    else:
        encoded = identity.public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    return base64.b64decode(encoded.split()[1])


def fingerprint(blob: bytes) -> str:
    """OpenSSH-style SHA256 fingerprint of a wire-encoded key."""
    digest = hashlib.sha256(blob).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def _text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _to_certificate(cert: SSHCertificate, raw: bytes) -> Certificate:
    cert_type = CertType.USER if cert.type == SSHCertificateType.USER else CertType.HOST
    public_key = cert.public_key()
    return Certificate(
        public_key=public_key,
        public_key_blob=ssh_wire_blob(public_key),
        valid_after=cert.valid_after,
        valid_before=cert.valid_before,
        serial=cert.serial,
        key_id=_text(cert.key_id),
        cert_type=cert_type,
        principals=tuple(_text(p) for p in cert.valid_principals),
        critical_options={_text(k): _text(v) for k, v in cert.critical_options.items()},
        extensions={_text(k): _text(v) for k, v in cert.extensions.items()},
        signature_key_blob=ssh_wire_blob(cert.signature_key()),
        raw=raw,
    )


def parse_certificate(raw: bytes) -> Certificate:
    """Parse signer output, requiring the certificate variant.

    Raises:
        ParseError: If the bytes are malformed or hold a bare public key.
    """
    match parse_identity(raw):
        case CertificateRecord(certificate=cert):
            certificate = _to_certificate(cert, raw)
            logger.debug(
                "Parsed certificate serial=%d key_id=%s valid_before=%d",
                certificate.serial, certificate.key_id, certificate.valid_before,
            )
            return certificate
        case BareKey():
            raise ParseError(
                "Trouble parsing response: got a plain public key, not a certificate"
            )
        case Malformed(reason=reason):
            raise ParseError(f"Trouble parsing response: {reason}")
