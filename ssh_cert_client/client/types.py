"""Type definitions for the SSH certificate client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.serialization import SSHPublicKeyTypes


class CertType(str, Enum):
    USER = "user"
    HOST = "host"


@dataclass(frozen=True)
class RequesterConfig:
    """Signer settings for one environment of the requester config file."""

    environment: str
    signer_url: str
    public_key_path: Path | None = None


@dataclass(frozen=True)
class Certificate:
    """A signed OpenSSH certificate as returned by the signer.

    ``public_key_blob`` is the SSH wire encoding of the certified key, the
    form used both for matching local keys and for agent requests.
    ``raw`` holds the fetched bytes unchanged so they can be written to disk.
    """

    public_key: SSHPublicKeyTypes
    public_key_blob: bytes
    valid_after: int
    valid_before: int
    serial: int
    key_id: str
    cert_type: CertType
    principals: tuple[str, ...]
    critical_options: dict[str, str] = field(default_factory=dict)
    extensions: dict[str, str] = field(default_factory=dict)
    signature_key_blob: bytes = b""
    raw: bytes = b""


@dataclass(frozen=True)
class LocalKeyEntry:
    path: Path
    raw: bytes
    blob: bytes


@dataclass(frozen=True)
class InstallationRequest:
    """Private key handed to ssh-add together with its agent lifetime."""

    private_key_path: Path
    ttl: int


@dataclass(frozen=True)
class InstallResult:
    certificate: Certificate
    key_path: Path
    cert_path: Path
    persisted: bool
    request: InstallationRequest
