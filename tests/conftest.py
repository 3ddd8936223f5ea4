"""Shared fixtures: real Ed25519 keys, signed certificates and key stores."""
import json
import subprocess
import time
from pathlib import Path
from typing import Callable

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    SSHCertificateBuilder,
    SSHCertificateType,
)


class MemoryKeyStore:
    """In-memory KeyStore: names map to file contents, or to an OSError to raise."""

    def __init__(self, files: dict[str, bytes | OSError], directory: Path = Path("/keys")) -> None:
        self._files = files
        self._directory = directory

    def entries(self) -> list[str]:
        return list(self._files)

    def read(self, name: str) -> bytes:
        content = self._files[name]
        if isinstance(content, OSError):
            raise content
        return content

    def path(self, name: str) -> Path:
        return self._directory / name


def _openssh_public(key: Ed25519PrivateKey, comment: bytes = b"alice@laptop") -> bytes:
    return key.public_key().public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH) + b" " + comment + b"\n"


def _sign_cert(
    key: Ed25519PrivateKey,
    ca_key: Ed25519PrivateKey,
    valid_before: int,
    valid_after: int | None = None,
    key_id: bytes = b"alice@example.com",
) -> bytes:
    now = int(time.time())
    if valid_after is None:
        valid_after = min(now - 60, valid_before)
    cert = (
        SSHCertificateBuilder()
        .public_key(key.public_key())
        .serial(42)
        .type(SSHCertificateType.USER)
        .key_id(key_id)
        .valid_principals([b"alice", b"deploy"])
        .valid_after(valid_after)
        .valid_before(valid_before)
        .add_critical_option(b"source-address", b"10.0.0.0/8")
        .add_extension(b"permit-pty", b"")
        .sign(ca_key)
    )
    return cert.public_bytes() + b"\n"


@pytest.fixture
def ca_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def user_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def openssh_public() -> Callable[..., bytes]:
    """Factory for authorized-key lines of a private key's public half."""
    return _openssh_public


@pytest.fixture
def make_cert(ca_key: Ed25519PrivateKey) -> Callable[..., bytes]:
    """Factory for signed certificate lines: make_cert(key, valid_before=...)."""
    def _make(key: Ed25519PrivateKey, valid_before: int | None = None, **kwargs) -> bytes:
        if valid_before is None:
            valid_before = int(time.time()) + 3600
        return _sign_cert(key, ca_key, valid_before, **kwargs)
    return _make


@pytest.fixture
def cert_bytes(make_cert, user_key: Ed25519PrivateKey) -> bytes:
    return make_cert(user_key)


@pytest.fixture
def memory_store() -> type[MemoryKeyStore]:
    return MemoryKeyStore


@pytest.fixture
def home(tmp_path: Path, user_key: Ed25519PrivateKey) -> Path:
    """A fake $HOME with one key pair in ~/.ssh and a single-environment config."""
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir()
    (ssh_dir / "id_ed25519.pub").write_bytes(_openssh_public(user_key))
    (ssh_dir / "id_ed25519").write_text("private key placeholder\n")
    (ssh_dir / "known_hosts").write_text("")

    config_dir = tmp_path / ".ssh_ca"
    config_dir.mkdir()
    (config_dir / "requester_config.json").write_text(
        json.dumps({"prod": {"signer_url": "https://signer.example.com/"}})
    )
    return tmp_path


class FakeAgent:
    """Stands in for AgentClient; records the key blobs it was asked to remove."""

    def __init__(self, remove_result: bool = True) -> None:
        self.remove_result = remove_result
        self.removed: list[bytes] = []
        self.closed = False

    def __enter__(self) -> "FakeAgent":
        return self

    def __exit__(self, *args) -> None:
        self.closed = True

    def remove_identity(self, key_blob: bytes) -> bool:
        self.removed.append(key_blob)
        return self.remove_result


class FakeRunner:
    """Stands in for subprocess.run; records commands and returns a fixed code."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[list[str]] = []

    def __call__(self, cmd, check=False):
        self.calls.append(cmd)
        return subprocess.CompletedProcess(cmd, self.returncode)


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
