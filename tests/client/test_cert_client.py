"""Tests for the CertClient pipeline."""

import time
from pathlib import Path

import httpx
import pytest

from ssh_cert_client.client.agent import AgentInstaller
from ssh_cert_client.client.client import CertClient
from ssh_cert_client.client.exceptions import (
    ExpiredCertificateError,
    KeyNotFoundError,
    NetworkError,
    ParseError,
)
from ssh_cert_client.client.keystore import DirectoryKeyStore
from ssh_cert_client.client.transport import SignerTransport
from ssh_cert_client.client.types import RequesterConfig

CONFIG = RequesterConfig(environment="prod", signer_url="https://signer.example.com/")


def _signer(status: int, body: bytes) -> SignerTransport:
    return SignerTransport(httpx.MockTransport(lambda request: httpx.Response(status, content=body)))


def _client(store, agent, runner, signer: SignerTransport, now: float | None = None) -> CertClient:
    installer = AgentInstaller(
        "/tmp/agent.sock",
        connect=lambda sock: agent,
        runner=runner,
        clock=(lambda: now) if now is not None else None,
    )
    return CertClient(CONFIG, store, installer, transport=signer)


class TestCertClient:
    def test_full_run(self, tmp_path: Path, user_key, openssh_public, cert_bytes, fake_agent, fake_runner) -> None:
        (tmp_path / "id_ed25519.pub").write_bytes(openssh_public(user_key))
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(200, cert_bytes))

        result = client.get_cert("abc123")

        assert result.key_path == tmp_path / "id_ed25519.pub"
        assert result.cert_path == tmp_path / "id_ed25519-cert.pub"
        assert result.persisted is True
        assert result.cert_path.read_bytes() == cert_bytes
        assert result.request.private_key_path == tmp_path / "id_ed25519"
        assert 3599 <= result.request.ttl <= 3600
        assert fake_runner.calls == [
            ["ssh-add", "-t", str(result.request.ttl), str(tmp_path / "id_ed25519")]
        ]

    def test_persist_failure_does_not_block_install(
        self, user_key, openssh_public, cert_bytes, fake_agent, fake_runner, memory_store
    ) -> None:
        store = memory_store({"id_ed25519.pub": openssh_public(user_key)}, directory=Path("/nonexistent/.ssh"))
        failures: list[Path] = []
        client = _client(store, fake_agent, fake_runner, _signer(200, cert_bytes))

        result = client.get_cert("abc123", on_persist_error=lambda path, err: failures.append(path))

        assert result.persisted is False
        assert failures == [Path("/nonexistent/.ssh/id_ed25519-cert.pub")]
        assert len(fake_runner.calls) == 1
        assert fake_runner.calls[0][-1] == "/nonexistent/.ssh/id_ed25519"

    def test_certificate_shown_before_install(
        self, tmp_path: Path, user_key, openssh_public, cert_bytes, fake_agent, fake_runner
    ) -> None:
        (tmp_path / "id_ed25519.pub").write_bytes(openssh_public(user_key))
        events: list[str] = []

        def runner(cmd, check=False):
            events.append("ssh-add")
            return fake_runner(cmd, check=check)

        client = _client(DirectoryKeyStore(tmp_path), fake_agent, runner, _signer(200, cert_bytes))
        client.get_cert("abc123", on_certificate=lambda cert: events.append(cert.key_id))
        assert events == ["alice@example.com", "ssh-add"]

    def test_expired_certificate(self, tmp_path: Path, user_key, openssh_public, make_cert, fake_agent, fake_runner) -> None:
        (tmp_path / "id_ed25519.pub").write_bytes(openssh_public(user_key))
        now = int(time.time())
        raw = make_cert(user_key, valid_before=now - 1, valid_after=now - 3600)
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(200, raw), now=now)

        with pytest.raises(ExpiredCertificateError):
            client.get_cert("abc123")

    def test_expired_certificate_not_shown(
        self, tmp_path: Path, user_key, openssh_public, make_cert, fake_agent, fake_runner
    ) -> None:
        (tmp_path / "id_ed25519.pub").write_bytes(openssh_public(user_key))
        now = int(time.time())
        raw = make_cert(user_key, valid_before=now - 1, valid_after=now - 3600)
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(200, raw), now=now)
        shown = []

        with pytest.raises(ExpiredCertificateError):
            client.get_cert("abc123", on_certificate=shown.append)
        assert shown == []
        assert fake_runner.calls == []
        assert fake_runner.calls == []

    def test_signer_error_stops_pipeline(self, tmp_path: Path, fake_agent, fake_runner) -> None:
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(404, b"request not found"))
        with pytest.raises(NetworkError, match="request not found"):
            client.get_cert("abc123")
        assert fake_agent.removed == []

    def test_bare_key_response(self, tmp_path: Path, user_key, openssh_public, fake_agent, fake_runner) -> None:
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(200, openssh_public(user_key)))
        with pytest.raises(ParseError):
            client.get_cert("abc123")

    def test_no_matching_key(self, tmp_path: Path, cert_bytes, fake_agent, fake_runner) -> None:
        client = _client(DirectoryKeyStore(tmp_path), fake_agent, fake_runner, _signer(200, cert_bytes))
        with pytest.raises(KeyNotFoundError):
            client.get_cert("abc123")
        assert not (tmp_path / "id_ed25519-cert.pub").exists()
        assert fake_runner.calls == []
