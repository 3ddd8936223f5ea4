"""ssh-agent interaction: stale entry removal and TTL-bound key installation.

Only the ``SSH2_AGENTC_REMOVE_IDENTITY`` request is spoken directly over the
agent socket. Adding the key is delegated to ``ssh-add`` so that it can
prompt for a passphrase on the user's terminal.
"""

import logging
import socket
import struct
import subprocess
import time
from pathlib import Path
from typing import Any, Callable

from ._constants import MAX_AGENT_LIFETIME
from .exceptions import AgentConnectError, ExpiredCertificateError, InstallError
from .persist import private_key_path_for
from .types import Certificate, InstallationRequest

logger = logging.getLogger(__name__)

SSH_AGENT_FAILURE = 5
SSH_AGENT_SUCCESS = 6
SSH2_AGENTC_REMOVE_IDENTITY = 18

_MAX_REPLY_LEN = 256 * 1024


def _sshstr(data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + data


class AgentClient:
    """Minimal client for a running ssh-agent. Usable as a context manager."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    @classmethod
    def connect(cls, auth_sock: str | None) -> "AgentClient":
        """Connect to the agent listening on ``auth_sock``.

        Raises:
            AgentConnectError: If no socket path is given or the connect fails.
        """
        if not auth_sock:
            raise AgentConnectError("Dial failed: SSH_AUTH_SOCK is not set")
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(auth_sock)
        except OSError as e:
            sock.close()
            raise AgentConnectError(f"Dial failed: {e}") from e
        logger.debug("Connected to ssh-agent at %s", auth_sock)
        return cls(sock)

    def __enter__(self) -> "AgentClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._sock.close()

    def remove_identity(self, key_blob: bytes) -> bool:
        """Ask the agent to drop the identity for ``key_blob``.

        Returns True if the agent reported success. Failure (including the
        key not being loaded, or a broken socket) returns False; callers are
        free to ignore the result.
        """
        try:
            reply = self._request(bytes([SSH2_AGENTC_REMOVE_IDENTITY]) + _sshstr(key_blob))
        except OSError:
            return False
        return reply[:1] == bytes([SSH_AGENT_SUCCESS])

    def _request(self, payload: bytes) -> bytes:
        self._sock.sendall(_sshstr(payload))
        (length,) = struct.unpack(">I", self._recv_exact(4))
        if length > _MAX_REPLY_LEN:
            raise ConnectionError(f"agent reply too large: {length} bytes")
        return self._recv_exact(length)

    def _recv_exact(self, n: int) -> bytes:
        buf = b""
        while len(buf) < n:
            chunk = self._sock.recv(n - len(buf))
            if not chunk:
                raise ConnectionError("agent closed the connection")
            buf += chunk
        return buf


def remaining_ttl(valid_before: int, now: float) -> int:
    """Whole seconds until ``valid_before``, capped at what ssh-add accepts.

    Raises:
        ExpiredCertificateError: If fewer than one second remains.
    """
    seconds = valid_before - int(now)
    if seconds < 1:
        raise ExpiredCertificateError("This certificate has already expired.")
    return min(seconds, MAX_AGENT_LIFETIME)


class AgentInstaller:
    """Loads the private key matching a certificate into ssh-agent.

    The socket path, the connect function, the process runner and the
    clock are all injectable so the installer can run without a real agent.
    """

    def __init__(
        self,
        auth_sock: str | None,
        connect: Callable[[str | None], AgentClient] | None = None,
        runner: Callable[..., subprocess.CompletedProcess] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._auth_sock = auth_sock
        self._connect = connect or AgentClient.connect
        self._runner = runner or subprocess.run
        self._clock = clock or time.time

    def install(
        self,
        cert: Certificate,
        cert_path: Path,
        on_ready: Callable[[Certificate], None] | None = None,
    ) -> InstallationRequest:
        """Replace any agent entry for the certificate's key with a TTL-bound one.

        ``on_ready`` is called after the expiry check and before ssh-add.

        Raises:
            AgentConnectError: If the agent cannot be reached.
            ExpiredCertificateError: If the certificate has expired; ssh-add
                is not run.
            InstallError: If ssh-add fails.
        """
        with self._connect(self._auth_sock) as agent:
            # Not actionable when the key was never loaded.
            agent.remove_identity(cert.public_key_blob)

            request = InstallationRequest(
                private_key_path=private_key_path_for(cert_path),
                ttl=remaining_ttl(cert.valid_before, self._clock()),
            )
            if on_ready is not None:
                on_ready(cert)
            self._add_identity(request)
        return request

    def _add_identity(self, request: InstallationRequest) -> None:
        cmd = ["ssh-add", "-t", str(request.ttl), str(request.private_key_path)]
        logger.info("Running %s", " ".join(cmd))
        # stdio is inherited: ssh-add may prompt for a passphrase.
        try:
            result = self._runner(cmd, check=False)
        except OSError as e:
            raise InstallError(f"Error in ssh-add: {e}") from e
        if result.returncode != 0:
            raise InstallError("Error in ssh-add", returncode=result.returncode)
        logger.info("Added %s to ssh-agent for %ds", request.private_key_path, request.ttl)
