"""CertClient: fetch, match, persist and install a signed SSH certificate."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .agent import AgentInstaller
from .certificate import parse_certificate
from .keystore import KeyStore, find_matching_key_path
from .persist import cert_path_for, persist_certificate
from .transport import SignerTransport
from .types import Certificate, InstallResult, RequesterConfig

logger = logging.getLogger(__name__)


class CertClient:
    """Runs the certificate pipeline for one environment.

    Steps run strictly in order: fetch, parse, match, persist, install.
    Only the persist step may fail without stopping the run; every other
    error propagates to the caller.
    """

    def __init__(
        self,
        config: RequesterConfig,
        key_store: KeyStore,
        installer: AgentInstaller,
        transport: SignerTransport | None = None,
    ) -> None:
        self._config = config
        self._key_store = key_store
        self._installer = installer
        self._transport = transport or SignerTransport()

    def get_cert(
        self,
        request_id: str,
        on_persist_error: Callable[[Path, OSError], None] | None = None,
        on_certificate: Callable[[Certificate], None] | None = None,
    ) -> InstallResult:
        """Fetch the certificate for ``request_id`` and load its key into the agent.

        Args:
            request_id: Certificate request ID issued by the signer.
            on_persist_error: Called if the certificate file cannot be
                written. The run continues.
            on_certificate: Called with the parsed certificate once it is
                known to be unexpired, just before ssh-add runs, e.g. to show
                it to the user.

        Raises:
            CertClientError: Any fatal failure along the way.
        """
        raw = self._transport.fetch(request_id, self._config.signer_url)
        cert = parse_certificate(raw)
        key_path = find_matching_key_path(self._key_store, cert.public_key_blob)

        cert_path = cert_path_for(key_path)
        persisted = True
        try:
            persist_certificate(raw, key_path)
        except OSError as e:
            persisted = False
            logger.warning("Couldn't write certificate file to %s: %s", cert_path, e)
            if on_persist_error is not None:
                on_persist_error(cert_path, e)

        request = self._installer.install(cert, cert_path, on_ready=on_certificate)
        return InstallResult(
            certificate=cert,
            key_path=key_path,
            cert_path=cert_path,
            persisted=persisted,
            request=request,
        )
