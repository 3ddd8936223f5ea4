"""Write fetched certificates next to the matching public key."""

import logging
from pathlib import Path

from ._constants import CERT_SUFFIX, PUBLIC_KEY_SUFFIX

logger = logging.getLogger(__name__)

CERT_FILE_MODE = 0o644


def cert_path_for(public_key_path: Path) -> Path:
    """Derive the certificate path from a public key path.

    The first ``.pub`` in the path becomes ``-cert.pub``, so
    ``~/.ssh/id_ed25519.pub`` maps to ``~/.ssh/id_ed25519-cert.pub``.
    """
    return Path(str(public_key_path).replace(PUBLIC_KEY_SUFFIX, CERT_SUFFIX, 1))


def private_key_path_for(cert_path: Path) -> Path:
    """Inverse of cert_path_for minus the ``.pub``: the private key path."""
    return Path(str(cert_path).replace(CERT_SUFFIX, "", 1))


def persist_certificate(raw: bytes, public_key_path: Path) -> Path:
    """Write certificate bytes beside the public key and return the path.

    Raises:
        OSError: If the file cannot be written. Callers treat this as
            non-fatal.
    """
    cert_path = cert_path_for(public_key_path)
    with open(cert_path, "wb") as f:
        f.write(raw)
    cert_path.chmod(CERT_FILE_MODE)
    logger.info("Wrote certificate to %s", cert_path)
    return cert_path
