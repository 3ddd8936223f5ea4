"""Local public key store and certificate-to-key matching."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Protocol

from ._constants import PUBLIC_KEY_SUFFIX
from .certificate import BareKey, CertificateRecord, Malformed, parse_identity, ssh_wire_blob
from .exceptions import KeyNotFoundError, KeyStoreError
from .types import LocalKeyEntry

logger = logging.getLogger(__name__)


class KeyStore(Protocol):
    """Read-only view of a directory of ``*.pub`` files."""

    def entries(self) -> Iterable[str]: ...

    def read(self, name: str) -> bytes: ...

    def path(self, name: str) -> Path: ...


class DirectoryKeyStore:
    """Key store backed by a directory, normally ``~/.ssh``."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def entries(self) -> list[str]:
        try:
            names = os.listdir(self._directory)
        except OSError as e:
            raise KeyStoreError(
                f"Could not read your .ssh directory {self._directory}: {e}"
            ) from e
        return [n for n in names if n.endswith(PUBLIC_KEY_SUFFIX)]

    def read(self, name: str) -> bytes:
        return self.path(name).read_bytes()

    def path(self, name: str) -> Path:
        return self._directory / name


def iter_local_keys(store: KeyStore) -> Iterator[LocalKeyEntry]:
    """Yield every public key in the store, in store order.

    Only the first record of each file is used. Any unreadable or
    unparsable entry aborts the scan with KeyStoreError.
    Certificates found in the store are yielded with their certificate
    encoding, so they never match a bare key.
    """
    for name in store.entries():
        path = store.path(name)
        try:
            raw = store.read(name)
        except OSError as e:
            raise KeyStoreError(f"Trouble reading public key {path}: {e}") from e
        match parse_identity(raw, first_only=True):
            case CertificateRecord(certificate=identity) | BareKey(key=identity):
                yield LocalKeyEntry(path=path, raw=raw, blob=ssh_wire_blob(identity))
            case Malformed(reason=reason):
                raise KeyStoreError(f"Trouble parsing public key {path}: {reason}")


def find_matching_key_path(store: KeyStore, target_blob: bytes) -> Path:
    """Return the path of the local key whose wire encoding equals ``target_blob``.

    Raises:
        KeyNotFoundError: If no entry matches.
        KeyStoreError: If the store or any entry cannot be read or parsed.
    """
    for entry in iter_local_keys(store):
        if entry.blob == target_blob:
            logger.debug("Matched certificate key to %s", entry.path)
            return entry.path
    raise KeyNotFoundError("Couldn't find ssh key for cert.")
