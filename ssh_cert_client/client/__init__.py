"""SSH certificate client library."""

from ._constants import VERSION
from .agent import AgentClient, AgentInstaller, remaining_ttl
from .certificate import BareKey, CertificateRecord, Malformed, fingerprint, parse_certificate, parse_identity, ssh_wire_blob
from .client import CertClient
from .exceptions import AgentConnectError, CertClientError, ConfigError, ExpiredCertificateError, InstallError, KeyNotFoundError, KeyStoreError, NetworkError, ParseError
from .keystore import DirectoryKeyStore, KeyStore, find_matching_key_path
from .persist import cert_path_for, persist_certificate, private_key_path_for
from .transport import SignerTransport
from .types import Certificate, CertType, InstallationRequest, InstallResult, LocalKeyEntry, RequesterConfig

__all__ = [
    "VERSION",
    "CertClient", "SignerTransport", "AgentClient", "AgentInstaller", "remaining_ttl",
    "parse_certificate", "parse_identity", "ssh_wire_blob", "fingerprint",
    "CertificateRecord", "BareKey", "Malformed",
    "KeyStore", "DirectoryKeyStore", "find_matching_key_path",
    "cert_path_for", "private_key_path_for", "persist_certificate",
    "Certificate", "CertType", "InstallationRequest", "InstallResult", "LocalKeyEntry", "RequesterConfig",
    "CertClientError", "ConfigError", "NetworkError", "ParseError", "KeyStoreError", "KeyNotFoundError",
    "ExpiredCertificateError", "AgentConnectError", "InstallError",
]

__version__ = VERSION
