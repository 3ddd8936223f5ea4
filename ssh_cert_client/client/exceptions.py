"""Exception types for the SSH certificate client."""


class CertClientError(Exception):
    """Base exception for all certificate client errors."""
    pass


class ConfigError(CertClientError):
    """Requester configuration could not be loaded or no environment selected."""
    pass


class NetworkError(CertClientError):
    """Signer request failed or returned a non-200 status."""
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(CertClientError):
    """Fetched bytes are not a single well-formed SSH certificate."""
    pass


class KeyStoreError(CertClientError):
    """A local public key file could not be listed, read, or parsed."""
    pass


class KeyNotFoundError(KeyStoreError):
    """No local public key matches the certificate's key."""
    pass


class ExpiredCertificateError(CertClientError):
    """Certificate validity ended before it could be installed."""
    pass


class AgentConnectError(CertClientError):
    """Could not connect to the ssh-agent socket."""
    pass


class InstallError(CertClientError):
    """ssh-add failed to load the private key."""
    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
