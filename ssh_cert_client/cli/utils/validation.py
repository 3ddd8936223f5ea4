"""Input validation utilities for CLI commands."""

from urllib.parse import urlparse


def validate_request_id(request_id: str) -> str:
    """Validate and return a certificate request ID. Raises ValueError if invalid."""
    if not request_id or not request_id.strip():
        raise ValueError("Certificate request ID cannot be empty")
    request_id = request_id.strip()
    if "/" in request_id:
        raise ValueError("Certificate request ID cannot contain '/'")
    return request_id


def validate_signer_url(signer_url: str) -> str:
    """Validate and return a signer base URL. Raises ValueError if invalid."""
    if not signer_url or not signer_url.strip():
        raise ValueError("Signer URL cannot be empty")
    parsed = urlparse(signer_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Signer URL must be an http:// or https:// URL")
    return signer_url
