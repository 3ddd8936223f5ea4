"""CLI utilities."""

from .config import ConfigManager, RuntimeEnvironment, select_environment
from .validation import validate_request_id, validate_signer_url

__all__ = [
    "ConfigManager",
    "RuntimeEnvironment",
    "select_environment",
    "validate_request_id",
    "validate_signer_url",
]
