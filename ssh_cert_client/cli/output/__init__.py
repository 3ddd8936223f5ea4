"""Output formatting utilities."""

from .formatters import (
    certificate_details,
    format_certificate,
    format_error,
    format_key_value,
    format_success,
    format_warning,
)
from .json_output import json_output

__all__ = [
    "certificate_details",
    "format_certificate",
    "format_error",
    "format_key_value",
    "format_success",
    "format_warning",
    "json_output",
]
