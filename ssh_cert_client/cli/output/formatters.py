"""Rich terminal output formatters.

Messages and values may come from the signer or from the certificate
itself, so they are escaped before being embedded in markup.
"""

from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.markup import escape

from ssh_cert_client.client.certificate import fingerprint
from ssh_cert_client.client.types import Certificate

# OpenSSH encodes "no expiry" as the maximum uint64.
_FOREVER = 2**64 - 1


def format_success(console: Console, message: str) -> None:
    """Display success message in green."""
    console.print(f"[green]{escape(message)}[/green]")


def format_error(console: Console, message: str, hint: str | None = None) -> None:
    """Display error message in red with optional hint."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    if hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(hint)}")


def format_warning(console: Console, message: str) -> None:
    """Display warning message in yellow."""
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def format_key_value(console: Console, data: dict[str, Any]) -> None:
    """Display key-value pairs."""
    max_key_len = max(len(k) for k in data.keys()) if data else 0
    for key, value in data.items():
        console.print(
            f"[cyan]{escape(key.ljust(max_key_len))}[/cyan]: {escape(str(value))}",
            highlight=False,
        )


def format_timestamp(value: int) -> str:
    if value == 0:
        return "always"
    if value >= _FOREVER:
        return "forever"
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, ValueError, OSError):
        # Beyond year 9999.
        return str(value)


def _mapping(values: dict[str, str]) -> str:
    if not values:
        return "(none)"
    return ", ".join(f"{k}={v}" if v else k for k, v in sorted(values.items()))


def certificate_details(cert: Certificate) -> dict[str, Any]:
    """Inspection fields of a certificate, in display order."""
    return {
        "Type": f"{cert.cert_type.value} certificate",
        "Public key": fingerprint(cert.public_key_blob),
        "Signing CA": fingerprint(cert.signature_key_blob),
        "Key ID": cert.key_id,
        "Serial": cert.serial,
        "Valid from": format_timestamp(cert.valid_after),
        "Valid to": format_timestamp(cert.valid_before),
        "Principals": ", ".join(cert.principals) or "(none)",
        "Critical options": _mapping(cert.critical_options),
        "Extensions": _mapping(cert.extensions),
    }


def format_certificate(console: Console, cert: Certificate) -> None:
    """Print a certificate for the user to inspect before it is installed."""
    console.print("[bold]Certificate[/bold]")
    format_key_value(console, certificate_details(cert))
