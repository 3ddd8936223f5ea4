"""Fetch a signed certificate and load the matching key into ssh-agent."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ssh_cert_client.cli.output import (
    certificate_details,
    format_certificate,
    format_error,
    format_success,
    format_warning,
    json_output,
)
from ssh_cert_client.cli.utils import ConfigManager, RuntimeEnvironment, validate_request_id
from ssh_cert_client.client import (
    AgentInstaller,
    CertClient,
    Certificate,
    CertClientError,
    ConfigError,
    DirectoryKeyStore,
    InstallResult,
    NetworkError,
    SignerTransport,
)

console = Console()

USAGE = "Usage: get_cert [--environment env] cert-request-id"


def _fail(message: str, json_flag: bool, hint: str | None = None) -> NoReturn:
    if json_flag:
        json_output(console, {"status": "error", "error": message})
    else:
        format_error(console, message, hint=hint)
    raise typer.Exit(code=1)


def _build_client(
    manager: ConfigManager, environment: Optional[str], env: RuntimeEnvironment
) -> CertClient:
    config = manager.resolve(environment)
    return CertClient(
        config=config,
        key_store=DirectoryKeyStore(env.ssh_dir),
        installer=AgentInstaller(env.auth_sock),
        transport=SignerTransport(),
    )


def _report(result: InstallResult, json_flag: bool) -> None:
    if json_flag:
        json_output(
            console,
            {
                "status": "installed",
                "key_path": result.key_path,
                "cert_path": result.cert_path,
                "persisted": result.persisted,
                "private_key_path": result.request.private_key_path,
                "ttl": result.request.ttl,
                "certificate": certificate_details(result.certificate),
            },
        )
        return
    format_success(
        console,
        f"Added {result.request.private_key_path} to ssh-agent "
        f"for {result.request.ttl} seconds",
    )
    if result.persisted:
        console.print(f"[cyan]Certificate:[/cyan] {escape(str(result.cert_path))}")


def get_command(
    request_id: Optional[str],
    environment: Optional[str] = None,
    json_flag: bool = False,
    env: Optional[RuntimeEnvironment] = None,
) -> None:
    """Fetch certificate ``request_id`` from the signer and install it."""
    if not request_id:
        console.print(escape(USAGE))
        raise typer.Exit(code=1)
    try:
        request_id = validate_request_id(request_id)
    except ValueError as e:
        _fail(str(e), json_flag)

    env = env or RuntimeEnvironment.from_environ()

    def on_persist_error(path: Path, err: OSError) -> None:
        if not json_flag:
            format_warning(console, f"Couldn't write certificate file to {path}: {err}")

    def on_certificate(cert: Certificate) -> None:
        if not json_flag:
            format_certificate(console, cert)

    manager = ConfigManager(env.config_dir, home=env.home)
    try:
        client = _build_client(manager, environment, env)
        result = client.get_cert(
            request_id,
            on_persist_error=on_persist_error,
            on_certificate=on_certificate,
        )
    except ConfigError as e:
        _fail(
            str(e),
            json_flag,
            hint=f"Check {manager.config_path} or pass --environment",
        )
    except NetworkError as e:
        if e.status_code is not None:
            _fail(f"Error getting that request id: {e}", json_flag)
        _fail(str(e), json_flag)
    except CertClientError as e:
        _fail(str(e), json_flag)
    except Exception as e:
        _fail(f"Failed to get certificate: {e}", json_flag)

    _report(result, json_flag)
