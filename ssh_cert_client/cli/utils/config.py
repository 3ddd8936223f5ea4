"""Requester configuration and process environment for the CLI."""

import json
import os
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ssh_cert_client.client.exceptions import ConfigError
from ssh_cert_client.client.types import RequesterConfig

from .validation import validate_signer_url


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Process-level inputs, read once at startup and passed down explicitly."""

    home: Path
    auth_sock: Optional[str]

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeEnvironment":
        environ = os.environ if environ is None else environ
        return cls(
            home=Path(environ.get("HOME") or "/"),
            auth_sock=environ.get("SSH_AUTH_SOCK") or None,
        )

    @property
    def ssh_dir(self) -> Path:
        return self.home / ".ssh"

    @property
    def config_dir(self) -> Path:
        return self.home / ConfigManager.DIR_NAME


def select_environment(names: Collection[str], requested: Optional[str]) -> str:
    """Pick the environment to use.

    An explicit request must name a configured environment. Without one,
    exactly one environment must be configured.
    """
    if requested:
        if requested not in names:
            raise ConfigError("Requested environment not found in config file")
        return requested
    if len(names) > 1:
        raise ConfigError(
            f"You must tell me which environment to use. ({len(names)} configured)"
        )
    if not names:
        raise ConfigError("No environments configured")
    (only,) = names
    return only


class ConfigManager:
    """Reads environments from ~/.ssh_ca/requester_config.json."""

    DIR_NAME = ".ssh_ca"
    DEFAULT_DIR = Path.home() / DIR_NAME
    CONFIG_FILE = "requester_config.json"

    def __init__(self, config_dir: Optional[Path] = None, home: Optional[Path] = None) -> None:
        self._config_path = (config_dir or self.DEFAULT_DIR) / self.CONFIG_FILE
        self._home = home

    @property
    def config_path(self) -> Path:
        return self._config_path

    def exists(self) -> bool:
        return self._config_path.exists()

    def _expand(self, path: str) -> Path:
        if self._home is not None and path.startswith("~/"):
            return self._home / path[2:]
        return Path(path)

    def load(self) -> dict[str, RequesterConfig]:
        """Load every environment. Raises ConfigError if missing or invalid."""
        if not self.exists():
            raise ConfigError(f"Config not found at {self._config_path}")
        try:
            with open(self._config_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Load Config failed: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("Invalid config: expected an object keyed by environment")

        configs: dict[str, RequesterConfig] = {}
        for environment, entry in data.items():
            if not isinstance(entry, dict) or not entry.get("signer_url"):
                raise ConfigError(
                    f"Invalid config for environment '{environment}': missing signer_url"
                )
            public_key_path = entry.get("public_key_path")
            configs[environment] = RequesterConfig(
                environment=environment,
                signer_url=entry["signer_url"],
                public_key_path=self._expand(public_key_path) if public_key_path else None,
            )
        return configs

    def resolve(self, environment: Optional[str] = None) -> RequesterConfig:
        """Load the config and return the selected environment."""
        configs = self.load()
        config = configs[select_environment(configs.keys(), environment)]
        try:
            validate_signer_url(config.signer_url)
        except ValueError as e:
            raise ConfigError(f"Invalid config for environment '{config.environment}': {e}") from e
        return config
