"""Configuration for hostcast.

Settings come from a YAML file with environment overrides for the
inventory connection. Command line flags override everything here.

Example ``~/.hostcast/config.yml``::

    inventory_url: https://collins.example.com:9000
    username: blake
    password: admin:first
    transport_command: [func-transmit, --json]
    forks: 25
    timeout: 120
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .types import DEFAULT_FORKS, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".hostcast" / "config.yml"
CONFIG_ENV = "HOSTCAST_CONFIG"

ENV_OVERRIDES = {
    "HOSTCAST_INVENTORY_URL": "inventory_url",
    "HOSTCAST_USERNAME": "username",
    "HOSTCAST_PASSWORD": "password",
}


@dataclass
class Config:
    """hostcast settings.

    Attributes:
        inventory_url: Base URL of the asset API
        username: Basic auth user for the asset API
        password: Basic auth password for the asset API
        inventory_timeout: HTTP timeout for inventory queries, in seconds
        transport_command: argv of the execution backend
        forks: Default fan-out
        timeout: Default command timeout in seconds
        status: Default asset status selected
        size: Default maximum number of assets returned
    """

    inventory_url: str = "http://localhost:9000"
    username: str | None = None
    password: str | None = None
    inventory_timeout: float = 30.0
    transport_command: list[str] = field(default_factory=lambda: ["func-transmit", "--json"])
    forks: int = DEFAULT_FORKS
    timeout: int = DEFAULT_TIMEOUT
    status: str = "allocated"
    size: int = 3000

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        values = {k: v for k, v in data.items() if k in known}
        command = values.get("transport_command")
        if isinstance(command, str):
            values["transport_command"] = command.split()
        return cls(**values)

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username is None:
            return None
        return (self.username, self.password or "")

    @property
    def selector_defaults(self) -> dict[str, Any]:
        return {"status": self.status, "size": self.size}


def get_config_path(path: str | Path | None = None) -> Path:
    """Pick the config file: explicit path, then $HOSTCAST_CONFIG, then default."""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> Config:
    """Load settings from disk and apply environment overrides.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping
    """
    config_path = get_config_path(path)
    data: dict[str, Any] = {}

    if config_path.exists():
        try:
            with config_path.open() as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        data.update(loaded)
        logger.debug(f"Loaded config from {config_path}")
    else:
        logger.debug(f"Config not found: {config_path}")

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None:
            data[key] = value

    return Config.from_dict(data)
