"""Configuration loading utilities for Daffodil."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

from dotenv import load_dotenv

DEFAULT_REMOTE_PATH = "."
DEFAULT_PORT = 22
DEFAULT_IGNORE_FILE = ".scpignore"

# Environment variables read by load_config
ENV_REMOTE_USER = "REMOTE_USER"
ENV_REMOTE_HOST = "REMOTE_HOST"
ENV_REMOTE_PATH = "REMOTE_PATH"
ENV_REMOTE_PORT = "REMOTE_PORT"
ENV_IGNORE_FILE = "DAFFODIL_IGNORE_FILE"
ENV_VERBOSE = "DAFFODIL_VERBOSE"


def str_to_bool(value: str) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class DeployerConfig:
    """Per-deployer session settings. Only verbose may change later, via replace()."""

    remote_user: str
    remote_host: str
    remote_path: str = DEFAULT_REMOTE_PATH
    port: int = DEFAULT_PORT
    ignore_file: str = DEFAULT_IGNORE_FILE
    verbose: bool = False

    def validate(self) -> None:
        if not self.remote_user:
            raise ValueError("remote_user is required")
        if not self.remote_host:
            raise ValueError("remote_host is required")
        if not 0 < int(self.port) < 65536:
            raise ValueError(f"Invalid SSH port: {self.port}")

    @property
    def target(self) -> str:
        return f"{self.remote_user}@{self.remote_host}:{self.port}"


def load_config(env_file: Optional[str] = None, **overrides: Any) -> DeployerConfig:
    """Build a DeployerConfig from the environment (and .env), then apply overrides.

    Environment variables (lower priority than explicit overrides):
    - REMOTE_USER, REMOTE_HOST: required unless passed as overrides
    - REMOTE_PATH: remote base directory (default ".")
    - REMOTE_PORT: SSH port (default 22)
    - DAFFODIL_IGNORE_FILE: ignore file path (default ".scpignore")
    - DAFFODIL_VERBOSE: "true"/"1"/"yes"/"on" enables verbose output
    """

    load_dotenv(env_file)

    values = {
        "remote_user": os.getenv(ENV_REMOTE_USER),
        "remote_host": os.getenv(ENV_REMOTE_HOST),
        "remote_path": os.getenv(ENV_REMOTE_PATH, DEFAULT_REMOTE_PATH),
        "port": os.getenv(ENV_REMOTE_PORT, str(DEFAULT_PORT)),
        "ignore_file": os.getenv(ENV_IGNORE_FILE, DEFAULT_IGNORE_FILE),
        "verbose": os.getenv(ENV_VERBOSE, "false"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        port = int(values["port"])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid SSH port: {values['port']}") from None

    config = DeployerConfig(
        remote_user=values["remote_user"] or "",
        remote_host=values["remote_host"] or "",
        remote_path=values["remote_path"],
        port=port,
        ignore_file=values["ignore_file"],
        verbose=str_to_bool(values["verbose"]),
    )
    config.validate()
    return config
