"""SSH utilities for Daffodil."""

from .connector import ConnectionManager
from .credentials import DEFAULT_KEY_FILES, SSHCredentials, discover_key_files
from .session import SSHCommandResult, SSHConnectionError, SSHSession

__all__ = [
    "ConnectionManager",
    "DEFAULT_KEY_FILES",
    "SSHCredentials",
    "SSHCommandResult",
    "SSHConnectionError",
    "SSHSession",
    "discover_key_files",
]
