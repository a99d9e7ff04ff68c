"""SSH credential helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

# Probe order: RSA, Ed25519, ECDSA, DSA
DEFAULT_KEY_FILES: Tuple[str, ...] = ("id_rsa", "id_ed25519", "id_ecdsa", "id_dsa")


@dataclass
class SSHCredentials:
    """Key-based credential payload for a single connection attempt."""

    host: str
    username: str
    port: int = 22
    key_path: Optional[str] = None
    passphrase: Optional[str] = None
    timeout: int = 20

    def validate(self) -> None:
        if not self.key_path:
            raise ValueError("Key authentication selected but no key_path provided")


def default_ssh_dir() -> Path:
    return Path.home() / ".ssh"


def discover_key_files(
    ssh_dir: Optional[Path] = None, names: Tuple[str, ...] = DEFAULT_KEY_FILES
) -> List[Path]:
    """Return the conventional key files that exist, in probe order."""
    directory = Path(ssh_dir) if ssh_dir else default_ssh_dir()
    return [directory / name for name in names if (directory / name).is_file()]
