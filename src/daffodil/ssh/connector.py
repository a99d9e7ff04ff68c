"""Open a session with the first local SSH key the server accepts."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from ..errors import AuthenticationError, KeyFailure, RemoteConnectionError
from ..utils.logging import DeployLogger
from .commands import ensure_directory_command
from .credentials import SSHCredentials, discover_key_files
from .session import SSHConnectionError, SSHSession


class ConnectionManager:
    """
    Tries each conventional key file against one host until one works.

    The key files are probed in a fixed order (id_rsa, id_ed25519, id_ecdsa,
    id_dsa) and only the ones present on disk are attempted. The first
    session that authenticates is returned after making sure the remote
    base directory exists.
    """

    def __init__(
        self,
        host: str,
        username: str,
        port: int = 22,
        remote_path: str = ".",
        *,
        ssh_dir: Optional[Path] = None,
        session_factory: Callable[[SSHCredentials], SSHSession] = SSHSession,
        logger: Optional[DeployLogger] = None,
    ) -> None:
        self.host = host
        self.username = username
        self.port = port
        self.remote_path = remote_path
        self.ssh_dir = ssh_dir
        self._session_factory = session_factory
        self.logger = logger or DeployLogger()

    def connect(self) -> SSHSession:
        """
        Returns:
            A connected SSHSession

        Raises:
            AuthenticationError: If no key file exists or every key was rejected
            RemoteConnectionError: If the session broke while preparing the base path
        """
        failures: List[KeyFailure] = []
        for key_path in discover_key_files(self.ssh_dir):
            credentials = SSHCredentials(
                host=self.host,
                username=self.username,
                port=self.port,
                key_path=str(key_path),
            )
            session = self._session_factory(credentials)
            try:
                session.connect()
            except SSHConnectionError as exc:
                self.logger.debug("Key %s rejected by %s: %s", key_path.name, self.host, exc)
                failures.append(KeyFailure(key=key_path.name, error=str(exc)))
                continue

            self.logger.success("SSH connected using key: %s", key_path.name)
            try:
                self._ensure_remote_path(session)
            except Exception as exc:
                session.close()
                raise RemoteConnectionError(
                    f"Connected to {self.host} but could not prepare {self.remote_path}", exc
                ) from exc
            return session

        raise AuthenticationError(self.host, failures)

    def _ensure_remote_path(self, session: SSHSession) -> None:
        result = session.run(ensure_directory_command(self.remote_path))
        if not result.ok:
            self.logger.warning(
                "Could not create remote directory %s: %s", self.remote_path, result.output
            )
