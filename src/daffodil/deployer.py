"""The Daffodil deployer: one remote target, one connection, ordered steps."""

from __future__ import annotations

import dataclasses
import posixpath
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from .config import DEFAULT_IGNORE_FILE, DEFAULT_PORT, DEFAULT_REMOTE_PATH, DeployerConfig
from .local import LocalSession
from .orchestrator import DeploymentReport, StepOrchestrator
from .ssh import ConnectionManager, SSHCommandResult, SSHCredentials, SSHSession
from .ssh.commands import ensure_directory_command
from .transfer import ArchiveTransfer, ExcludeMatcher, TransferResult, load_ignore_list
from .utils.logging import DeployLogger
from .utils.progress import spinner


class Daffodil:
    """
    Deploys to a single host over SSH.

    Example:
        deployer = Daffodil(remote_user="deployer", remote_host="203.0.113.7",
                            remote_path="/srv/app")
        deployer.deploy([
            ("Build", lambda: deployer.run_command("npm run build")),
            ("Upload", lambda: deployer.transfer_files("dist")),
            ("Restart", lambda: deployer.ssh_command("systemctl restart app")),
        ])

    deploy() raises DeploymentError when a step fails and lets
    AuthenticationError through when no key works; the latter is fatal and
    should end the program.
    """

    def __init__(
        self,
        remote_user: str,
        remote_host: str,
        remote_path: str = DEFAULT_REMOTE_PATH,
        port: int = DEFAULT_PORT,
        ignore_file: str = DEFAULT_IGNORE_FILE,
        verbose: bool = False,
        *,
        ssh_dir: Optional[Path] = None,
        session_factory: Callable[[SSHCredentials], SSHSession] = SSHSession,
        local_session: Optional[LocalSession] = None,
    ) -> None:
        self.config = DeployerConfig(
            remote_user=remote_user,
            remote_host=remote_host,
            remote_path=remote_path,
            port=port,
            ignore_file=ignore_file,
            verbose=verbose,
        )
        self.config.validate()
        self.logger = DeployLogger(verbose=verbose)
        self.exclude_list = load_ignore_list(ignore_file, self.logger)
        self.matcher = ExcludeMatcher(self.exclude_list)
        self.session: Optional[SSHSession] = None
        self.local = local_session or LocalSession()
        self._connection_manager = ConnectionManager(
            host=remote_host,
            username=remote_user,
            port=port,
            remote_path=remote_path,
            ssh_dir=ssh_dir,
            session_factory=session_factory,
            logger=self.logger,
        )

    @classmethod
    def from_config(cls, config: DeployerConfig, **kwargs: Any) -> "Daffodil":
        return cls(**dataclasses.asdict(config), **kwargs)

    @property
    def remote_path(self) -> str:
        return self.config.remote_path

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    def set_option(self, *, verbose: Optional[bool] = None) -> None:
        """Change options after construction; verbose is the only one."""
        if verbose is not None:
            self.config = dataclasses.replace(self.config, verbose=bool(verbose))
            self.logger.verbose = self.config.verbose

    def connect(self) -> SSHSession:
        """
        Open the connection, reusing the live one if there is one.

        Raises:
            AuthenticationError: No local key was accepted (fatal)
            RemoteConnectionError: The session broke while preparing the base path
        """
        if self.session is not None and self.session.connected:
            return self.session
        with spinner(f"Connecting to {self.config.remote_host}"):
            with self.logger.timed("Connection"):
                self.session = self._connection_manager.connect()
        return self.session

    def dispose(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def deploy(self, steps: Sequence[Any]) -> DeploymentReport:
        """Connect, run steps in order, stop at the first failure and always disconnect."""
        orchestrator = StepOrchestrator(self.connect, self.dispose, self.logger)
        return orchestrator.run(steps)

    def transfer_files(self, local_path: str, destination_path: Optional[str] = None) -> TransferResult:
        """Ship local_path (file or directory contents) into destination_path."""
        destination = destination_path or self.config.remote_path
        transfer = ArchiveTransfer(self.session, self.matcher, self.logger)
        return transfer.transfer(local_path, destination)

    def run_command(self, cmd: str) -> Optional[str]:
        """Run cmd locally. Returns its stdout, or None if it failed."""
        with self.logger.timed(f"Local command '{cmd}'"):
            result = self.local.run(cmd)
        if not result.ok:
            self.logger.error("Local command failed: %s", result.stderr or f"exit status {result.exit_status}")
            return None
        if result.stdout:
            self.logger.info("%s", result.stdout.rstrip("\n"))
        return result.stdout

    def ssh_command(self, cmd: str) -> Optional[SSHCommandResult]:
        """
        Run cmd on the remote host and log both streams.

        Never raises. A non-zero exit only shows up in the logs and in the
        returned result; None means the command could not be sent at all.
        """
        if self.session is None or not self.session.connected:
            self.logger.error("Remote command skipped, not connected: %s", cmd)
            return None
        try:
            with self.logger.timed(f"Remote command '{cmd}'"):
                result = self.session.run(cmd)
        except Exception as exc:
            self.logger.failure(f"Remote command failed: {cmd}", exc)
            return None
        if result.stdout:
            self.logger.info("%s", result.stdout)
        if result.stderr:
            self.logger.error("%s", result.stderr)
        return result

    def make_directory(self, dir_name: str) -> Optional[SSHCommandResult]:
        full_path = posixpath.join(self.config.remote_path, dir_name)
        self.logger.info("Creating remote directory: %s", full_path)
        return self.ssh_command(ensure_directory_command(full_path))
