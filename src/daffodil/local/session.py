"""Local command execution session."""

from __future__ import annotations

import os
import platform
import subprocess
from dataclasses import dataclass
from typing import Optional


@dataclass
class LocalCommandResult:
    """Result of executing a local command."""
    command: str
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class LocalSession:
    """
    Runs shell commands on this machine and captures their output.

    Uses bash on Unix and the default shell (cmd) on Windows.
    """

    def __init__(self, working_dir: Optional[str] = None) -> None:
        """
        Args:
            working_dir: Working directory for commands. Defaults to the
                process's current directory.
        """
        self.working_dir = working_dir or os.getcwd()
        self.is_windows = platform.system() == "Windows"

    def run(self, command: str, *, timeout: Optional[int] = None) -> LocalCommandResult:
        """Run command and wait for completion."""
        options = {
            "shell": True,
            "capture_output": True,
            "text": True,
            "timeout": timeout,
            "cwd": self.working_dir,
        }
        if not self.is_windows:
            options["executable"] = "/bin/bash"
        try:
            result = subprocess.run(command, **options)
        except subprocess.TimeoutExpired:
            return LocalCommandResult(
                command=command,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                exit_status=-1,
            )
        except OSError as e:
            return LocalCommandResult(
                command=command,
                stdout="",
                stderr=str(e),
                exit_status=-1,
            )

        return LocalCommandResult(
            command=command,
            stdout=result.stdout,
            stderr=result.stderr.strip(),
            exit_status=result.returncode,
        )
