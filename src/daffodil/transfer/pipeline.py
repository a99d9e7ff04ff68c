"""
Archive-based transfer: validate -> archive -> ship -> extract -> clean up.

The archive is always removed from both machines before transfer() returns,
whether it succeeded or not. Failures come out as PathNotFoundError or
TransferError and nothing else.
"""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..errors import PathNotFoundError, TransferError
from ..ssh.commands import ensure_directory_command, extract_archive_command, remove_file_command
from ..ssh.session import SSHSession
from ..utils.logging import DeployLogger, describe_error
from ..utils.progress import archive_progress, spinner
from .archive import archive_entries, archive_name, create_archive
from .excludes import ExcludeMatcher

_MISSING_PATH_RE = re.compile(r"No such file or directory:?\s*'([^']+)'")


@dataclass
class TransferResult:
    """What a successful transfer moved."""

    local_path: str
    destination: str
    archive_name: str
    entries: int
    filtered: bool


def _missing_path(error: FileNotFoundError, fallback: str) -> str:
    if error.filename:
        return os.fsdecode(error.filename)
    match = _MISSING_PATH_RE.search(str(error))
    return match.group(1) if match else fallback


class ArchiveTransfer:
    """Ships a local file or directory tree through one open SSH session."""

    def __init__(
        self,
        session: Optional[SSHSession],
        matcher: ExcludeMatcher,
        logger: Optional[DeployLogger] = None,
        workdir: Optional[Path] = None,
    ) -> None:
        self.session = session
        self.matcher = matcher
        self.logger = logger or DeployLogger()
        self.workdir = workdir

    def transfer(self, local_path: str, destination: str) -> TransferResult:
        """
        Copy local_path into the remote destination directory.

        Raises:
            PathNotFoundError: local_path is missing, not a file or directory,
                or something under it vanished while archiving
            TransferError: any other archive, upload or extraction failure
        """
        source = self._validate(local_path)
        if self.session is None or not self.session.connected:
            raise TransferError("No active SSH connection; call connect() first")

        workdir = self.workdir or Path.cwd()
        name = archive_name(workdir)
        local_archive = workdir / name
        remote_archive = posixpath.join(destination, name)

        self.logger.info("Transferring %s to %s", local_path, destination)
        phase = "archive"
        completed = False
        try:
            with self.logger.timed("Transfer"):
                entries, filtered = self._build_archive(local_archive, source)
                phase = "ship"
                with spinner(f"Uploading {name}"):
                    self._ship(local_archive, destination, remote_archive)
                phase = "extract"
                with spinner(f"Extracting into {destination}"):
                    self._extract(destination, remote_archive)
            local_archive.unlink(missing_ok=True)
            completed = True
        except (PathNotFoundError, TransferError):
            raise
        except FileNotFoundError as exc:
            if phase != "archive":
                raise TransferError(f"Transfer failed during {phase}", exc) from exc
            raise PathNotFoundError(_missing_path(exc, local_path)) from exc
        except Exception as exc:
            raise TransferError(f"Transfer failed during {phase}", exc) from exc
        finally:
            if not completed:
                self._discard(local_archive, remote_archive if phase != "archive" else None)

        self.logger.success("Transfer complete (%d entries)", entries)
        return TransferResult(
            local_path=local_path,
            destination=destination,
            archive_name=name,
            entries=entries,
            filtered=filtered,
        )

    def _validate(self, local_path: str) -> Path:
        kind = "directory" if local_path.endswith(("/", os.sep)) else "file or directory"
        path = Path(local_path)
        if not path.exists():
            raise PathNotFoundError(local_path, kind)
        if not (path.is_file() or path.is_dir()):
            raise PathNotFoundError(local_path, kind)
        return path

    def _build_archive(self, archive_path: Path, source: Path) -> Tuple[int, bool]:
        matcher = self.matcher if self.matcher else None
        try:
            return self._write_archive(archive_path, source, matcher), matcher is not None
        except Exception as exc:
            if matcher is None:
                raise
            # Fall back to an unfiltered archive; excluded files get shipped.
            self.logger.warning(
                "Archiving with exclude patterns failed (%s); retrying without them",
                describe_error(exc),
            )
            return self._write_archive(archive_path, source, None), False

    def _write_archive(
        self, archive_path: Path, source: Path, matcher: Optional[ExcludeMatcher]
    ) -> int:
        _, names = archive_entries(source)
        with archive_progress(len(names)) as progress:
            task = progress.task_ids[0]
            return create_archive(
                archive_path,
                source,
                matcher,
                on_entry=lambda _name: progress.advance(task),
            )

    def _ship(self, local_archive: Path, destination: str, remote_archive: str) -> None:
        assert self.session is not None
        self.session.run(ensure_directory_command(destination))
        try:
            self.session.run(remove_file_command(remote_archive))
        except Exception as exc:
            self.logger.debug("Ignoring failure to clear %s: %s", remote_archive, exc)
        self.session.put_file(str(local_archive), remote_archive)

    def _extract(self, destination: str, remote_archive: str) -> None:
        assert self.session is not None
        command = extract_archive_command(destination, posixpath.basename(remote_archive))
        result = self.session.run(command)
        if not result.ok:
            raise TransferError(
                f"Remote extraction failed with exit status {result.exit_status}\n{result.output}"
            )

    def _discard(self, local_archive: Path, remote_archive: Optional[str]) -> None:
        try:
            local_archive.unlink(missing_ok=True)
        except OSError as exc:
            self.logger.debug("Could not remove %s: %s", local_archive, exc)
        if remote_archive is None or self.session is None:
            return
        try:
            self.session.run(remove_file_command(remote_archive))
        except Exception as exc:
            self.logger.debug("Could not remove remote %s: %s", remote_archive, exc)
