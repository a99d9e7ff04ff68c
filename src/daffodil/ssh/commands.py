"""Shell command builders for the remote side."""

from __future__ import annotations

import shlex


def quote_path(path: str) -> str:
    """Quote a remote path for the shell, leaving a leading ~/ expandable."""
    if path == "~":
        return path
    if path.startswith("~/"):
        return "~/" + shlex.quote(path[2:])
    return shlex.quote(path)


def ensure_directory_command(path: str) -> str:
    return f"mkdir -p {quote_path(path)}"


def remove_file_command(path: str) -> str:
    return f"rm -f {quote_path(path)}"


def extract_archive_command(destination: str, archive_name: str) -> str:
    """
    Create destination, unpack archive_name inside it, then delete the archive.

    archive_name is a bare file name inside destination; after the cd it must
    not be joined with destination again.
    """
    dest = quote_path(destination)
    archive = shlex.quote(archive_name)
    return f"mkdir -p {dest} && cd {dest} && tar -xzf {archive} && rm -f {archive}"
