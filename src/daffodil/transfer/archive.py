"""Build the gzip-compressed tar archive that carries one transfer."""

from __future__ import annotations

import os
import tarfile
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .excludes import ExcludeMatcher

ARCHIVE_PREFIX = "daffodil_deploy"
ARCHIVE_SUFFIX = ".tar.gz"


def archive_name(directory: Path, prefix: str = ARCHIVE_PREFIX) -> str:
    """Return '<prefix>_<ms timestamp>.tar.gz', unused in directory."""
    stamp = int(time.time() * 1000)
    while (directory / f"{prefix}_{stamp}{ARCHIVE_SUFFIX}").exists():
        stamp += 1
    return f"{prefix}_{stamp}{ARCHIVE_SUFFIX}"


def is_archive_artifact(name: str, prefix: str = ARCHIVE_PREFIX) -> bool:
    return name.startswith(prefix + "_") and name.endswith(ARCHIVE_SUFFIX)


def archive_entries(source: Path) -> Tuple[Path, List[str]]:
    """
    Return (base directory, top-level entry names) for source.

    A directory contributes its direct children, so the directory itself is
    not nested in the archive. A file is the single entry.
    """
    if source.is_dir():
        return source, sorted(os.listdir(source))
    return source.parent, [source.name]


def create_archive(
    archive_path: Path,
    source: Path,
    matcher: Optional[ExcludeMatcher] = None,
    on_entry: Optional[Callable[[str], None]] = None,
) -> int:
    """
    Write source into archive_path and return the number of members added.

    When matcher is given every member, nested ones included, is checked
    against it by its path inside the archive; excluded directories are
    skipped together with their contents.
    """
    base, names = archive_entries(source)
    added = 0

    def _filter(info: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
        nonlocal added
        if matcher is not None and not matcher.should_include(info.name):
            return None
        added += 1
        return info

    with tarfile.open(archive_path, "w:gz") as tar:
        for name in names:
            tar.add(str(base / name), arcname=name, filter=_filter)
            if on_entry:
                on_entry(name)
    return added
