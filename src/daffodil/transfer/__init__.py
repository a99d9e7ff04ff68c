"""Archive-based file transfer over SSH."""

from .archive import ARCHIVE_PREFIX, archive_name, create_archive, is_archive_artifact
from .excludes import ExcludeMatcher, load_ignore_list
from .pipeline import ArchiveTransfer, TransferResult

__all__ = [
    "ARCHIVE_PREFIX",
    "ArchiveTransfer",
    "ExcludeMatcher",
    "TransferResult",
    "archive_name",
    "create_archive",
    "is_archive_artifact",
    "load_ignore_list",
]
