"""Ignore-file loading and exclude-pattern matching."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Tuple

from ..utils.logging import DeployLogger

IGNORE_FILE_PLACEHOLDER = "# Add ignore patterns\n"


def load_ignore_list(path: str, logger: Optional[DeployLogger] = None) -> List[str]:
    """
    Read ignore patterns from path, creating the file if it is missing.

    Lines are stripped; blank lines and lines starting with '#' are dropped.
    """
    ignore_file = Path(path)
    if not ignore_file.exists():
        ignore_file.write_text(IGNORE_FILE_PLACEHOLDER, encoding="utf-8")
        if logger:
            logger.warning("Created %s", ignore_file)
    lines = (line.strip() for line in ignore_file.read_text(encoding="utf-8").splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def _glob_to_regex(pattern: str) -> Pattern[str]:
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char in ("/", os.sep):
            parts.append(r"[\\/]")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$")


class ExcludeMatcher:
    """
    Decides whether a path belongs in a transfer.

    A pattern excludes a candidate when the candidate's last segment equals
    it, when the '/'-normalized candidate contains or ends with it, or, for
    patterns with '*', when the anchored glob matches the whole path.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: List[str] = list(patterns)
        self._globs: List[Tuple[str, Optional[Pattern[str]]]] = [
            (pattern, _glob_to_regex(pattern) if "*" in pattern else None)
            for pattern in self.patterns
        ]

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def should_include(self, candidate: str) -> bool:
        normalized = candidate.replace("\\", "/")
        basename = normalized.rstrip("/").rsplit("/", 1)[-1]
        for pattern, glob in self._globs:
            if basename == pattern:
                return False
            if pattern in normalized or normalized.endswith(pattern):
                return False
            if glob is not None and glob.match(normalized):
                return False
        return True

    def excludes(self, candidate: str) -> bool:
        return not self.should_include(candidate)
