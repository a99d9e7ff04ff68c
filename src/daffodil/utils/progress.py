"""Terminal feedback (spinners and progress bars) rendered with rich."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

# stderr keeps captured command output on stdout clean
console = Console(stderr=True)


@contextmanager
def spinner(message: str) -> Iterator[None]:
    with console.status(f"[bold blue]{message}"):
        yield


def archive_progress(total: int) -> Progress:
    """Progress bar for archive entries; use as a context manager."""
    progress = Progress(
        TextColumn("[blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )
    progress.add_task("Archiving", total=total)
    return progress
