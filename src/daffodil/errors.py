"""
Deployment exceptions.

Every failure a caller can see is a DaffodilError subclass. Each one can
render itself tersely (a single sentence) or with full diagnostic detail,
so the verbose/non-verbose decision is made once, in describe().
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import List, Optional


class DaffodilError(Exception):
    """Base class for all errors raised by daffodil."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def describe(self, verbose: bool = False) -> str:
        if not verbose or self.cause is None:
            return self.message
        lines = [self.message, f"Caused by {type(self.cause).__name__}: {self.cause}"]
        code = getattr(self.cause, "errno", None)
        if code is not None:
            lines.append(f"Code: {code}")
        trace = "".join(
            traceback.format_exception(type(self.cause), self.cause, self.cause.__traceback__)
        )
        lines.append(trace.rstrip())
        return "\n".join(lines)


class PathNotFoundError(DaffodilError):
    """
    Raised when a local path handed to a transfer is missing or unusable.

    Attributes:
        path: The offending path, exactly as the caller passed it
        kind: "directory" when the path looked like one (trailing separator),
              otherwise "file or directory"
    """

    def __init__(self, path: str, kind: str = "file or directory") -> None:
        super().__init__(f"Local {kind} not found: {path}")
        self.path = path
        self.kind = kind


class TransferError(DaffodilError):
    """Raised when archiving, shipping or extracting fails for any other reason."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        if cause is not None and str(cause):
            message = f"{message}: {cause}"
        super().__init__(message, cause)


class RemoteConnectionError(DaffodilError):
    """Raised when an authenticated session breaks before it can be used."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        if cause is not None and str(cause):
            message = f"{message}: {cause}"
        super().__init__(message, cause)


class DeploymentError(DaffodilError):
    """
    Raised by deploy() when a step fails.

    In verbose mode the message names the failing step and the underlying
    error. Otherwise the message is fixed and describe() never includes the
    cause, whatever the caller asks for.
    """

    TERSE_MESSAGE = "Deployment failed. Enable verbose mode for details."

    def __init__(self, step: str, cause: BaseException, verbose: bool = False) -> None:
        if verbose:
            message = f"Step '{step}' failed: {cause}"
        else:
            message = self.TERSE_MESSAGE
        super().__init__(message, cause)
        self.step = step
        self.suppress_detail = not verbose

    def describe(self, verbose: bool = False) -> str:
        if self.suppress_detail:
            return self.message
        return super().describe(verbose)


@dataclass
class KeyFailure:
    """One key file that was tried and rejected."""

    key: str
    error: str


class AuthenticationError(DaffodilError):
    """
    Raised when none of the local SSH keys could open a session.

    This is fatal: without a session nothing else can run. The CLI exits
    with status 1 on it and library callers are expected to stop as well.
    """

    fatal = True

    def __init__(self, host: str, failures: List[KeyFailure]) -> None:
        if failures:
            message = f"Connection to {host} failed: no valid SSH keys worked."
        else:
            message = f"Connection to {host} failed: no SSH keys found."
        super().__init__(message)
        self.host = host
        self.failures = list(failures)

    def describe(self, verbose: bool = False) -> str:
        if not verbose:
            return (
                f"{self.message} Check that your public key is in "
                f"~/.ssh/authorized_keys on {self.host}."
            )
        lines = [self.message, "Tried the following keys:"]
        lines.extend(f"- {failure.key}: {failure.error}" for failure in self.failures)
        return "\n".join(lines)
