"""Logging helpers."""

from __future__ import annotations

import logging
import socket
import time
import traceback
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import paramiko

from ..errors import AuthenticationError, DaffodilError, PathNotFoundError

_LOGGING_CONFIGURED = False

PACKAGE_LOGGER = "daffodil"
TERSE_FORMAT = "%(message)s"
# Prepended per record by verbose DeployLogger instances
VERBOSE_PREFIX = "[%s] %s %s - "
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(level=logging.INFO, format=TERSE_FORMAT)
        # DeployLogger filters debug records per instance
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)
        _LOGGING_CONFIGURED = True
    return logging.getLogger(name)


def describe_error(error: BaseException) -> str:
    """Return one human-readable sentence for the common failure categories."""
    if isinstance(error, DaffodilError) and not isinstance(error, PathNotFoundError):
        if isinstance(error, AuthenticationError):
            return error.describe(verbose=False)
        if error.cause is not None:
            return describe_error(error.cause)
        return error.message
    if isinstance(error, (paramiko.AuthenticationException, paramiko.BadAuthenticationType)):
        return "Authentication failed. Check your SSH key and username."
    if isinstance(error, (ConnectionRefusedError, paramiko.ssh_exception.NoValidConnectionsError)):
        return "Connection refused. Check that the SSH server is running and the port is correct."
    if isinstance(error, (socket.timeout, TimeoutError)):
        return "Connection timed out. Check the host address and your network."
    if isinstance(error, socket.gaierror):
        return "Host not found. Check the hostname or IP address."
    if isinstance(error, PathNotFoundError):
        return f"File not found: {error.path}"
    if isinstance(error, FileNotFoundError):
        return f"File not found: {error.filename or error}"
    if isinstance(error, PermissionError):
        return f"Permission denied: {error.filename or error}"
    # transport wrappers such as SSHConnectionError chain the real error
    if isinstance(error, RuntimeError) and error.__cause__ is not None:
        return describe_error(error.__cause__)
    return str(error) or type(error).__name__


def error_details(error: BaseException) -> Dict[str, Any]:
    """Collect the technical detail attached to verbose failure logs."""
    cause = getattr(error, "cause", None) or error.__cause__
    return {
        "name": type(error).__name__,
        "message": str(error),
        "code": getattr(error, "errno", None),
        "cause": repr(cause) if cause is not None else None,
        "stack": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip(),
    }


class DeployLogger:
    """
    Single verbosity-aware logging surface used by every operation.

    Call sites log the same way in both modes; this class decides whether a
    failure is rendered as one friendly sentence or with full detail, and
    whether timed sections report their duration. Verbosity belongs to the
    instance: two deployers with different settings share the underlying
    logger without affecting each other's output.
    """

    def __init__(self, name: str = PACKAGE_LOGGER, verbose: bool = False) -> None:
        self._logger = get_logger(name)
        self.verbose = verbose

    @property
    def verbose(self) -> bool:
        return self._verbose

    @verbose.setter
    def verbose(self, value: bool) -> None:
        self._verbose = bool(value)

    def _log(self, level: int, message: str, *args: Any) -> None:
        if not self._verbose:
            if level < logging.INFO:
                return
            self._logger.log(level, message, *args)
            return
        stamp = time.strftime(TIMESTAMP_FORMAT)
        prefix_args = (stamp, logging.getLevelName(level), self._logger.name)
        self._logger.log(level, VERBOSE_PREFIX + message, *(prefix_args + args))

    def debug(self, message: str, *args: Any) -> None:
        self._log(logging.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self._log(logging.INFO, message, *args)

    def success(self, message: str, *args: Any) -> None:
        self._log(logging.INFO, "✓ " + message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self._log(logging.WARNING, message, *args)

    def error(self, message: str, *args: Any) -> None:
        self._log(logging.ERROR, message, *args)

    def failure(self, message: str, error: Optional[BaseException] = None) -> None:
        if error is None:
            self.error("✗ %s", message)
            return
        if not self._verbose:
            self.error("✗ %s: %s", message, describe_error(error))
            return
        details = error_details(error)
        self.error(
            "✗ %s: %s (%s, code=%s)",
            message,
            details["message"],
            details["name"],
            details["code"],
        )
        if details["cause"]:
            self.error("  caused by %s", details["cause"])
        self.error("%s", details["stack"])

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            if self._verbose:
                self.info("%s took %.2fs", label, time.perf_counter() - start)
