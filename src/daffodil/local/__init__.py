"""Local command execution on the deploying machine."""

from .session import LocalCommandResult, LocalSession

__all__ = ["LocalSession", "LocalCommandResult"]
