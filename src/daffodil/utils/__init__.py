"""Shared helpers: logging and terminal rendering."""

from .logging import DeployLogger, describe_error, error_details, get_logger

__all__ = ["DeployLogger", "describe_error", "error_details", "get_logger"]
