"""Shared exceptions and error-reporting helpers for wp-since."""

import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

from ..models import ErrorKind

T = TypeVar("T")


class WpSinceError(Exception):
    """Base error for wp-since operations."""

    kind = ErrorKind.INPUT

    def __init__(self, message: str, *details: str):
        super().__init__(message)
        self.message = message
        self.details = list(details)

    @property
    def messages(self):
        return [self.message] + self.details


class ConfigurationError(WpSinceError):
    """The host is not set up the way the tool requires (e.g. theme not active)."""

    kind = ErrorKind.CONFIGURATION


class StorageError(WpSinceError):
    """The documentation store is missing or unusable."""

    kind = ErrorKind.CONFIGURATION


class ImportFileError(WpSinceError):
    """A parsed-documentation file could not be loaded."""


def format_user_error(message: str) -> str:
    return f"Error: {message}"


def handle_operation_error(
    operation: str,
    error: Exception,
    logger: Optional[logging.Logger] = None,
) -> WpSinceError:
    """Wrap an unexpected exception into a WpSinceError and log it.

    Args:
        operation: Human readable description of what was being done
        error: The original exception
        logger: Logger to report to (defaults to this module's logger)

    Returns:
        A WpSinceError suitable for raising with ``from error``
    """
    logger = logger or logging.getLogger(__name__)
    if isinstance(error, WpSinceError):
        return error

    logger.debug(f"{operation} failed", exc_info=error)
    return WpSinceError(f"{operation} failed: {error}")


def safe_operation(operation: str, func: Callable[[], T], logger: Optional[logging.Logger] = None) -> T:
    """Run ``func`` and re-raise any failure as a WpSinceError."""
    try:
        return func()
    except Exception as e:
        raise handle_operation_error(operation, e, logger) from e


def validate_file_path(path: str, must_exist: bool = True) -> Path:
    """Resolve a user supplied path, raising ImportFileError if it is unusable."""
    file_path = Path(path).expanduser()
    if must_exist and not file_path.is_file():
        raise ImportFileError(f"File not found: {path}")
    return file_path
