"""Utility modules for wp-since."""

from .error_handling import (
    WpSinceError,
    ConfigurationError,
    StorageError,
    ImportFileError,
    handle_operation_error,
    safe_operation,
    validate_file_path,
    format_user_error,
)

__all__ = [
    'WpSinceError',
    'ConfigurationError',
    'StorageError',
    'ImportFileError',
    'handle_operation_error',
    'safe_operation',
    'validate_file_path',
    'format_user_error',
]
