"""Core components for wptrun."""

from .config import Config
from .exceptions import (
    WPTRunError,
    InvalidArgumentError,
    UnsupportedOperationError,
    MoveTargetOutOfBoundsError,
    NavigationError,
    ManifestError,
    ValidationError,
    FileOperationError,
)
from .logging_config import setup_logging
from .session import SessionManager

__all__ = [
    "Config",
    "WPTRunError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "MoveTargetOutOfBoundsError",
    "NavigationError",
    "ManifestError",
    "ValidationError",
    "FileOperationError",
    "setup_logging",
    "SessionManager",
]
