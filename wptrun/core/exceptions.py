"""
Base exception classes for wptrun.

Provides a hierarchy of exceptions for the error classes that can occur while
driving a browser through a test: malformed input payloads, unsupported
synthetic input, navigation failures and configuration problems.
"""

from typing import Optional, Dict, Any


class WPTRunError(Exception):
    """Base exception class for all wptrun errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class InvalidArgumentError(WPTRunError):
    """Raised when an action-sequence payload is malformed or inconsistent."""

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        violations: Optional[list] = None,
    ):
        super().__init__(message, "invalid argument")
        self.source_id = source_id
        self.violations = violations or []
        self.context.update(
            {
                "source_id": source_id,
                "violations": violations,
            }
        )


class UnsupportedOperationError(WPTRunError):
    """Raised when a synthetic input action cannot be performed."""

    def __init__(
        self,
        message: str,
        action_type: Optional[str] = None,
        source_id: Optional[str] = None,
    ):
        super().__init__(message, "unsupported operation")
        self.action_type = action_type
        self.source_id = source_id
        self.context.update(
            {
                "action_type": action_type,
                "source_id": source_id,
            }
        )


class MoveTargetOutOfBoundsError(WPTRunError):
    """Raised when a pointer move resolves outside the viewport."""

    def __init__(
        self,
        message: str,
        point: Optional[tuple] = None,
        viewport: Optional[tuple] = None,
    ):
        super().__init__(message, "move target out of bounds")
        self.point = point
        self.viewport = viewport
        self.context.update(
            {
                "point": point,
                "viewport": viewport,
            }
        )


class NavigationError(WPTRunError):
    """Raised when the page fails to navigate to a test URL."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        test_name: Optional[str] = None,
    ):
        super().__init__(message, "navigation failed")
        self.url = url
        self.test_name = test_name
        self.context.update(
            {
                "url": url,
                "test_name": test_name,
            }
        )


class ManifestError(WPTRunError):
    """Raised when the WPT manifest cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        manifest_path: Optional[str] = None,
    ):
        super().__init__(message, "manifest error")
        self.manifest_path = manifest_path
        self.context.update({"manifest_path": manifest_path})


class ValidationError(WPTRunError):
    """Raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        violations: Optional[list] = None,
    ):
        super().__init__(message, "validation failed")
        self.validation_type = validation_type
        self.violations = violations or []
        self.context.update(
            {
                "validation_type": validation_type,
                "violations": violations,
            }
        )


class FileOperationError(WPTRunError):
    """Raised when writing the report or resources fails."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, "file operation failed")
        self.file_path = file_path
        self.operation = operation
        self.context.update(
            {
                "file_path": file_path,
                "operation": operation,
            }
        )
