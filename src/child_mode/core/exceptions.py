"""
Exception hierarchy for Child Mode Kit.

Provides structured error handling with specific error types for the
configuration store, persistence backends and runtime settings.
"""

from typing import Any, Dict, Optional


class ChildModeError(Exception):
    """Base exception for all child mode errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        component: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.component = component

    def __str__(self) -> str:
        """String representation of the error."""
        base_msg = f"[{self.component or 'ChildMode'}] {self.message}"
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "component": self.component,
            "details": self.details,
        }


class ConfigurationError(ChildModeError):
    """Exception raised when runtime settings are invalid or missing."""

    pass


class StorageError(ChildModeError):
    """Exception raised when the key-value store cannot be read or written."""

    pass


class EncodeError(StorageError):
    """Exception raised when a field value cannot be serialized."""

    def __init__(self, key: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to encode value for {key}: {reason}",
            error_code="ENCODE_ERROR",
            details={"key": key, "reason": reason},
            **kwargs,
        )


class DecodeError(StorageError):
    """Exception raised when a persisted blob cannot be deserialized."""

    def __init__(self, key: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to decode value for {key}: {reason}",
            error_code="DECODE_ERROR",
            details={"key": key, "reason": reason},
            **kwargs,
        )


class ValidationError(ChildModeError):
    """Exception raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Validation failed for field '{field}': {reason}",
            error_code="VALIDATION_ERROR",
            details={
                "field": field,
                "value": str(value),
                "reason": reason,
            },
            **kwargs,
        )
