"""LocalVault Error Handling Module

This module defines the error handling system for LocalVault, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict (stored values may carry user content)
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("value",)


class ErrorCode(str, Enum):
    """Error codes for LocalVault.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # Store errors
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    STORE_READ_FAILED = "STORE_READ_FAILED"

    # Codec errors
    DECODE_ERROR = "DECODE_ERROR"
    ENCODE_ERROR = "ENCODE_ERROR"

    # Migration errors
    MIGRATION_FAILED = "MIGRATION_FAILED"
    MIGRATION_CORRUPT_RECORD = "MIGRATION_CORRUPT_RECORD"
    INVALID_SCHEMA_VERSION = "INVALID_SCHEMA_VERSION"

    # Ordering errors
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    REORDER_IN_PROGRESS = "REORDER_IN_PROGRESS"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path and Enum to primitive types, rejects everything else.

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types are allowed in additional_data so the context can
    always be serialized into a structured log record.

    Attributes:
        key: Optional storage key associated with the error
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only
    """

    key: str | None = None
    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict, dropping masked entries of additional_data.

        Example:
            >>> ErrorContext(key="todos", additional_data={"value": "x"}).safe_dict()
            {'key': 'todos', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.key is not None:
            data["key"] = self.key
        if self.operation is not None:
            data["operation"] = self.operation

        extra = self.additional_data or {}
        data["additional_data"] = {k: v for k, v in extra.items() if k not in mask_keys}
        return data


class LocalVaultError(Exception):
    """Base exception class for all LocalVault errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(LocalVaultError):
    """Domain-specific errors.

    These errors occur when data or usage rules are violated, e.g. a
    malformed persisted value or an unknown todo id.
    """


class InfrastructureError(LocalVaultError):
    """Errors raised while talking to the backing store or the filesystem."""


class DecodeError(DomainError):
    """A persisted value could not be decoded by a typed accessor.

    Typed getters recover from this locally and return the caller's default;
    the error object exists so the condition can be logged and counted.
    """


class EncodeError(DomainError):
    """A value could not be serialized on write. The write does not happen."""


class MigrationError(DomainError):
    """A schema migration failed; the version marker is left untouched."""


class ReorderInProgressError(DomainError):
    """A mutation was attempted while a reorder was still being persisted."""


class StoreUnavailableError(InfrastructureError):
    """The persistent store is inaccessible."""


class ApplicationError(LocalVaultError):
    """Application-level errors such as configuration problems."""


def create_decode_error(
    key: str,
    expected_type: str,
    original_error: Exception | None = None,
) -> DecodeError:
    """Create a decode error for a malformed persisted value."""
    return DecodeError(
        ErrorCode.DECODE_ERROR,
        f"Malformed {expected_type} value stored under '{key}'",
        ErrorContext(
            key=key,
            operation="decode",
            additional_data={"expected_type": expected_type},
        ),
        original_error,
    )


def create_encode_error(
    key: str,
    value_type: str,
    original_error: Exception | None = None,
) -> EncodeError:
    """Create an encode error for a value that cannot be serialized."""
    return EncodeError(
        ErrorCode.ENCODE_ERROR,
        f"Cannot encode {value_type} value for '{key}'",
        ErrorContext(
            key=key,
            operation="encode",
            additional_data={"value_type": value_type},
        ),
        original_error,
    )


def create_migration_error(
    message: str,
    from_version: int,
    to_version: int,
    record_index: int | None = None,
    code: ErrorCode = ErrorCode.MIGRATION_FAILED,
    original_error: Exception | None = None,
) -> MigrationError:
    """Create a migration error with the version transition in context."""
    additional_data: dict[str, PrimitiveContextValue] = {
        "from_version": from_version,
        "to_version": to_version,
    }
    if record_index is not None:
        additional_data["record_index"] = record_index
    return MigrationError(
        code,
        message,
        ErrorContext(operation="run_migration", additional_data=additional_data),
        original_error,
    )


def create_store_unavailable_error(
    operation: str,
    key: str | None = None,
    storage_area: str | None = None,
    original_error: Exception | None = None,
) -> StoreUnavailableError:
    """Create a store-unavailable error for a failed store access."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"storage_area": storage_area} if storage_area else None
    )
    return StoreUnavailableError(
        ErrorCode.STORE_UNAVAILABLE,
        f"Persistent store unavailable during '{operation}'",
        ErrorContext(key=key, operation=operation, additional_data=additional_data),
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        ErrorContext(operation=operation, additional_data=additional_data),
        original_error,
    )
