"""
Tests for LocalVault error handling system.

This module contains unit tests for the error hierarchy defined in
localvault.shared.errors.
"""

from enum import Enum
from pathlib import Path

import pytest

from localvault.shared.errors import (
    ApplicationError,
    DecodeError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    LocalVaultError,
    MigrationError,
    StoreUnavailableError,
    create_config_error,
    create_decode_error,
    create_migration_error,
    create_store_unavailable_error,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test cases for ErrorContext frozen dataclass."""

    def test_empty_context(self):
        context = ErrorContext()

        assert context.key is None
        assert context.operation is None
        assert context.additional_data is None

    def test_coerces_path_and_enum(self):
        context = ErrorContext(additional_data={"path": Path("a/b"), "color": Color.RED})

        assert context.additional_data == {"path": str(Path("a/b")), "color": "red"}

    def test_rejects_complex_values(self):
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"items": [1, 2]})

    def test_safe_dict_masks_values(self):
        context = ErrorContext(key="k", additional_data={"value": "secret", "size": 3})

        assert context.safe_dict() == {"key": "k", "additional_data": {"size": 3}}


class TestHierarchy:
    """Test the error class hierarchy."""

    @pytest.mark.parametrize(
        ("error_class", "base"),
        [
            (DecodeError, DomainError),
            (MigrationError, DomainError),
            (StoreUnavailableError, InfrastructureError),
            (ApplicationError, LocalVaultError),
        ],
    )
    def test_subclasses(self, error_class, base):
        assert issubclass(error_class, base)

    def test_str_and_to_dict(self):
        original = ValueError("bad")
        error = LocalVaultError(
            ErrorCode.DECODE_ERROR,
            "broken",
            ErrorContext(key="k"),
            original,
        )

        assert str(error) == "DECODE_ERROR: broken"
        assert error.to_dict() == {
            "code": "DECODE_ERROR",
            "message": "broken",
            "context": {"key": "k", "additional_data": {}},
            "original_error": "bad",
        }


class TestFactories:
    def test_decode_error(self):
        error = create_decode_error("count", "int")

        assert isinstance(error, DecodeError)
        assert error.context.key == "count"
        assert error.context.additional_data == {"expected_type": "int"}

    def test_migration_error(self):
        error = create_migration_error("corrupt", 0, 2, record_index=4)

        assert error.code == ErrorCode.MIGRATION_FAILED
        assert error.context.additional_data == {
            "from_version": 0,
            "to_version": 2,
            "record_index": 4,
        }

    def test_store_unavailable_error(self):
        error = create_store_unavailable_error("get_item", key="k", storage_area="local")

        assert error.code == ErrorCode.STORE_UNAVAILABLE
        assert error.context.additional_data == {"storage_area": "local"}

    def test_config_error(self):
        error = create_config_error("missing", config_key="cache.default_ttl")

        assert isinstance(error, ApplicationError)
        assert error.code == ErrorCode.CONFIG_ERROR
