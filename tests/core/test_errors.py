"""Tests for commerce_spine.core.errors module."""

import pytest

from commerce_spine.core.errors import (
    ConfigError,
    ConflictError,
    DataAccessError,
    ErrorCategory,
    ErrorContext,
    InternalStoreError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
    SchemaLifecycleError,
    StoreTimeoutError,
    is_retryable,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_empty_context_serializes_to_empty_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_only_set_fields_are_included(self):
        ctx = ErrorContext(store="relational", entity="user", native_code="23505")
        assert ctx.to_dict() == {"store": "relational", "entity": "user", "native_code": "23505"}

    def test_metadata_is_flattened(self):
        ctx = ErrorContext(entity="order", metadata={"attempt": 2})
        assert ctx.to_dict() == {"entity": "order", "attempt": 2}


class TestDataAccessError:
    """Test the base error."""

    def test_defaults(self):
        error = DataAccessError("boom")
        assert error.category == ErrorCategory.STORE
        assert error.retryable is False
        assert error.http_status == 500
        assert str(error) == "boom"

    def test_cause_is_chained(self):
        cause = RuntimeError("driver")
        error = DataAccessError("wrapped", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "driver"

    def test_with_context_sets_known_fields_and_metadata(self):
        error = DataAccessError("x").with_context(entity="review", table="reviews")
        assert error.context.entity == "review"
        assert error.context.metadata == {"table": "reviews"}

    def test_to_dict_shape(self):
        error = ConflictError("dup").with_context(entity="user")
        data = error.to_dict()
        assert data["error_type"] == "ConflictError"
        assert data["category"] == "CONFLICT"
        assert data["http_status"] == 409
        assert data["context"] == {"entity": "user"}

    def test_repr(self):
        assert repr(NotFoundError("user", 3)) == "NotFoundError('user not found: 3', category=NOT_FOUND)"


class TestSubclasses:
    @pytest.mark.parametrize(
        "cls,category,status",
        [
            (ConflictError, ErrorCategory.CONFLICT, 409),
            (InvalidReferenceError, ErrorCategory.REFERENCE, 400),
            (InvalidInputError, ErrorCategory.VALIDATION, 400),
            (InternalStoreError, ErrorCategory.STORE, 500),
            (StoreTimeoutError, ErrorCategory.TIMEOUT, 503),
            (ConfigError, ErrorCategory.CONFIG, 500),
        ],
    )
    def test_category_and_status(self, cls, category, status):
        error = cls("msg")
        assert error.category == category
        assert error.http_status == status

    def test_not_found_carries_entity_and_id(self):
        error = NotFoundError("order", 42)
        assert error.context.entity == "order"
        assert error.context.entity_id == 42
        assert error.http_status == 404

    def test_invalid_input_errors_list(self):
        error = InvalidInputError("bad", errors=[{"field": "email", "message": "required"}])
        assert error.to_dict()["errors"] == [{"field": "email", "message": "required"}]

    def test_lifecycle_error_records_operation(self):
        error = SchemaLifecycleError("hard_reset", "failed")
        assert error.context.operation == "hard_reset"
        assert error.category == ErrorCategory.LIFECYCLE


class TestIsRetryable:
    def test_timeout_is_retryable(self):
        assert is_retryable(StoreTimeoutError("slow"))

    def test_conflict_is_not_retryable(self):
        assert not is_retryable(ConflictError("dup"))

    def test_foreign_exception_is_not_retryable(self):
        assert not is_retryable(ValueError("x"))

    def test_explicit_override(self):
        assert is_retryable(InternalStoreError("flaky", retryable=True))
