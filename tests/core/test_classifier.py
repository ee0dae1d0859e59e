"""Tests for the store error classifier."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from pymongo.errors import (
    DuplicateKeyError,
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
    WriteError,
)
from sqlalchemy import exc as sa_exc

from commerce_spine.core.classifier import ErrorClassifier, document_code, relational_code
from commerce_spine.core.errors import (
    ConflictError,
    InternalStoreError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
    StoreTimeoutError,
)
from commerce_spine.core.schemas import UserCreate


class _PgError(Exception):
    def __init__(self, sqlstate: str, constraint: str | None = None):
        super().__init__(f"pg error {sqlstate}")
        self.sqlstate = sqlstate
        self.diag = type("Diag", (), {"constraint_name": constraint})()


class _SqliteError(Exception):
    def __init__(self, code: int):
        super().__init__(f"sqlite error {code}")
        self.sqlite_errorcode = code


def integrity(orig: Exception) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT ...", {}, orig)


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


class TestRelationalClassification:
    @pytest.mark.parametrize(
        "orig,expected",
        [
            (_PgError("23505"), ConflictError),
            (_PgError("23503"), InvalidReferenceError),
            (_PgError("23514"), InvalidInputError),
            (_PgError("23502"), InvalidInputError),
            (_SqliteError(2067), ConflictError),
            (_SqliteError(1555), ConflictError),
            (_SqliteError(787), InvalidReferenceError),
            (_SqliteError(275), InvalidInputError),
            (_SqliteError(1299), InvalidInputError),
        ],
    )
    def test_constraint_codes(self, classifier, orig, expected):
        error = classifier.classify(integrity(orig), entity="user", operation="create")
        assert type(error) is expected
        assert error.context.store == "relational"
        assert error.context.entity == "user"

    def test_native_code_and_constraint_recorded(self, classifier):
        error = classifier.classify(integrity(_PgError("23505", "app_users_email_key")))
        assert error.context.native_code == "23505"
        assert error.context.constraint == "app_users_email_key"

    def test_pool_timeout(self, classifier):
        error = classifier.classify(sa_exc.TimeoutError("QueuePool limit reached"))
        assert isinstance(error, StoreTimeoutError)
        assert error.retryable

    def test_unknown_code_is_internal(self, classifier):
        error = classifier.classify(sa_exc.OperationalError("SELECT", {}, _PgError("42P01")))
        assert isinstance(error, InternalStoreError)
        assert error.context.native_code == "42P01"

    def test_message_text_is_ignored(self, classifier):
        orig = Exception("duplicate key value violates unique constraint")
        assert isinstance(classifier.classify(integrity(orig)), InternalStoreError)

    def test_relational_code_without_orig(self):
        assert relational_code(sa_exc.SQLAlchemyError("x")) is None


class TestDocumentClassification:
    def test_duplicate_key(self, classifier):
        error = classifier.classify(DuplicateKeyError("dup", code=11000), entity="review")
        assert isinstance(error, ConflictError)
        assert error.context.native_code == "11000"

    def test_validation_failure(self, classifier):
        error = classifier.classify(WriteError("Document failed validation", code=121))
        assert isinstance(error, InvalidInputError)

    @pytest.mark.parametrize(
        "raw",
        [
            ServerSelectionTimeoutError("no servers"),
            NetworkTimeout("timed out"),
            OperationFailure("operation exceeded time limit", code=50),
        ],
    )
    def test_timeouts(self, classifier, raw):
        assert isinstance(classifier.classify(raw), StoreTimeoutError)

    def test_other_failure_is_internal(self, classifier):
        error = classifier.classify(OperationFailure("unauthorized", code=13))
        assert isinstance(error, InternalStoreError)
        assert error.context.store == "document"

    def test_document_code(self):
        assert document_code(OperationFailure("x", code=26)) == 26


class TestOtherErrors:
    def test_already_classified_passes_through(self, classifier):
        original = NotFoundError("user", 1)
        assert classifier.classify(original, entity="user") is original

    def test_context_filled_when_missing(self, classifier):
        original = ConflictError("dup")
        classifier.classify(original, entity="order", operation="create")
        assert original.context.entity == "order"
        assert original.context.operation == "create"

    def test_pydantic_validation(self, classifier):
        with pytest.raises(ValidationError) as info:
            UserCreate.model_validate({"email": "nope"})
        error = classifier.classify(info.value, entity="user", operation="create")
        assert isinstance(error, InvalidInputError)
        fields = {item["field"] for item in error.errors}
        assert {"email", "first_name"} <= fields

    def test_unknown_exception_is_internal(self, classifier):
        error = classifier.classify(KeyError("boom"), entity="user", operation="get")
        assert isinstance(error, InternalStoreError)
        assert error.message == "Unexpected error during get"
