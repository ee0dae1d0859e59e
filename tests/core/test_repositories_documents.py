"""Tests for review and log repositories (mongomock-backed)."""

from __future__ import annotations

import datetime
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument

from commerce_spine.core.errors import InvalidInputError, NotFoundError
from commerce_spine.core.repositories import ReviewRepository, object_id


def _review(**overrides):
    data = {
        "product_id": 1,
        "user_id": 1,
        "rating": 5,
        "title": "Great",
        "comment": "Would read again",
    }
    data.update(overrides)
    return data


@pytest.fixture
def review(facade):
    return facade.reviews.create(_review())


class TestObjectId:
    def test_parses_hex(self):
        oid = ObjectId()
        assert object_id(str(oid)) == oid

    def test_passes_object_ids_through(self):
        oid = ObjectId()
        assert object_id(oid) is oid

    @pytest.mark.parametrize("bad", ["not-an-id", "123", None])
    def test_malformed_id_is_invalid_input(self, bad):
        with pytest.raises(InvalidInputError):
            object_id(bad, "review")


class TestReviews:
    def test_create_sets_defaults_and_timestamps(self, review):
        assert ObjectId.is_valid(review["id"])
        assert review["helpful_count"] == 0
        assert review["is_verified"] is True
        assert review["images"] == []
        assert review["created_at"] == review["updated_at"]

    def test_rating_bounds(self, facade):
        with pytest.raises(InvalidInputError):
            facade.reviews.create(_review(rating=6))

    def test_update_rejects_null_rating(self, facade, review):
        with pytest.raises(InvalidInputError) as info:
            facade.reviews.update(review["id"], {"rating": None})
        assert any("rating cannot be null" in e["message"] for e in info.value.errors)
        assert facade.reviews.get(review["id"])["rating"] == 5

    def test_update_can_clear_metadata(self, facade):
        created = facade.reviews.create(_review(metadata={"source": "import"}))
        updated = facade.reviews.update(created["id"], {"metadata": None})
        assert updated["metadata"] is None

    def test_unknown_filter_rejected(self, facade, review):
        with pytest.raises(InvalidInputError) as info:
            facade.reviews.find_all(stars=5)
        assert "stars" in str(info.value)
        assert info.value.http_status == 400

    def test_unknown_field_rejected(self, facade):
        with pytest.raises(InvalidInputError):
            facade.reviews.create(_review(stars=5))

    def test_find_by_id_and_get(self, facade, review):
        assert facade.reviews.find_by_id(review["id"])["title"] == "Great"
        missing = str(ObjectId())
        assert facade.reviews.find_by_id(missing) is None
        with pytest.raises(NotFoundError):
            facade.reviews.get(missing)

    def test_malformed_id_through_facade(self, facade):
        with pytest.raises(InvalidInputError):
            facade.reviews.find_by_id("zzz")

    def test_update(self, facade, review):
        updated = facade.reviews.update(review["id"], {"rating": 3, "comment": "Fine"})
        assert updated["rating"] == 3
        assert updated["title"] == "Great"
        assert updated["updated_at"] >= review["updated_at"]

    def test_update_cannot_set_helpful_count(self, facade, review):
        with pytest.raises(InvalidInputError):
            facade.reviews.update(review["id"], {"helpful_count": 10})

    def test_update_missing_returns_none(self, facade):
        assert facade.reviews.update(str(ObjectId()), {"rating": 2}) is None

    def test_delete_true_exactly_once(self, facade, review):
        assert facade.reviews.delete(review["id"]) is True
        assert facade.reviews.delete(review["id"]) is False

    def test_find_by_product_newest_first(self, facade):
        first = facade.reviews.create(_review(product_id=7))
        second = facade.reviews.create(_review(product_id=7))
        facade.reviews.create(_review(product_id=8))
        found = facade.reviews.find_by_product(7)
        assert [r["id"] for r in found] == [second["id"], first["id"]]

    def test_limit(self, facade):
        for _ in range(5):
            facade.reviews.create(_review(user_id=3))
        assert len(facade.reviews.find_by_user(3, limit=2)) == 2

    def test_find_all_filters(self, facade):
        facade.reviews.create(_review(rating=2, is_verified=False))
        facade.reviews.create(_review(rating=4))
        facade.reviews.create(_review(rating=5, product_id=2))
        found = facade.reviews.repository.find_all(product_id=1, min_rating=3)
        assert [r["rating"] for r in found] == [4]
        unverified = facade.reviews.repository.find_all(is_verified=False)
        assert [r["rating"] for r in unverified] == [2]


class TestHelpfulCount:
    def test_increment_and_decrement(self, facade, review):
        assert facade.reviews.increment_helpful(review["id"])["helpful_count"] == 1
        assert facade.reviews.increment_helpful(review["id"])["helpful_count"] == 2
        assert facade.reviews.decrement_helpful(review["id"])["helpful_count"] == 1

    def test_n_increments_add_n(self, facade, review):
        for _ in range(10):
            facade.reviews.increment_helpful(review["id"])
        assert facade.reviews.get(review["id"])["helpful_count"] == 10

    def test_concurrent_increments_are_not_lost(self, facade, review):
        with ThreadPoolExecutor(max_workers=5) as pool:
            list(pool.map(lambda _: facade.reviews.increment_helpful(review["id"]), range(25)))
        assert facade.reviews.get(review["id"])["helpful_count"] == 25

    def test_never_below_zero(self, facade, review):
        result = facade.reviews.decrement_helpful(review["id"])
        assert result["helpful_count"] == 0
        assert facade.reviews.get(review["id"])["helpful_count"] == 0

    def test_missing_review_returns_none(self, facade):
        assert facade.reviews.increment_helpful(str(ObjectId())) is None
        assert facade.reviews.decrement_helpful(str(ObjectId())) is None

    def test_single_atomic_update(self):
        oid = ObjectId()
        collection = MagicMock()
        collection.find_one_and_update.return_value = {"_id": oid, "helpful_count": 4}
        adapter = MagicMock()
        adapter.collection.return_value = collection

        result = ReviewRepository(adapter).adjust_helpful_count(str(oid))

        collection.find_one_and_update.assert_called_once()
        query, update = collection.find_one_and_update.call_args.args
        assert query == {"_id": oid}
        assert update["$inc"] == {"helpful_count": 1}
        assert collection.find_one_and_update.call_args.kwargs["return_document"] is ReturnDocument.AFTER
        collection.find_one.assert_not_called()
        assert result == {"id": str(oid), "helpful_count": 4}

    def test_decrement_guards_in_filter(self):
        oid = ObjectId()
        collection = MagicMock()
        collection.find_one_and_update.return_value = {"_id": oid, "helpful_count": 0}
        adapter = MagicMock()
        adapter.collection.return_value = collection

        ReviewRepository(adapter).adjust_helpful_count(str(oid), increment=False)

        query, update = collection.find_one_and_update.call_args.args
        assert query == {"_id": oid, "helpful_count": {"$gt": 0}}
        assert update["$inc"] == {"helpful_count": -1}


class TestLogs:
    def test_create_defaults_expiry(self, facade):
        log = facade.logs.create({"level": "info", "category": "system", "message": "boot"})
        assert log["expires_at"] is not None
        assert log["level"] == "info"

    def test_invalid_level_rejected(self, facade):
        with pytest.raises(InvalidInputError):
            facade.logs.create({"level": "fatal", "category": "system", "message": "x"})

    @pytest.mark.parametrize("field", ["level", "category", "message", "expires_at"])
    def test_update_rejects_null_required_field(self, facade, field):
        log = facade.logs.create({"level": "info", "category": "system", "message": "boot"})
        with pytest.raises(InvalidInputError):
            facade.logs.update(log["id"], {field: None})
        stored = facade.logs.get(log["id"])
        assert stored["level"] == "info"
        assert stored["expires_at"] is not None

    def test_update_can_clear_error_details(self, facade):
        log = facade.logs.log_error("boom", {"code": "E1"})
        assert facade.logs.update(log["id"], {"error_details": None})["error_details"] is None

    def test_unknown_filter_rejected(self, facade):
        with pytest.raises(InvalidInputError):
            facade.logs.find_all(bogus=1)

    def test_log_api_request_success(self, facade):
        log = facade.logs.log_api_request("GET", "/products", 200, 12.5, user_id=4)
        assert log["level"] == "info"
        assert log["category"] == "api_request"
        assert log["message"] == "GET /products - 200"
        assert log["response_time"] == 12.5
        assert log["user_id"] == 4

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_log_api_request_failure_is_error(self, facade, status):
        log = facade.logs.log_api_request("POST", "/orders", status, 3.0)
        assert log["level"] == "error"

    def test_log_error(self, facade):
        log = facade.logs.log_error("payment failed", {"code": "card_declined"}, user_id=9)
        assert log["level"] == "error"
        assert log["category"] == "error"
        assert log["error_details"] == {"code": "card_declined"}

    def test_find_by_level_and_category(self, facade):
        facade.logs.log_api_request("GET", "/a", 200, 1.0)
        facade.logs.log_api_request("GET", "/b", 500, 1.0)
        facade.logs.log_error("boom")
        assert len(facade.logs.find_by_level("error")) == 2
        assert len(facade.logs.find_by_category("api_request")) == 2
        assert facade.logs.find_by_category("error")[0]["message"] == "boom"

    def test_bad_filter_value_rejected(self, facade):
        with pytest.raises(InvalidInputError):
            facade.logs.find_by_level("loud")

    def test_find_by_user(self, facade):
        facade.logs.log_error("one", user_id=1)
        facade.logs.log_error("two", user_id=2)
        assert [log["message"] for log in facade.logs.find_by_user(2)] == ["two"]

    def test_find_by_date_range(self, facade):
        log = facade.logs.log_error("inside")
        start = log["created_at"] - datetime.timedelta(minutes=1)
        end = log["created_at"] + datetime.timedelta(minutes=1)
        assert [entry["id"] for entry in facade.logs.find_by_date_range(start, end)] == [log["id"]]
        past = start - datetime.timedelta(days=1)
        assert facade.logs.find_by_date_range(past, start) == []

    def test_inverted_range_rejected(self, facade):
        now = datetime.datetime(2026, 1, 2)
        with pytest.raises(InvalidInputError):
            facade.logs.find_by_date_range(now, now - datetime.timedelta(days=1))

    def test_log_list_limit(self, facade):
        for i in range(4):
            facade.logs.log_error(f"e{i}")
        found = facade.logs.find_by_level("error", limit=3)
        assert len(found) == 3
        assert found[0]["message"] == "e3"
