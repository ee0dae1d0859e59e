"""Tests for the admin (schema lifecycle) and health routes.

Uses FastAPI TestClient with a SQLite + mongomock facade injected into
``create_app``.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from commerce_spine.api.app import create_app
from commerce_spine.core.errors import ConflictError, StoreTimeoutError
from commerce_spine.core.lifecycle import LifecycleResult
from commerce_spine.core.settings import Settings

ADMIN = {"X-Role": "admin"}


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, log_format="json", **overrides)


@pytest.fixture
def client(facade):
    app = create_app(settings=_settings(environment="test"), facade=facade)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ── Lifecycle ────────────────────────────────────────────────────


class TestSoftReset:
    def test_clears_data(self, client, facade, order):
        resp = client.post("/admin/soft-reset", headers=ADMIN)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"].startswith("Soft reset complete")
        assert facade.orders.count() == 0

    def test_requires_admin_role(self, client):
        resp = client.post("/admin/soft-reset")
        assert resp.status_code == 403
        assert resp.json()["title"] == "Forbidden"

    def test_customer_role_rejected(self, client):
        resp = client.post("/admin/soft-reset", headers={"X-Role": "customer"})
        assert resp.status_code == 403


class TestHardResetAndRecreate:
    def test_round_trip(self, client, facade, user):
        resp = client.post("/admin/hard-reset", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert facade.relational.table_names() == set()

        resp = client.post("/admin/recreate-schema", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert facade.users.count() == 0

    def test_failure_is_reported_in_body(self, facade):
        broken = MagicMock(wraps=facade)
        broken.recreate_schema.return_value = LifecycleResult(
            "recreate_schema", success=False, message="Recreate schema failed: disk full"
        )
        app = create_app(settings=_settings(), facade=broken)
        with TestClient(app) as c:
            resp = c.post("/admin/recreate-schema", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "message": "Recreate schema failed: disk full"}


class TestSeed:
    def test_seeds_empty_stores(self, client, facade):
        resp = client.post("/admin/seed", headers=ADMIN)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["counts"]["product"] == 4
        assert facade.orders.count() == 4

    def test_populated_entities_are_skipped(self, client, facade, user):
        body = client.post("/admin/seed", headers=ADMIN).json()
        assert "user" not in body["counts"]
        assert facade.users.count() == 1

    def test_requires_admin_role(self, client, facade):
        assert client.post("/admin/seed").status_code == 403
        assert facade.users.count() == 0

    def test_other_operations_omit_counts(self, client):
        body = client.post("/admin/soft-reset", headers=ADMIN).json()
        assert "counts" not in body


class TestProductionGuard:
    @pytest.mark.parametrize(
        "path", ["/admin/soft-reset", "/admin/hard-reset", "/admin/recreate-schema", "/admin/seed"]
    )
    def test_refused_in_production(self, facade, user, path):
        app = create_app(settings=_settings(environment="production"), facade=facade)
        with TestClient(app) as c:
            resp = c.post(path, headers=ADMIN)
        assert resp.status_code == 403
        body = resp.json()
        assert body["success"] is False
        assert "not allowed in production" in body["message"]
        assert facade.users.count() == 1


# ── Auth ─────────────────────────────────────────────────────────


class TestApiKey:
    @pytest.fixture
    def secured(self, facade):
        app = create_app(settings=_settings(api_key="s3cret"), facade=facade)
        with TestClient(app) as c:
            yield c

    def test_missing_key(self, secured):
        resp = secured.post("/admin/soft-reset", headers=ADMIN)
        assert resp.status_code == 401
        assert resp.json()["title"] == "Unauthorized"

    def test_wrong_key(self, secured):
        resp = secured.post("/admin/soft-reset", headers={**ADMIN, "X-API-Key": "nope"})
        assert resp.status_code == 401

    def test_non_ascii_key_is_unauthorized(self, secured):
        resp = secured.post("/admin/soft-reset", headers={**ADMIN, "X-API-Key": "s3cr\u00e9t".encode()})
        assert resp.status_code == 401
        assert resp.json()["title"] == "Unauthorized"

    def test_utf8_configured_key(self, facade):
        app = create_app(settings=_settings(api_key="cl\u00e9"), facade=facade)
        with TestClient(app) as c:
            resp = c.post("/admin/soft-reset", headers={**ADMIN, "X-API-Key": "cl\u00e9".encode()})
        assert resp.status_code == 200

    def test_valid_key(self, secured):
        resp = secured.post("/admin/soft-reset", headers={**ADMIN, "X-API-Key": "s3cret"})
        assert resp.status_code == 200

    def test_health_bypasses_auth(self, secured):
        assert secured.get("/health/db").status_code == 200


# ── Health ───────────────────────────────────────────────────────


class TestHealth:
    def test_healthy(self, client, user):
        resp = client.get("/health/db")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["relational"] is True
        assert body["document"] is True
        assert body["counts"]["user"] == 1

    def test_unhealthy_after_hard_reset(self, client, facade):
        facade.hard_reset()
        body = client.get("/health/db").json()
        assert body["status"] == "unhealthy"
        assert body["relational"] is False


# ── Error mapping ────────────────────────────────────────────────


class TestErrorHandlers:
    def _app_raising(self, facade, error):
        broken = MagicMock(wraps=facade)
        broken.check_connections.side_effect = error
        app = create_app(settings=_settings(), facade=broken)
        return TestClient(app, raise_server_exceptions=False)

    def test_data_access_error_becomes_problem(self, facade):
        with self._app_raising(facade, ConflictError("user already exists")) as c:
            resp = c.get("/health/db")
        assert resp.status_code == 409
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["code"] == "CONFLICT"
        assert body["detail"] == "user already exists"

    def test_timeout_is_retryable(self, facade):
        with self._app_raising(facade, StoreTimeoutError("pool exhausted")) as c:
            resp = c.get("/health/db")
        assert resp.status_code == 503
        assert resp.json()["retryable"] is True
        assert resp.headers["retry-after"] == "1"

    def test_unhandled_error(self, facade):
        with self._app_raising(facade, RuntimeError("boom")) as c:
            resp = c.get("/health/db")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "An unexpected error occurred."
