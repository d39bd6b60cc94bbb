"""Tests for monitoring: health checks, request timing and structured logging."""

import json
import logging

from crowdtest.middleware.logging_config import JSONFormatter, ReadableFormatter
from crowdtest.middleware.timing import DEFAULT_SLOW_MS, slow_threshold_ms
from crowdtest.models import db as _db
from crowdtest.services import bootstrap


# ── Health Endpoints ────────────────────────────────────────────────────


class TestHealthEndpoints:
    """Health check endpoint tests."""

    def test_health_basic(self, client):
        """GET /api/v1/health returns 200."""
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_health_ready_on_empty_database(self, client):
        res = client.get("/api/v1/health/ready")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok", "seeded": False, "autoSeed": False}

    def test_health_ready_reports_seeded_dataset(self, client):
        bootstrap.seed_demo_data()
        res = client.get("/api/v1/health/ready")
        assert res.get_json()["seeded"] is True

    def test_health_live(self, client):
        """GET /api/v1/health/live returns detailed checks."""
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        data = res.get_json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "ok"
        assert "latency_ms" in data["checks"]["database"]
        assert data["checks"]["dataset"]["usersByRole"] == {"TESTER": 0, "CLIENT": 0, "MANAGER": 0}

    def test_health_live_counts_users_per_role(self, client, factory):
        factory.tester("t1")
        factory.tester("t2")
        factory.manager()
        data = client.get("/api/v1/health/live").get_json()
        assert data["checks"]["dataset"]["usersByRole"] == {"TESTER": 2, "CLIENT": 0, "MANAGER": 1}

    def test_db_diag_lists_every_table(self, client, factory):
        factory.tester()
        res = client.get("/api/v1/health/db-diag")
        assert res.status_code == 200
        data = res.get_json()
        for table in ("users", "projects", "test_cycles", "test_assignments",
                      "bug_reports", "bug_comments", "payouts"):
            assert data[table]["status"] == "ok"
        assert data["users"]["count"] == 1

    def test_unknown_route_is_json_404(self, client):
        res = client.get("/api/v1/nope")
        assert res.status_code == 404
        assert res.get_json()["path"] == "/api/v1/nope"


# ── Request Timing ──────────────────────────────────────────────────────


class TestRequestTiming:

    def test_generates_request_id(self, client):
        res = client.get("/api/v1/health/ready")
        assert len(res.headers["X-Request-ID"]) == 12
        assert "X-Request-Duration-Ms" in res.headers

    def test_echoes_incoming_request_id(self, client):
        res = client.get("/api/v1/health/ready", headers={"X-Request-ID": "trace-42"})
        assert res.headers["X-Request-ID"] == "trace-42"

    def test_rejects_unsafe_incoming_request_id(self, client):
        res = client.get("/api/v1/health/ready", headers={"X-Request-ID": "x" * 200})
        assert len(res.headers["X-Request-ID"]) == 12

    def test_dashboard_budget_is_wider_than_default(self):
        assert slow_threshold_ms("dashboard") > DEFAULT_SLOW_MS
        assert slow_threshold_ms("test_cycles") == DEFAULT_SLOW_MS
        assert slow_threshold_ms(None) == DEFAULT_SLOW_MS

    def test_access_log_carries_resolved_role(self, client, factory, caplog):
        factory.client_user("client-1")
        _db.session.commit()
        caplog.set_level(logging.DEBUG, logger="crowdtest.middleware.timing")

        client.get("/api/v1/dashboard?userId=client-1")

        records = [r for r in caplog.records if r.name == "crowdtest.middleware.timing"]
        assert records[-1].role == "CLIENT"
        assert records[-1].blueprint == "dashboard"
        assert "role=CLIENT" in records[-1].getMessage()

    def test_health_probes_not_access_logged(self, client, caplog):
        caplog.set_level(logging.DEBUG, logger="crowdtest.middleware.timing")
        client.get("/api/v1/health/live")
        assert not [r for r in caplog.records if r.name == "crowdtest.middleware.timing"]


# ── Log Formatters ──────────────────────────────────────────────────────


def _record(**extra):
    record = logging.LogRecord(
        name="crowdtest.services.dashboard_service", level=logging.INFO,
        pathname=__file__, lineno=1, msg="Dashboard built user=%s",
        args=("u1",), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_formatter_emits_one_object(self):
        line = JSONFormatter().format(_record(request_id="abc123", user_id="u1"))
        payload = json.loads(line)
        assert payload["message"] == "Dashboard built user=u1"
        assert payload["level"] == "INFO"
        assert payload["request_id"] == "abc123"
        assert payload["user_id"] == "u1"

    def test_readable_formatter_includes_request_id(self):
        line = ReadableFormatter().format(_record(request_id="abc123"))
        assert "abc123" in line
        assert "Dashboard built user=u1" in line
