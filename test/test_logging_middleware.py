"""
Tests for structured request logging
"""

import json
import logging

from app.middleware.logging import RequestIdFilter, StructuredFormatter, request_id_var


class TestStructuredFormatter:
    def test_json_line(self):
        record = logging.LogRecord("drive.access", logging.INFO, __file__, 1, "GET /x - 200", None, None)
        record.status_code = 200
        record.user_id = 7

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["message"] == "GET /x - 200"
        assert data["status_code"] == 200
        assert data["user_id"] == 7

    def test_request_id_filter(self):
        token = request_id_var.set("req-123")
        try:
            record = logging.LogRecord("app", logging.INFO, __file__, 1, "msg", None, None)
            RequestIdFilter().filter(record)
            assert record.request_id == "req-123"
        finally:
            request_id_var.reset(token)


class TestMiddleware:
    async def test_request_id_header(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    async def test_incoming_request_id_is_kept(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_access_log_carries_user(self, client, test_user, user_headers, caplog):
        with caplog.at_level(logging.INFO, logger="drive.access"):
            await client.get("/api/v1/items/structure", headers=user_headers)

        [record] = [r for r in caplog.records if r.name == "drive.access"]
        assert record.status_code == 200
        assert record.user_id == test_user.id

    async def test_health_is_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="drive.access"):
            await client.get("/health")
        assert not [r for r in caplog.records if r.name == "drive.access"]

    async def test_access_log_carries_item_id(self, client, user_headers, caplog):
        with caplog.at_level(logging.INFO, logger="drive.access"):
            await client.get("/api/v1/items/77", headers=user_headers)

        [record] = [r for r in caplog.records if r.name == "drive.access"]
        assert record.status_code == 404
        assert record.item_id == 77

    async def test_error_envelope_carries_request_id(self, client, user_headers):
        response = await client.get("/api/v1/items/77", headers={**user_headers, "X-Request-ID": "trace-1"})
        assert response.json()["error"]["request_id"] == "trace-1"
