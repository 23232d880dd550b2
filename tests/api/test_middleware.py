"""Tests for RequestIDMiddleware and the assembled app's health check."""

import logging
from uuid import UUID

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.testclient import TestClient

from api.middleware import RequestIDMiddleware


@pytest.fixture
def minimal_app():
    """Minimal FastAPI app with RequestIDMiddleware."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def test_endpoint(request: Request):
        return JSONResponse({"request_id": request.state.request_id})

    return app


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    def test_response_has_request_id_header(self, minimal_app):
        """Response includes X-Request-ID header."""
        response = TestClient(minimal_app).get("/test")

        UUID(response.headers["X-Request-ID"])

    def test_request_state_has_request_id(self, minimal_app):
        """request.state.request_id is set and matches header."""
        response = TestClient(minimal_app).get("/test")

        assert response.headers["X-Request-ID"] == response.json()["request_id"]

    def test_access_line_logged(self, minimal_app, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            response = TestClient(minimal_app).get("/test")

        assert "GET /test 200" in caplog.text
        assert response.headers["X-Request-ID"] in caplog.text


class TestHealth:

    def test_health_is_public(self, unauthed_client):
        response = unauthed_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"] == {"status": "ok"}


class TestAssembledMiddlewareOrder:

    def test_auth_rejection_carries_request_id(self, unauthed_client):
        response = unauthed_client.get("/api/data?type=tickets")

        assert response.status_code == 401
        UUID(response.headers["X-Request-ID"])

    def test_auth_rejection_is_access_logged(self, unauthed_client, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            response = unauthed_client.get("/api/data?type=tickets")

        assert "GET /api/data 401" in caplog.text
        assert response.headers["X-Request-ID"] in caplog.text
