"""
Tests for the backend reverse proxy endpoints.
"""

from unittest.mock import patch

import pytest
import requests
from fastapi.testclient import TestClient

from conftest import make_response
from main import app
from services.proxy_service import build_backend_url, filter_headers, strip_prefix

PREFIX = "/.netlify/functions/api"
BACKEND = "http://backend.test/api"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def backend_request():
    with patch("services.proxy_service.requests.request") as mock_request:
        mock_request.return_value = make_response(200, json_data=[{"id": 1}])
        yield mock_request


class TestProxyHelpers:
    def test_strip_prefix(self):
        assert strip_prefix(f"{PREFIX}/rentals", PREFIX) == "/rentals"
        assert strip_prefix(PREFIX, PREFIX) == ""
        assert strip_prefix("/rentals", PREFIX) == "/rentals"
        assert strip_prefix(f"{PREFIX}x/rentals", PREFIX) == f"{PREFIX}x/rentals"

    def test_build_backend_url(self):
        assert build_backend_url(BACKEND + "/", "/rentals", "a=1") == f"{BACKEND}/rentals?a=1"
        assert build_backend_url(BACKEND, "/rentals") == f"{BACKEND}/rentals"

    def test_filter_headers(self):
        headers = {
            "authorization": "Bearer abc",
            "content-type": "application/json",
            "x-forwarded-for": "1.2.3.4",
            "host": "frontend.example",
        }
        assert filter_headers(headers) == {
            "Authorization": "Bearer abc",
            "Content-Type": "application/json",
        }


class TestProxyRoutes:
    def test_preflight_answered_locally(self, client, backend_request):
        response = client.options(f"{PREFIX}/rentals")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-max-age"] == "86400"
        assert "Authorization" in response.headers["access-control-allow-headers"]
        backend_request.assert_not_called()

    def test_get_forwarded_with_query(self, client, backend_request):
        response = client.get(
            f"{PREFIX}/analytics/financial-summary?year=2024&month=6",
            headers={"Authorization": "Bearer abc", "X-Custom": "dropped"},
        )

        assert response.status_code == 200
        assert response.json() == [{"id": 1}]
        assert response.headers["access-control-allow-origin"] == "*"

        method, url = backend_request.call_args.args
        kwargs = backend_request.call_args.kwargs
        assert method == "GET"
        assert url == f"{BACKEND}/analytics/financial-summary?year=2024&month=6"
        assert kwargs["headers"] == {"Authorization": "Bearer abc"}
        assert kwargs["data"] is None

    def test_body_forwarded_for_writes(self, client, backend_request):
        backend_request.return_value = make_response(201, json_data={"id": 7})

        response = client.post(f"{PREFIX}/rentals", json={"customer_name": "Иван"})

        assert response.status_code == 201
        assert response.json() == {"id": 7}
        kwargs = backend_request.call_args.kwargs
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert b"customer_name" in kwargs["data"]

    def test_backend_error_status_mirrored(self, client, backend_request):
        backend_request.return_value = make_response(404, json_data={"error": "Rental not found"})

        response = client.delete(f"{PREFIX}/rentals/99")

        assert response.status_code == 404
        assert response.json() == {"error": "Rental not found"}
        assert backend_request.call_args.args == ("DELETE", f"{BACKEND}/rentals/99")

    def test_exact_prefix_forwards_to_backend_root(self, client, backend_request):
        client.get(PREFIX)

        assert backend_request.call_args.args == ("GET", BACKEND)

    def test_sibling_of_prefix_is_not_proxied(self, client, backend_request):
        response = client.get(f"{PREFIX}x/rentals")

        assert response.status_code == 404
        backend_request.assert_not_called()

    def test_unreachable_backend_returns_502(self, client, backend_request):
        backend_request.side_effect = requests.exceptions.ConnectionError("Connection refused")

        response = client.get(f"{PREFIX}/rentals")

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "Backend connection failed"
        assert "Connection refused" in body["message"]
        assert body["details"] is None
        assert body["url"] == f"{BACKEND}/rentals"
        assert response.headers["access-control-allow-origin"] == "*"


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["backend"] == BACKEND

    def test_root(self, client):
        data = client.get("/").json()
        assert data["mount_prefix"] == PREFIX
        assert data["documentation"] == "/docs"
