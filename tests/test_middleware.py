"""
Tests for request logging and security headers
"""

from unittest.mock import patch

from porchboard.core.middleware import REQUEST_ID_HEADER, SECURITY_HEADERS


def test_security_headers_on_success(client):
    response = client.get("/health")

    assert response.status_code == 200
    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def test_security_headers_on_error(client):
    response = client.get("/api/users/me")

    assert response.status_code == 401
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_request_id_is_generated(client):
    response = client.get("/health")

    assert response.headers[REQUEST_ID_HEADER]


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={REQUEST_ID_HEADER: "req-springfield-1"})

    assert response.headers[REQUEST_ID_HEADER] == "req-springfield-1"


def test_requests_are_logged(client):
    with patch("porchboard.core.middleware.logger") as mock_logger:
        client.get("/health", headers={REQUEST_ID_HEADER: "req-42"})

    mock_logger.info.assert_called_once()
    message = mock_logger.info.call_args.args[0]
    assert message.startswith("GET /health 200")
    assert "request_id=req-42" in message


def test_client_errors_are_logged_as_warnings(client):
    with patch("porchboard.core.middleware.logger") as mock_logger:
        client.get("/api/users/me", headers={"Authorization": "Bearer secret-token"})

    mock_logger.warning.assert_called_once()
    message = mock_logger.warning.call_args.args[0]
    assert message.startswith("GET /api/users/me 401")
    assert "secret-token" not in message
