"""Tests for the shared HTTP helpers."""

from unittest.mock import patch, MagicMock

import requests

from constants import Constants
from common import http_client


def _response(status=200, text="{}", headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = headers or {}
    return resp


class TestGetJson:
    """Test GET with parsing, retries and caching."""

    @patch('common.http_client.requests.request')
    def test_parses_json_body(self, mock_request):
        mock_request.return_value = _response(200, '{"a": 1}', {"X": "y"})
        status, headers, data = http_client.get_json("https://api.example.com/x")
        assert status == 200
        assert headers == {"X": "y"}
        assert data == {"a": 1}

    @patch('common.http_client.requests.request')
    def test_invalid_json_returns_none(self, mock_request):
        mock_request.return_value = _response(200, "not json")
        status, _, data = http_client.get_json("https://api.example.com/x")
        assert status == 200
        assert data is None

    @patch('common.http_client.requests.request')
    def test_non_2xx_not_parsed(self, mock_request):
        mock_request.return_value = _response(404, '{"message": "Not Found"}')
        status, _, data = http_client.get_json("https://api.example.com/x")
        assert status == 404
        assert data is None

    @patch('common.http_client.requests.request')
    def test_retries_server_errors(self, mock_request):
        """Test 5xx responses are retried until success."""
        mock_request.side_effect = [_response(502, ""), _response(200, "[1]")]
        status, _, data = http_client.get_json("https://api.example.com/x")
        assert status == 200
        assert data == [1]
        assert mock_request.call_count == 2

    @patch('common.http_client.requests.request')
    def test_transport_failure_returns_status_zero(self, mock_request):
        """Test exhausted retries never raise or exit."""
        mock_request.side_effect = requests.ConnectionError("down")
        status, headers, data = http_client.get_json("https://api.example.com/x")
        assert status == 0
        assert headers == {}
        assert data is None
        assert mock_request.call_count == Constants.HTTP_RETRY_MAX

    @patch('common.http_client.requests.request')
    def test_get_is_cached(self, mock_request):
        mock_request.return_value = _response(200, '{"a": 1}')
        http_client.get_json("https://api.example.com/cached")
        http_client.get_json("https://api.example.com/cached")
        assert mock_request.call_count == 1


class TestPostJson:
    """Test POST helper."""

    @patch('common.http_client.requests.request')
    def test_sends_payload_and_is_not_cached(self, mock_request):
        mock_request.return_value = _response(200, '{"ok": true}')
        http_client.post_json("https://api.example.com/q", {"q": 1}, headers={"A": "b"})
        http_client.post_json("https://api.example.com/q", {"q": 1}, headers={"A": "b"})
        assert mock_request.call_count == 2
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.example.com/q")
        assert kwargs["json"] == {"q": 1}
        assert kwargs["headers"] == {"A": "b"}
        assert kwargs["timeout"] == Constants.REQUEST_TIMEOUT
