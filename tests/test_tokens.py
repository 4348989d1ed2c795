"""Tests for core/tokens.py."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from oauth2_idp.config.settings import load_provider_settings
from oauth2_idp.core.auth import TokenRecord
from oauth2_idp.core.tokens import TokenExchangeClient, parse_token_response
from oauth2_idp.exceptions.auth import ExchangeTimeoutError, TokenExchangeError

from .conftest import ACCESS_TOKEN_URL, REDIRECT_URI, make_config, mock_token_endpoint, token_response


@pytest.fixture
def client():
    settings = load_provider_settings("example", make_config())
    return TokenExchangeClient(settings, provider="example", timeout=5)


class TestParseTokenResponse:
    def test_access_token_only(self):
        token = parse_token_response({"access_token": "abc123"})
        assert token == TokenRecord(access_token="abc123")
        assert token.token_type is None
        assert token.expires_in is None
        assert token.refresh_token is None

    def test_all_fields(self):
        token = parse_token_response({
            "access_token": "abc123",
            "token_type": "Bearer",
            "expires_in": 3600,
            "refresh_token": "refresh-xyz",
        })
        assert token.token_type == "Bearer"
        assert token.expires_in == 3600
        assert token.refresh_token == "refresh-xyz"

    @pytest.mark.parametrize("payload", [
        {},
        {"access_token": None},
        {"access_token": 42},
        {"access_token": ""},
        {"error": "invalid_grant"},
    ])
    def test_missing_or_invalid_access_token(self, payload):
        with pytest.raises(TokenExchangeError):
            parse_token_response(payload)

    def test_not_an_object(self):
        with pytest.raises(TokenExchangeError, match="JSON object"):
            parse_token_response(["abc123"])

    def test_wrongly_typed_optional_fields_are_dropped(self):
        token = parse_token_response({
            "access_token": "abc123",
            "token_type": 1,
            "expires_in": "3600",
            "refresh_token": ["r"],
        })
        assert token == TokenRecord(access_token="abc123")

    def test_boolean_expires_in_is_dropped(self):
        token = parse_token_response({"access_token": "abc123", "expires_in": True})
        assert token.expires_in is None

    def test_error_detail_kept_for_logs(self):
        with pytest.raises(TokenExchangeError) as exc_info:
            parse_token_response({"error": "invalid_grant"}, provider="example")
        assert exc_info.value.provider == "example"
        assert exc_info.value.provider_error == "invalid_grant"


class TestTokenExchangeClient:
    async def test_posts_form(self, client):
        with mock_token_endpoint(token_response({"access_token": "abc123"})) as mock_client:
            token = await client.exchange("the-code", REDIRECT_URI)

        assert token.access_token == "abc123"
        args, kwargs = mock_client.post.call_args
        assert args[0] == ACCESS_TOKEN_URL
        assert kwargs["data"] == {
            "client_id": "client-123",
            "client_secret": "secret-456",
            "grant_type": "authorization_code",
            "code": "the-code",
            "redirect_uri": REDIRECT_URI,
        }
        assert kwargs["headers"]["Accept"] == "application/json"

    async def test_posts_once(self, client):
        with mock_token_endpoint(side_effect=httpx.ConnectError("refused")) as mock_client:
            with pytest.raises(TokenExchangeError):
                await client.exchange("the-code", REDIRECT_URI)
        assert mock_client.post.call_count == 1

    async def test_timeout(self, client):
        with mock_token_endpoint(side_effect=httpx.ReadTimeout("too slow")):
            with pytest.raises(ExchangeTimeoutError) as exc_info:
                await client.exchange("the-code", REDIRECT_URI)
        assert exc_info.value.error_code == "token_exchange_failed"

    async def test_client_configured_with_timeout(self, client):
        with patch("httpx.AsyncClient") as mock_client_cls:
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(return_value=token_response({"access_token": "abc123"}))
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=False)
            mock_client_cls.return_value = mock_client

            await client.exchange("the-code", REDIRECT_URI)

        mock_client_cls.assert_called_once_with(timeout=5)

    async def test_non_json_body(self, client):
        resp = token_response(
            json_error=json.JSONDecodeError("Expecting value", "<html>", 0),
            status_code=502,
            text="<html>Bad gateway</html>",
        )
        with mock_token_endpoint(resp):
            with pytest.raises(TokenExchangeError) as exc_info:
                await client.exchange("the-code", REDIRECT_URI)
        assert "Bad gateway" in exc_info.value.provider_error

    async def test_deeply_nested_body(self, client):
        body = b"[" * 200000 + b"]" * 200000
        resp = httpx.Response(200, content=body, request=httpx.Request("POST", ACCESS_TOKEN_URL))
        with mock_token_endpoint(resp):
            with pytest.raises(TokenExchangeError, match="not valid JSON"):
                await client.exchange("the-code", REDIRECT_URI)

    async def test_error_response(self, client):
        resp = token_response({"error": "invalid_grant"}, status_code=400)
        with mock_token_endpoint(resp):
            with pytest.raises(TokenExchangeError, match="No access token"):
                await client.exchange("the-code", REDIRECT_URI)

    async def test_shared_client(self):
        shared = AsyncMock()
        shared.post = AsyncMock(return_value=token_response({"access_token": "abc123"}))
        settings = load_provider_settings("example", make_config())
        client = TokenExchangeClient(settings, provider="example", timeout=7, client=shared)

        token = await client.exchange("the-code", REDIRECT_URI)

        assert token.access_token == "abc123"
        assert shared.post.call_args.kwargs["timeout"] == 7
