"""Shared fixtures for oauth2-idp tests."""

from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from oauth2_idp.config.settings import OAuthConfig
from oauth2_idp.core.state import CsrfStateStore, InMemoryCache
from oauth2_idp.providers.oauth2 import OAuth2Provider

AUTHORIZATION_URL = "https://provider.example.com/oauth/authorize"
ACCESS_TOKEN_URL = "https://provider.example.com/oauth/token"
REDIRECT_URI = "https://app.example.com/authenticate/example"
SECRET_KEY = "test-secret-key-0123456789abcdefghijklmnop"


def make_config(provider_id="example", **overrides):
    config = {
        f"oauth2.{provider_id}.authorizationUrl": AUTHORIZATION_URL,
        f"oauth2.{provider_id}.accessTokenUrl": ACCESS_TOKEN_URL,
        f"oauth2.{provider_id}.clientId": "client-123",
        f"oauth2.{provider_id}.clientSecret": "secret-456",
    }
    for key, value in overrides.items():
        full_key = f"oauth2.{provider_id}.{key}"
        if value is None:
            config.pop(full_key, None)
        else:
            config[full_key] = value
    return config


def token_response(payload=None, status_code=200, json_error=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


@contextmanager
def mock_token_endpoint(response=None, side_effect=None):
    """Patch httpx.AsyncClient so the token POST returns ``response``."""
    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        if side_effect is not None:
            mock_client.post = AsyncMock(side_effect=side_effect)
        else:
            mock_client.post = AsyncMock(return_value=response)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client_cls.return_value = mock_client
        yield mock_client


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def store(cache):
    return CsrfStateStore(cache, ttl=300)


@pytest.fixture
def provider(store):
    return OAuth2Provider("example", make_config(), store)


@pytest.fixture
def oauth_config():
    return OAuthConfig(OAUTH_SECRET_KEY=SECRET_KEY)
