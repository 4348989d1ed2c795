"""
oauth2-idp - OAuth2 authorization code identity providers

This package drives a user through the OAuth2 authorization code grant:
it redirects to the provider with a CSRF state token, validates the
callback against the state stored for the session, exchanges the code
for an access token and returns a partial identity.

Quick Start:
    from oauth2_idp import OAuthConfig, OAuthProvider

    config = OAuthConfig(OAUTH_SECRET_KEY="...", OAUTH_SSL_ENABLED=True)
    oauth = OAuthProvider.build(
        {
            "github": {
                "oauth2.github.authorizationUrl": "https://github.com/login/oauth/authorize",
                "oauth2.github.accessTokenUrl": "https://github.com/login/oauth/access_token",
                "oauth2.github.clientId": "...",
                "oauth2.github.clientSecret": "...",
                "oauth2.github.scope": "user:email",
            }
        },
        config,
    )
    app = oauth.create_app()
"""

__version__ = "1.0.0"
__author__ = "oauth2-idp Contributors"
__license__ = "MIT"

# Core exports
from .core.auth import AuthenticationMethod, PartialIdentity, TokenRecord, assemble_identity
from .core.outcomes import (
    AccessDenied,
    AuthorizationRedirect,
    AuthorizationServerError,
    FlowError,
    FlowOutcome,
    MissingOrMismatchedState,
    Timeout,
    TokenExchangeFailure,
)
from .core.state import Cache, CsrfState, CsrfStateStore, InMemoryCache
from .core.tokens import TokenExchangeClient
from .core.provider import OAuthProvider

# Identity providers
from .providers.base import IdentityProvider
from .providers.oauth2 import OAuth2Provider

# Exceptions
from .exceptions.auth import (
    OAuthError,
    ConfigurationError,
    ProviderError,
    TokenExchangeError,
    ExchangeTimeoutError,
)

# Configuration
from .config.settings import OAuthConfig, ProviderSettings, load_provider_settings

__all__ = [
    # Core
    "OAuthProvider",
    "AuthenticationMethod",
    "PartialIdentity",
    "TokenRecord",
    "assemble_identity",
    "TokenExchangeClient",

    # Outcomes
    "AuthorizationRedirect",
    "FlowError",
    "FlowOutcome",
    "AccessDenied",
    "AuthorizationServerError",
    "MissingOrMismatchedState",
    "TokenExchangeFailure",
    "Timeout",

    # State
    "Cache",
    "CsrfState",
    "CsrfStateStore",
    "InMemoryCache",

    # Providers
    "IdentityProvider",
    "OAuth2Provider",

    # Exceptions
    "OAuthError",
    "ConfigurationError",
    "ProviderError",
    "TokenExchangeError",
    "ExchangeTimeoutError",

    # Config
    "OAuthConfig",
    "ProviderSettings",
    "load_provider_settings",
]
