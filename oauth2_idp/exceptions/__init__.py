"""OAuth2 identity provider exceptions."""

from .auth import (
    OAuthError,
    ConfigurationError,
    ProviderError,
    TokenExchangeError,
    ExchangeTimeoutError,
)

__all__ = [
    "OAuthError",
    "ConfigurationError",
    "ProviderError",
    "TokenExchangeError",
    "ExchangeTimeoutError",
]
