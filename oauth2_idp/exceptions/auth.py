"""OAuth2 identity provider exceptions."""

from typing import List, Optional


class OAuthError(Exception):
    """Base exception for OAuth errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigurationError(OAuthError):
    """Raised when a provider or the package is misconfigured.

    Raised at construction time so a broken provider never serves a request.
    """

    def __init__(
        self,
        message: str,
        missing_config: Optional[str] = None,
        provider: Optional[str] = None,
        missing_keys: Optional[List[str]] = None,
    ):
        super().__init__(message, "configuration_error")
        self.provider = provider
        self.missing_keys = list(missing_keys or [])
        self.missing_config = missing_config or (self.missing_keys[0] if self.missing_keys else None)


class ProviderError(OAuthError):
    """Raised when the identity provider misbehaves."""

    def __init__(
        self,
        message: str,
        provider: str,
        provider_error: Optional[str] = None,
        error_code: str = "provider_error",
    ):
        super().__init__(message, error_code)
        self.provider = provider
        self.provider_error = provider_error


class TokenExchangeError(ProviderError):
    """Raised when the authorization code could not be exchanged for a token."""

    def __init__(self, message: str, provider: str, provider_error: Optional[str] = None):
        super().__init__(message, provider, provider_error, "token_exchange_failed")


class ExchangeTimeoutError(TokenExchangeError):
    """Raised when the token endpoint does not answer within the timeout."""
