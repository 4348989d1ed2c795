"""Access token exchange for the authorization code grant."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config.settings import ProviderSettings
from ..exceptions.auth import ExchangeTimeoutError, TokenExchangeError
from .auth import TokenRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0


def parse_token_response(payload: Any, provider: str = "") -> TokenRecord:
    """Build a :class:`TokenRecord` from a decoded token endpoint response.

    ``access_token`` must be a string. Optional fields of the wrong type are
    treated as absent.
    """
    if not isinstance(payload, dict):
        raise TokenExchangeError(
            "Token response is not a JSON object",
            provider=provider,
            provider_error=repr(payload)[:200],
        )

    access_token = payload.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise TokenExchangeError(
            "No access token in response",
            provider=provider,
            provider_error=str(payload.get("error") or sorted(payload.keys())),
        )

    expires_in = payload.get("expires_in")
    if isinstance(expires_in, bool) or not isinstance(expires_in, int):
        expires_in = None

    return TokenRecord(
        access_token=access_token,
        token_type=_optional_str(payload.get("token_type")),
        expires_in=expires_in,
        refresh_token=_optional_str(payload.get("refresh_token")),
    )


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class TokenExchangeClient:
    """Exchanges authorization codes at a provider's token endpoint.

    A code is single-use at most providers, so the request is never retried.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        provider: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the exchange client.

        Args:
            settings: Provider endpoints and credentials
            provider: Provider id used in logs and errors
            timeout: Seconds before the token request is abandoned
            client: Shared HTTP client; a short-lived one is opened per call if omitted
        """
        self.settings = settings
        self.provider = provider
        self.timeout = timeout
        self._client = client

    def _build_form(self, code: str, redirect_uri: str) -> Dict[str, str]:
        return {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }

    async def exchange(self, code: str, redirect_uri: str) -> TokenRecord:
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the callback
            redirect_uri: Same redirect URI used in the authorization request

        Returns:
            Parsed token record

        Raises:
            ExchangeTimeoutError: If the token endpoint did not answer in time
            TokenExchangeError: On transport errors or an unusable response
        """
        data = self._build_form(code, redirect_uri)
        headers = {"Accept": "application/json"}

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.settings.access_token_url,
                    data=data,
                    headers=headers,
                    timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.settings.access_token_url,
                        data=data,
                        headers=headers,
                    )
        except httpx.TimeoutException as e:
            logger.error(
                "Token request to %s timed out after %ss for provider %s",
                self.settings.access_token_url,
                self.timeout,
                self.provider,
            )
            raise ExchangeTimeoutError(
                f"Token request timed out: {e}",
                provider=self.provider,
                provider_error=str(e),
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "Error trying to get an access token for provider %s", self.provider, exc_info=True
            )
            raise TokenExchangeError(
                f"Failed to exchange code: {e}",
                provider=self.provider,
                provider_error=str(e),
            ) from e

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            logger.error(
                "Token endpoint of provider %s returned an unparseable body (status %s): %s",
                self.provider,
                response.status_code,
                response.text[:500],
            )
            raise TokenExchangeError(
                "Token response is not valid JSON",
                provider=self.provider,
                provider_error=response.text[:500],
            ) from e

        logger.debug(
            "Token endpoint of provider %s answered %s with keys %s",
            self.provider,
            response.status_code,
            sorted(payload.keys()) if isinstance(payload, dict) else type(payload).__name__,
        )

        try:
            token = parse_token_response(payload, provider=self.provider)
        except TokenExchangeError as e:
            logger.error(
                "Unusable token response from provider %s (status %s): %s",
                self.provider,
                response.status_code,
                e.provider_error,
            )
            raise

        logger.info("Access token obtained from provider %s", self.provider)
        return token
