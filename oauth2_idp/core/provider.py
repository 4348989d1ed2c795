"""Starlette integration for OAuth2 identity providers."""

import logging
import os
from typing import Awaitable, Callable, Dict, List, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from ..config.settings import OAuthConfig, ProviderSettings
from ..exceptions.auth import ConfigurationError
from ..providers.base import IdentityProvider
from ..providers.oauth2 import OAuth2Provider
from ..utils.urls import build_redirect_uri
from .auth import PartialIdentity
from .outcomes import AccessDenied, AuthorizationRedirect, FlowError
from .state import Cache, CsrfStateStore, InMemoryCache

logger = logging.getLogger(__name__)

SuccessHandler = Callable[[Request, PartialIdentity], Awaitable[Response]]


async def default_success_handler(request: Request, identity: PartialIdentity) -> Response:
    """Report a completed flow without exposing the token itself."""
    return JSONResponse({
        "provider": identity.provider_id,
        "auth_method": identity.auth_method.value,
        "token_type": identity.token.token_type,
        "expires_in": identity.token.expires_in,
    })


class OAuthProvider:
    """Mounts OAuth2 identity providers on a Starlette application."""

    def __init__(
        self,
        identity_providers: List[IdentityProvider],
        config: OAuthConfig = None,
        on_success: Optional[SuccessHandler] = None,
    ):
        self.identity_providers = identity_providers
        self.providers_by_id: Dict[str, IdentityProvider] = {p.id: p for p in identity_providers}
        self.config = config or OAuthConfig()
        self.on_success = on_success or default_success_handler

        self._validate_config()

    def _validate_config(self):
        """Validate OAuth configuration."""
        if not self.config.OAUTH_SECRET_KEY:
            raise ConfigurationError("OAUTH_SECRET_KEY is required", missing_config="OAUTH_SECRET_KEY")

        self.config.validate()

        if not self.identity_providers:
            raise ConfigurationError("At least one identity provider is required")

        if len(self.providers_by_id) != len(self.identity_providers):
            raise ConfigurationError("Identity provider ids must be unique")

    @classmethod
    def build(
        cls,
        provider_configs: Dict[str, Dict[str, str]],
        config: OAuthConfig,
        cache: Optional[Cache] = None,
        on_success: Optional[SuccessHandler] = None,
    ) -> "OAuthProvider":
        """Create OAuth2 providers sharing one CSRF state store.

        Args:
            provider_configs: Configuration mapping per provider id
            config: Process-wide settings
            cache: Cache backing the CSRF state; in-memory when omitted
            on_success: Coroutine turning a completed flow into a response
        """
        config.validate()
        state_store = CsrfStateStore(cache or InMemoryCache(), ttl=config.OAUTH_STATE_TTL)
        providers = [
            OAuth2Provider(
                provider_id,
                provider_config,
                state_store,
                timeout=config.OAUTH_EXCHANGE_TIMEOUT,
                session_key=config.OAUTH_SESSION_KEY,
            )
            for provider_id, provider_config in provider_configs.items()
        ]
        return cls(identity_providers=providers, config=config, on_success=on_success)

    @classmethod
    def from_env(
        cls,
        prefix: str = "OAUTH_",
        cache: Optional[Cache] = None,
        on_success: Optional[SuccessHandler] = None,
    ) -> "OAuthProvider":
        """Create OAuthProvider from environment variables.

        OAUTH_PROVIDERS lists the provider ids (comma separated); each one is
        configured through ProviderSettings.from_env.
        """
        config = OAuthConfig.from_env(prefix)

        provider_ids = [p.strip() for p in os.getenv(f"{prefix}PROVIDERS", "").split(",") if p.strip()]
        if not provider_ids:
            raise ConfigurationError(
                f"No identity providers configured. Set {prefix}PROVIDERS",
                missing_config=f"{prefix}PROVIDERS",
            )

        state_store = CsrfStateStore(cache or InMemoryCache(), ttl=config.OAUTH_STATE_TTL)
        providers = [
            OAuth2Provider(
                provider_id,
                {},
                state_store,
                timeout=config.OAUTH_EXCHANGE_TIMEOUT,
                session_key=config.OAUTH_SESSION_KEY,
                settings=ProviderSettings.from_env(provider_id),
            )
            for provider_id in provider_ids
        ]
        return cls(identity_providers=providers, config=config, on_success=on_success)

    def routes(self) -> List[Route]:
        """Authentication routes, one path parameter per provider id."""
        prefix = self.config.OAUTH_ROUTE_PREFIX.rstrip("/")
        return [
            Route(f"{prefix}/{{provider}}", self._authenticate, methods=["GET"], name="authenticate"),
        ]

    def middleware(self) -> List[Middleware]:
        """Create middleware stack for OAuth."""
        return [
            Middleware(
                SessionMiddleware,
                secret_key=self.config.OAUTH_SECRET_KEY,
                https_only=self.config.OAUTH_SSL_ENABLED,
            ),
        ]

    def create_app(self, debug: bool = False) -> Starlette:
        """Build a Starlette application serving the authentication routes."""
        return Starlette(debug=debug, routes=self.routes(), middleware=self.middleware())

    async def _authenticate(self, request: Request) -> Response:
        provider_id = request.path_params["provider"]
        provider = self.providers_by_id.get(provider_id)
        if provider is None:
            return JSONResponse({"error": "unknown_provider"}, status_code=404)

        redirect_uri = build_redirect_uri(
            request,
            provider_id,
            route_prefix=self.config.OAUTH_ROUTE_PREFIX,
            ssl_enabled=self.config.OAUTH_SSL_ENABLED,
        )
        outcome = await provider.authenticate(request.query_params, request.session, redirect_uri)

        if isinstance(outcome, AuthorizationRedirect):
            request.session[self.config.OAUTH_SESSION_KEY] = outcome.session_id
            return RedirectResponse(url=outcome.url, status_code=302)

        if isinstance(outcome, PartialIdentity):
            return await self.on_success(request, outcome)

        if isinstance(outcome, AccessDenied):
            return JSONResponse({"error": outcome.error_code}, status_code=403)

        if isinstance(outcome, FlowError):
            logger.info("Authentication with %s failed: %r", provider_id, outcome)
            return JSONResponse({"error": FlowError.error_code}, status_code=401)

        raise TypeError(f"Unexpected flow outcome: {outcome!r}")
