"""OAuth2 authorization code flow."""

import logging
from typing import Any, Mapping, Optional

import httpx

from .base import IdentityProvider
from ..config.settings import ProviderSettings, load_provider_settings
from ..core.auth import AuthenticationMethod, TokenRecord, assemble_identity
from ..core.outcomes import (
    AccessDenied,
    AuthorizationRedirect,
    AuthorizationServerError,
    FlowOutcome,
    MissingOrMismatchedState,
    Timeout,
    TokenExchangeFailure,
)
from ..core.state import CsrfStateStore
from ..core.tokens import DEFAULT_TIMEOUT, TokenExchangeClient
from ..exceptions.auth import ExchangeTimeoutError, TokenExchangeError
from ..utils.crypto import generate_session_id, generate_state_token
from ..utils.urls import append_query

logger = logging.getLogger(__name__)

ACCESS_DENIED = "access_denied"
DEFAULT_SESSION_KEY = "sid"


def first_param(query: Mapping[str, str], name: str) -> Optional[str]:
    """Return the first value of a query parameter.

    Multi-dicts such as Starlette's ``QueryParams`` return the last value
    from ``get``; repeated parameters resolve to the first one here.
    """
    getlist = getattr(query, "getlist", None)
    if getlist is not None:
        values = getlist(name)
        return values[0] if values else None
    return query.get(name)


class OAuth2Provider(IdentityProvider):
    """Identity provider driving the OAuth2 authorization code grant.

    Each request is routed by its query parameters:

    * ``error`` - the authorization server refused; nothing else is looked at.
    * ``code`` - callback; the ``state`` parameter must equal the state stored
      for the session before the code is exchanged.
    * neither - start the flow and redirect to the authorization endpoint.

    Usage:
        store = CsrfStateStore(InMemoryCache(), ttl=300)
        provider = OAuth2Provider("github", config, store)
        outcome = await provider.authenticate(query, session, redirect_uri)
    """

    def __init__(
        self,
        provider_id: str,
        config: Mapping[str, Any],
        state_store: CsrfStateStore,
        timeout: float = DEFAULT_TIMEOUT,
        session_key: str = DEFAULT_SESSION_KEY,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[ProviderSettings] = None,
    ):
        """Initialize the provider.

        Args:
            provider_id: Provider id, also the configuration namespace
            config: Key-value configuration source holding the provider keys
            state_store: Store correlating redirects with callbacks
            timeout: Seconds bounding the token request
            session_key: Session entry that holds the session id
            http_client: Optional shared HTTP client for the token request
            settings: Pre-built settings; ``config`` is ignored when given

        Raises:
            ConfigurationError: If a required provider key is missing
        """
        super().__init__(provider_id)
        self.settings = settings or load_provider_settings(provider_id, config)
        self.state_store = state_store
        self.session_key = session_key
        self.token_client = TokenExchangeClient(
            self.settings,
            provider=provider_id,
            timeout=timeout,
            client=http_client,
        )

    @property
    def auth_method(self) -> AuthenticationMethod:
        return AuthenticationMethod.OAUTH2

    def get_authorization_url(self, redirect_uri: str, state: str) -> str:
        """Build the authorization endpoint URL for a new flow.

        Args:
            redirect_uri: OAuth callback URL
            state: State parameter for CSRF protection

        Returns:
            Authorization URL
        """
        params = [
            ("client_id", self.settings.client_id),
            ("redirect_uri", redirect_uri),
            ("response_type", "code"),
            ("state", state),
        ]
        if self.settings.scope:
            params.append(("scope", self.settings.scope))

        return append_query(self.settings.authorization_url, params)

    async def exchange_code_for_token(self, code: str, redirect_uri: str) -> TokenRecord:
        """Exchange authorization code for access token."""
        return await self.token_client.exchange(code, redirect_uri)

    async def authenticate(
        self,
        query: Mapping[str, str],
        session: Mapping[str, Any],
        redirect_uri: str,
    ) -> FlowOutcome:
        """Run one step of the authorization code flow.

        Args:
            query: Query parameters of the incoming request
            session: Session data of the incoming request
            redirect_uri: This provider's callback URL

        Returns:
            An AuthorizationRedirect, a PartialIdentity or a FlowError
        """
        error = first_param(query, "error")
        if error is not None:
            if error == ACCESS_DENIED:
                logger.info("User denied access at provider %s", self.id)
                return AccessDenied()
            logger.error(
                "Error '%s' returned by the authorization server. Provider is %s", error, self.id
            )
            return AuthorizationServerError(message=error, provider_id=self.id)

        code = first_param(query, "code")
        if code is not None:
            return await self._complete(code, query, session, redirect_uri)

        return self._initiate(session, redirect_uri)

    def _initiate(self, session: Mapping[str, Any], redirect_uri: str) -> AuthorizationRedirect:
        state = generate_state_token()
        session_id = session.get(self.session_key) or generate_session_id()
        self.state_store.put(session_id, state)

        url = self.get_authorization_url(redirect_uri, state)
        logger.debug("authorizationUrl = %s", self.settings.authorization_url)
        logger.debug("Redirecting to: [%s]", url)
        return AuthorizationRedirect(url=url, session_id=session_id, state=state)

    async def _complete(
        self,
        code: str,
        query: Mapping[str, str],
        session: Mapping[str, Any],
        redirect_uri: str,
    ) -> FlowOutcome:
        session_id = session.get(self.session_key)
        if not session_id:
            logger.warning("Callback for provider %s without a session id", self.id)
            return MissingOrMismatchedState()

        original_state = self.state_store.get(session_id)
        if original_state is None:
            logger.warning(
                "No stored state for session %s at provider %s (expired or issued elsewhere)",
                session_id,
                self.id,
            )
            return MissingOrMismatchedState()

        current_state = first_param(query, "state")
        if current_state is None or current_state != original_state:
            logger.warning("State mismatch for session %s at provider %s", session_id, self.id)
            return MissingOrMismatchedState()

        try:
            token = await self.exchange_code_for_token(code, redirect_uri)
        except ExchangeTimeoutError as e:
            return Timeout(cause=str(e))
        except TokenExchangeError as e:
            return TokenExchangeFailure(cause=str(e))

        identity = assemble_identity(self.id, token)
        logger.debug("Authenticated %s", identity)
        return identity
