"""Core OAuth2 authorization code functionality."""

from .auth import AuthenticationMethod, PartialIdentity, TokenRecord, assemble_identity
from .outcomes import (
    AccessDenied,
    AuthorizationRedirect,
    AuthorizationServerError,
    FlowError,
    FlowOutcome,
    MissingOrMismatchedState,
    Timeout,
    TokenExchangeFailure,
)
from .state import Cache, CsrfState, CsrfStateStore, InMemoryCache
from .tokens import TokenExchangeClient, parse_token_response
from .provider import OAuthProvider

__all__ = [
    "AuthenticationMethod",
    "PartialIdentity",
    "TokenRecord",
    "assemble_identity",
    "AccessDenied",
    "AuthorizationRedirect",
    "AuthorizationServerError",
    "FlowError",
    "FlowOutcome",
    "MissingOrMismatchedState",
    "Timeout",
    "TokenExchangeFailure",
    "Cache",
    "CsrfState",
    "CsrfStateStore",
    "InMemoryCache",
    "TokenExchangeClient",
    "parse_token_response",
    "OAuthProvider",
]
