"""Outcomes of a single authorization flow step.

A call to ``IdentityProvider.authenticate`` returns exactly one of:

* :class:`AuthorizationRedirect` - send the browser to the provider;
* :class:`~oauth2_idp.core.auth.PartialIdentity` - the flow succeeded;
* a :class:`FlowError` subclass - the flow failed and must be restarted.
"""

from dataclasses import dataclass
from typing import Union

from .auth import PartialIdentity


@dataclass(frozen=True)
class AuthorizationRedirect:
    """Redirect to the authorization endpoint.

    ``session_id`` must be written into the outgoing session so the browser
    sends it back with the callback.
    """

    url: str
    session_id: str
    state: str


@dataclass(frozen=True)
class FlowError:
    """Base class of failed flow outcomes."""

    error_code = "authentication_failed"


@dataclass(frozen=True)
class AccessDenied(FlowError):
    """The user declined to grant access."""

    error_code = "access_denied"


@dataclass(frozen=True)
class AuthorizationServerError(FlowError):
    """The authorization server reported an error other than access_denied."""

    message: str
    provider_id: str


@dataclass(frozen=True)
class MissingOrMismatchedState(FlowError):
    """The callback could not be correlated with a redirect we issued."""


@dataclass(frozen=True)
class TokenExchangeFailure(FlowError):
    """The code could not be exchanged for an access token.

    ``cause`` is for server-side logs only.
    """

    cause: str = ""


@dataclass(frozen=True)
class Timeout(TokenExchangeFailure):
    """The token endpoint did not answer in time."""


FlowOutcome = Union[AuthorizationRedirect, PartialIdentity, FlowError]
