"""Base identity provider interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from ..core.auth import AuthenticationMethod
from ..core.outcomes import FlowOutcome


class IdentityProvider(ABC):
    """Base class for identity providers."""

    def __init__(self, provider_id: str):
        self._id = provider_id

    @property
    def id(self) -> str:
        """Provider id (e.g., 'google', 'github')."""
        return self._id

    @property
    @abstractmethod
    def auth_method(self) -> AuthenticationMethod:
        """Authentication method of identities issued by this provider."""
        pass

    @abstractmethod
    async def authenticate(
        self,
        query: Mapping[str, str],
        session: Mapping[str, Any],
        redirect_uri: str,
    ) -> FlowOutcome:
        """Run one step of the authentication flow for an incoming request."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
