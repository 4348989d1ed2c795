"""Token and identity records produced by the authorization code flow."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuthenticationMethod(str, Enum):
    """How an identity was authenticated."""

    OAUTH2 = "oauth2"


@dataclass(frozen=True)
class TokenRecord:
    """Access token returned by the token endpoint."""

    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"TokenRecord(access_token='***', token_type={self.token_type!r}, "
            f"expires_in={self.expires_in!r}, "
            f"refresh_token={'***' if self.refresh_token else None!r})"
        )


@dataclass(frozen=True)
class PartialIdentity:
    """Token-bearing identity shell handed to the caller.

    The user profile is not filled in here; ``user_id`` stays empty until a
    downstream step looks the user up with the access token.
    """

    provider_id: str
    token: TokenRecord
    auth_method: AuthenticationMethod = AuthenticationMethod.OAUTH2
    user_id: str = ""

    def __str__(self) -> str:
        return f"{self.provider_id} ({self.auth_method.value})"


def assemble_identity(provider_id: str, token: TokenRecord) -> PartialIdentity:
    """Tag a token record with its provider and authentication method."""
    return PartialIdentity(
        provider_id=provider_id,
        token=token,
        auth_method=AuthenticationMethod.OAUTH2,
    )
