"""Identity providers."""

from .base import IdentityProvider
from .oauth2 import OAuth2Provider

__all__ = [
    "IdentityProvider",
    "OAuth2Provider",
]
