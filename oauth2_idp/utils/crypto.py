"""Cryptographic utilities."""

import secrets
import uuid


def generate_state_token(length: int = 32) -> str:
    """Generate an unpredictable state token for the authorization redirect.

    Args:
        length: Number of random bytes; the token is their URL-safe base64 form
    """
    return secrets.token_urlsafe(length)


def generate_session_id() -> str:
    """Generate an opaque session identifier."""
    return str(uuid.uuid4())
