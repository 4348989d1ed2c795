"""Utility functions for oauth2-idp."""

from .crypto import generate_session_id, generate_state_token
from .urls import append_query, build_redirect_uri, detect_base_url

__all__ = [
    "generate_session_id",
    "generate_state_token",
    "append_query",
    "build_redirect_uri",
    "detect_base_url",
]
