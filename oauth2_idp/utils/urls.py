"""URL utilities."""

import re
import urllib.parse
from typing import List, Tuple

from starlette.requests import Request


def detect_base_url(request: Request) -> str:
    """Detect the actual base URL from request headers.

    This handles proxies like ngrok that set x-forwarded-* headers.

    Args:
        request: Starlette request object

    Returns:
        Base URL (e.g., 'https://example.com' or 'http://localhost:8000')
    """
    # Check for proxy headers (ngrok, load balancers, etc.)
    if "x-forwarded-proto" in request.headers and "x-forwarded-host" in request.headers:
        protocol = request.headers["x-forwarded-proto"]
        host = request.headers["x-forwarded-host"]
        return f"{protocol}://{host}"

    if "x-forwarded-proto" in request.headers:
        protocol = request.headers["x-forwarded-proto"]
        host = request.headers.get("host", request.url.netloc)
        return f"{protocol}://{host}"

    # Forwarded header (RFC 7239)
    forwarded = request.headers.get("forwarded")
    if forwarded:
        proto_match = re.search(r"proto=([^;,\s]+)", forwarded)
        host_match = re.search(r"host=([^;,\s]+)", forwarded)
        if proto_match and host_match:
            return f"{proto_match.group(1)}://{host_match.group(1)}"

    # Fallback to direct connection
    return f"{request.url.scheme}://{request.url.netloc}"


def build_redirect_uri(
    request: Request,
    provider: str,
    route_prefix: str = "/authenticate",
    ssl_enabled: bool = False,
) -> str:
    """Build the absolute callback URL of a provider.

    Args:
        request: Incoming request, used to detect the public base URL
        provider: Provider id (e.g. 'github')
        route_prefix: Path the authentication routes are mounted under
        ssl_enabled: Force the https scheme

    Returns:
        Redirect URI registered with the authorization server
    """
    base_url = detect_base_url(request)
    if ssl_enabled:
        parts = urllib.parse.urlsplit(base_url)
        base_url = urllib.parse.urlunsplit(("https", parts.netloc, parts.path, "", ""))
    return f"{base_url.rstrip('/')}{route_prefix.rstrip('/')}/{provider}"


def append_query(url: str, params: List[Tuple[str, str]]) -> str:
    """Append percent-encoded query parameters to ``url``.

    Every value is encoded on its own as UTF-8; spaces become ``%20``.
    """
    query = urllib.parse.urlencode(params, quote_via=urllib.parse.quote, safe="")
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    if url.endswith(("?", "&")):
        separator = ""
    return f"{url}{separator}{query}"
