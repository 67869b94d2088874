"""Header parsing utilities for shortlinks."""

from typing import Dict, Optional


def extract_forwarded_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers dictionary

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    # Convert headers to lowercase for case-insensitive lookup
    headers_lower = {k.lower(): v for k, v in headers.items()}

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def build_base_url(
    headers: Dict[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build base URL from headers or fallback.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Args:
        headers: Request headers
        fallback_base_url: Fallback base URL from configuration
        request_scheme: Request scheme (http/https)
        request_host: Request host

    Returns:
        Base URL (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    # Proxy-supplied scheme and host win
    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        proto = forwarded["forwarded_proto"]
        host = forwarded["forwarded_host"]
        return f"{proto}://{host}"

    # Request scheme and host
    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    # Configured base URL
    return fallback_base_url.rstrip("/")


def get_header(headers: Dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup returning a stripped, non-empty value or None."""
    # Header names are case-insensitive
    wanted = name.lower()
    for k, v in headers.items():
        if k.lower() == wanted and v and v.strip():
            return v.strip()
    return None


def get_client_ip(headers: Dict[str, str], peer_host: Optional[str] = None) -> str:
    """Originating client address.

    Args:
        headers: Request headers
        peer_host: Address of the directly connected peer

    Returns:
        First X-Forwarded-For hop, else the peer address, else "unknown"
    """
    forwarded_for = extract_forwarded_headers(headers)["forwarded_for"]

    # Left-most entry is the original client
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    return peer_host or "unknown"
