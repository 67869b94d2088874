"""Validation utilities for link fields."""

from urllib.parse import urlparse
from typing import Optional, Tuple


MAX_URL_LENGTH = 2048
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if any(c.isspace() for c in url):
        return False, "URL must not contain whitespace"

    try:
        result = urlparse(url)

        if result.scheme not in ["http", "https"]:
            return False, "URL must use http or https protocol"

        if not result.netloc or not result.hostname:
            return False, "URL must have a valid domain"

        # Raises ValueError for a malformed port
        _ = result.port

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def is_valid_name(name: str) -> Tuple[bool, str]:
    """Validate a link display name (already trimmed)."""
    if not name or not isinstance(name, str):
        return False, "Link name is required"

    if len(name) > MAX_NAME_LENGTH:
        return False, f"Link name must be at most {MAX_NAME_LENGTH} characters"

    return True, ""


def is_valid_description(description: Optional[str]) -> Tuple[bool, str]:
    """Validate an optional link description (already trimmed)."""
    if description is None:
        return True, ""

    if not isinstance(description, str):
        return False, "Description must be a string"

    if len(description) > MAX_DESCRIPTION_LENGTH:
        return False, f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters"

    return True, ""
