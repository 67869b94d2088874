"""Common utilities for shortlinks."""

from .validators import is_valid_url, is_valid_name, is_valid_description
from .headers import extract_forwarded_headers, build_base_url, get_header, get_client_ip
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_name",
    "is_valid_description",
    "extract_forwarded_headers",
    "build_base_url",
    "get_header",
    "get_client_ip",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
