"""Core business logic for shortlinks."""

from .shortcode import ShortCodeGenerator
from .service import LinkService

__all__ = ["ShortCodeGenerator", "LinkService"]
