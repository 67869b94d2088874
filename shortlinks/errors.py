"""Exception types raised by the link service and stores."""

from typing import Optional


class LinkError(Exception):
    """Base class for link service errors."""


class ValidationError(LinkError):
    """Input failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ShortCodeConflict(LinkError):
    """Short code already taken at insert time."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' already exists")
        self.short_code = short_code


class AllocationExhausted(LinkError):
    """No free short code found within the retry budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Unable to allocate a unique short code after {attempts} attempts")
        self.attempts = attempts


class LinkNotFound(LinkError):
    """No link for the given short code or id/owner pair."""


class StoreUnavailable(LinkError):
    """The backing store timed out or could not be reached."""
