"""Short code generation utilities."""

import secrets
import string


SHORT_CODE_LENGTH = 6


class ShortCodeGenerator:
    """Generate random short codes for links."""

    # Base62 characters (alphanumeric, case-sensitive)
    ALPHABET = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(self, length: int = SHORT_CODE_LENGTH):
        """Initialize short code generator.

        Args:
            length: Number of symbols per code
        """
        self.length = length

    def generate_random(self) -> str:
        """Generate a random short code.

        Each symbol is drawn independently and uniformly from the alphabet.

        Returns:
            Random short code
        """
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(self.length))

    @classmethod
    def is_valid_format(cls, code: str, length: int = SHORT_CODE_LENGTH) -> bool:
        """Check if code has the allocated format.

        Args:
            code: Code to validate
            length: Expected code length

        Returns:
            True if the code is exactly `length` base62 symbols
        """
        if not isinstance(code, str) or len(code) != length:
            return False
        return all(c in cls.ALPHABET for c in code)
