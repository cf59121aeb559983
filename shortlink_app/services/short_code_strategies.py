"""
Short code generation strategies for the shortlink service.
Uses Strategy Pattern so the allocator does not care how candidates are made.
"""

import secrets
import string
from abc import ABC, abstractmethod


# 64 symbols: one per 6-bit value, all safe in a URL path segment
URL_SAFE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Generate a candidate short code.

        The candidate is not checked for uniqueness; that is the
        allocator's job.
        """
        pass


class SecureRandomShortCodeStrategy(ShortCodeStrategy):
    """
    Cryptographically random codes over the URL-safe base64 alphabet.

    Draws one random byte per character and keeps its low 6 bits. Since
    the alphabet has exactly 64 symbols every character is uniform, unlike
    slicing a prefix out of an encoded string.

    Pros: Unpredictable, no coordination needed
    Cons: Needs an existence check per candidate
    """

    def __init__(self, length: int = 6):
        self.length = length

    def generate(self) -> str:
        return "".join(
            URL_SAFE_ALPHABET[byte & 0x3F] for byte in secrets.token_bytes(self.length)
        )
