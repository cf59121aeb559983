"""
Error taxonomy for the shortlink core.

InvalidURLError and LinkNotFoundError are expected conditions the caller
can act on. GenerationExhaustedError and StorageError are server-side
failures and are never retried at this layer.
"""


class ShortlinkError(Exception):
    """Base class for every error raised by the shortlink core."""


class InvalidURLError(ShortlinkError):
    """The URL is too short or does not use the http(s) scheme."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            "Invalid URL format. URL must start with http:// or https://"
        )


class LinkNotFoundError(ShortlinkError):
    """No link is stored under the given short code."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short link not found: {short_code}")


class GenerationExhaustedError(ShortlinkError):
    """Every allocation attempt collided with an existing code."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate unique short code after {attempts} attempts"
        )


class StorageError(ShortlinkError):
    """The underlying store failed."""
