"""
Service-layer exceptions.

Routes translate these into HTTP responses; nothing below the route layer
knows about status codes.
"""


class ShortLinkError(Exception):
    """Base class for expected short link failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LinkValidationError(ShortLinkError):
    """Malformed URL, slug or request body."""


class SlugConflictError(ShortLinkError):
    """Slug is already mapped to a different URL."""

    def __init__(self, slug: str):
        super().__init__("Slug already exists.")
        self.slug = slug


class LinkPersistenceError(ShortLinkError):
    """Insert failed for a reason other than a duplicate slug."""
