"""Validation for link creation requests."""

import ipaddress
import re
from typing import Optional
from urllib.parse import unquote, urlsplit

from shortlink_app.services.errors import LinkValidationError

URL_PATTERN = re.compile(r"^https?://.{3,}", re.IGNORECASE)
FILE_EXTENSION_SUFFIX = re.compile(r"\.[a-zA-Z]{1,8}\Z")
# Characters that can never appear in a domain name, checked after percent-decoding
FORBIDDEN_HOST_CHARACTERS = frozenset("\x00\t\n\r #%/:<>?@[\\]^|\x7f")

MIN_SLUG_LENGTH = 2
MAX_SLUG_LENGTH = 10

# Paths served by the service itself, a link under them could never be reached
RESERVED_SLUGS = frozenset({"create", "health", "docs", "redoc"})

INVALID_URL_MESSAGE = "Invalid format: url."
INVALID_SLUG_MESSAGE = (
    f"Illegal length: slug (>={MIN_SLUG_LENGTH} && <={MAX_SLUG_LENGTH}), "
    "or not ending with a file extension."
)
SAME_DOMAIN_MESSAGE = "You cannot shorten a link to the same domain."


def validate_url(url: Optional[str]) -> str:
    if not url or not URL_PATTERN.match(url):
        raise LinkValidationError(INVALID_URL_MESSAGE)
    return url


def validate_slug(slug: str) -> str:
    """
    Check a custom slug.

    Length must be within bounds and the slug must not look like a file
    name (``.png``, ``.html``...), those paths belong to static assets.
    """
    if not MIN_SLUG_LENGTH <= len(slug) <= MAX_SLUG_LENGTH or FILE_EXTENSION_SUFFIX.search(slug):
        raise LinkValidationError(INVALID_SLUG_MESSAGE)
    if slug in RESERVED_SLUGS:
        raise LinkValidationError(f"Slug is reserved: {slug}")
    return slug


def target_hostname(url: str) -> str:
    """
    Host of the target URL, lowercased and percent-decoded.

    Raises on an unparseable authority: bad port, bad IPv6 literal, no host,
    or a host holding characters no domain can contain.
    """
    try:
        parts = urlsplit(url)
        # .port raises ValueError on a non-numeric or out of range port
        hostname, _port = parts.hostname, parts.port
    except ValueError as e:
        raise LinkValidationError(INVALID_URL_MESSAGE) from e

    if not hostname:
        raise LinkValidationError(INVALID_URL_MESSAGE)

    # Only a bracketed IPv6 literal leaves a colon in the hostname
    if ":" in hostname:
        try:
            ipaddress.IPv6Address(hostname)
        except ValueError as e:
            raise LinkValidationError(INVALID_URL_MESSAGE) from e
        return hostname

    hostname = unquote(hostname).lower()
    if any(ch in FORBIDDEN_HOST_CHARACTERS or ord(ch) < 0x20 for ch in hostname):
        raise LinkValidationError(INVALID_URL_MESSAGE)

    if not hostname.isascii():
        try:
            hostname.encode("idna")
        except UnicodeError as e:
            raise LinkValidationError(INVALID_URL_MESSAGE) from e
    return hostname


def reject_same_host(url: str, request_host: Optional[str]) -> None:
    """Refuse to shorten links that point back at this service."""
    hostname = target_hostname(url)
    if request_host and hostname == request_host.lower():
        raise LinkValidationError(SAME_DOMAIN_MESSAGE)
