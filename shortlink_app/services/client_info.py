"""Request metadata shared by the redirect and creation handlers."""

from typing import Mapping, Optional

# Checked in order, first non-empty wins. The value is kept verbatim,
# a X-Forwarded-For chain is not split.
CLIENT_IP_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "clientip")


def get_client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """Best-effort client IP from proxy headers, None when none is present."""
    headers_lower = {k.lower(): v for k, v in headers.items()}
    for name in CLIENT_IP_HEADERS:
        value = headers_lower.get(name)
        if value:
            return value
    return None
