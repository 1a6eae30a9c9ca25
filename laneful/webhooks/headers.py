"""Locate the webhook signature among request headers."""

from __future__ import annotations

from typing import Mapping, Optional, Tuple

SIGNATURE_HEADER = "x-webhook-signature"

# Raw header name, WSGI/CGI-style environ key, and the same key with the HTTP_ prefix.
SIGNATURE_HEADER_KEYS: Tuple[str, ...] = (
    SIGNATURE_HEADER,
    SIGNATURE_HEADER.upper().replace("-", "_"),
    "HTTP_" + SIGNATURE_HEADER.upper().replace("-", "_"),
)


def get_signature_header_name() -> str:
    return SIGNATURE_HEADER


def extract_signature_from_headers(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Return the signature header value, or None when it is absent.

    The three accepted spellings are tried in order with an exact lookup first.
    If none matches, the same spellings are retried ignoring case, so plain
    dicts built from arbitrary-case headers still resolve.
    """
    if headers is None:
        return None

    for key in SIGNATURE_HEADER_KEYS:
        value = headers.get(key)
        if value is not None:
            return value

    folded = {}
    for key, value in headers.items():
        folded.setdefault(key.lower(), value)

    for key in SIGNATURE_HEADER_KEYS:
        value = folded.get(key.lower())
        if value is not None:
            return value

    return None
