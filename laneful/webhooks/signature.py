"""
Webhook signature generation and verification (HMAC-SHA256).

Laneful signs the raw request body with the endpoint's shared secret and
sends the lowercase hex digest in the ``x-webhook-signature`` header,
optionally prefixed with ``sha256=``. Verification must run against the
exact text received on the wire; re-serializing the JSON breaks it.
"""

from __future__ import annotations

import hashlib
import hmac

from laneful.logger import logger

HMAC_ALG = "sha256"
SIGNATURE_PREFIX = f"{HMAC_ALG}="


def generate_signature(secret: str, payload: str, include_prefix: bool = False) -> str:
    """
    Compute the signature Laneful would send for ``payload``.

    Args:
        secret: Webhook secret
        payload: Raw payload text
        include_prefix: Prepend ``sha256=`` to the hex digest

    Returns:
        Lowercase hex HMAC-SHA256 digest, optionally prefixed
    """
    digest = hmac.new(
        secret.encode("utf-8"),
        msg=payload.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}" if include_prefix else digest


def strip_signature_prefix(signature: str) -> str:
    """Remove a leading ``sha256=`` (any case) from a signature value."""
    if signature[:len(SIGNATURE_PREFIX)].lower() == SIGNATURE_PREFIX:
        return signature[len(SIGNATURE_PREFIX):]
    return signature


def _consteq(a: str, b: str) -> bool:
    # Hex digests have a fixed length for a given algorithm
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def verify_signature(secret: str, payload: str, signature: str) -> bool:
    """
    Verify a webhook signature in constant time.

    Args:
        secret: Webhook secret
        payload: Raw payload text exactly as received
        signature: Signature header value, with or without ``sha256=``

    Returns:
        True when the signature matches. Never raises for a bad signature.

    Raises:
        ValueError: if the secret is blank or the payload is None
    """
    if secret is None or not secret.strip():
        raise ValueError("Secret cannot be empty")
    if payload is None:
        raise ValueError("Payload cannot be null")

    if not signature or not signature.strip():
        return False

    try:
        expected = generate_signature(secret, payload, include_prefix=False)
        return _consteq(expected, strip_signature_prefix(signature))
    except Exception as exc:
        logger.debug("Signature comparison failed: {}", type(exc).__name__)
        return False
