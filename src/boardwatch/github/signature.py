"""GitHub webhook signature verification (``X-Hub-Signature-256``)."""

from __future__ import annotations

import hashlib
import hmac
import string

SIGNATURE_PREFIX = "sha256="


def parse_signature(header: str | None) -> bytes | None:
    """Extract the raw MAC bytes from a ``sha256=<hex>`` header value.

    Returns None when the header is missing, lacks the prefix, or the
    remainder is not valid hex.
    """
    if not header or not header.startswith(SIGNATURE_PREFIX):
        return None
    digest = header[len(SIGNATURE_PREFIX):]
    # fromhex would otherwise skip embedded whitespace
    if not digest or not all(c in string.hexdigits for c in digest):
        return None
    try:
        return bytes.fromhex(digest)
    except ValueError:
        return None


def compute_signature(payload: bytes, secret: bytes) -> str:
    """Return the prefixed signature GitHub would send for ``payload``."""
    return SIGNATURE_PREFIX + hmac.new(secret, payload, hashlib.sha256).hexdigest()


def is_valid_mac(payload: bytes, mac: bytes, secret: bytes) -> bool:
    """Check ``mac`` against the HMAC-SHA256 of ``payload`` in constant time."""
    expected = hmac.new(secret, payload, hashlib.sha256).digest()
    return hmac.compare_digest(expected, mac)


def verify_signature(payload: bytes, header: str | None, secret: bytes) -> bool:
    """Verify a GitHub webhook signature header against the raw body."""
    mac = parse_signature(header)
    if mac is None:
        return False
    return is_valid_mac(payload, mac, secret)
