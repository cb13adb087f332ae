"""Content fingerprints for composite documents."""

from __future__ import annotations

import base64
import hashlib
import logging

logger = logging.getLogger(__name__)

# Length of a base64-encoded SHA-256 digest
FINGERPRINT_LENGTH = 44


def fingerprint(text: str) -> str:
    """Return the base64 SHA-256 digest of *text*'s UTF-8 bytes.

    The digest covers the exact characters given; two documents that differ
    only in whitespace or attribute order get different fingerprints.
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    value = base64.b64encode(digest).decode("ascii")
    logger.debug("Created hash %s", value)
    return value
