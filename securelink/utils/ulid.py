"""ULID generation for request correlation.

Every inbound request gets a 26-character ULID that is bound into the logging
context and echoed back to the caller in the ``X-Request-ID`` header.

Uses the `python-ulid` library — do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, charset ``[0-9A-HJKMNP-TV-Z]``, exactly 26 chars.
    """
    return str(ULID())
