"""URL syntax validation for user-submitted check requests.

A URL is accepted only when ALL checks pass:

  1. No whitespace (any Unicode space, including NBSP and U+2028) and no
     control characters (U+0000-U+001F, U+007F) anywhere in the string.
  2. ``urllib.parse.urlsplit`` yields an absolute URI whose scheme is exactly
     ``http`` or ``https``, whose host is non-empty, and whose port, if
     present, is a number in 0-65535.
  3. The whole string matches the canonical grammar ``^https?://[^\\s/$.?#].[^\\s]*$``:
     scheme, a host that does not start with a delimiter, no whitespace anywhere.
     A path is NOT required.

Rules:
  - ``import re2`` ONLY — the input is untrusted; ``import re`` is PROHIBITED here.
  - Pure function: no I/O, no logging, deterministic.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

import re2  # google-re2. NEVER: import re

ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

URL_PATTERN: str = r"^https?://[^\s/$.?#].[^\s]*$"

# RE2 anchors ``$`` at end of text only (no trailing-newline allowance).
_URL_RE = re2.compile(URL_PATTERN)


def _has_forbidden_char(value: str) -> bool:
    # RE2's \s is ASCII-only; str.isspace() covers the Unicode spaces it misses.
    return any(ch.isspace() or ord(ch) < 0x20 or ch == "\x7f" for ch in value)


def is_valid_url(value: Any) -> bool:
    """Return True if ``value`` is a well-formed absolute http(s) URL.

    Args:
        value: Raw user input. Non-string values are rejected.

    Returns:
        True only for absolute ``http``/``https`` URLs with a non-empty host, a
        numeric port if one is given, and no whitespace or control characters.
    """
    if not isinstance(value, str) or not value:
        return False

    if _has_forbidden_char(value):
        return False

    try:
        parts = urlsplit(value)
        hostname = parts.hostname
        # Raises ValueError for a non-numeric or out-of-range port
        parts.port
    except ValueError:
        # Malformed netloc, e.g. an unbalanced IPv6 bracket
        return False

    if parts.scheme not in ALLOWED_SCHEMES or not hostname:
        return False

    return _URL_RE.match(value) is not None
