"""Shared constants for SecureLink.

All endpoint details, timeouts and size caps used across modules are defined here.
No magic numbers in other modules — import from here.
"""

# ─── Safe Browsing API ────────────────────────────────────────────────────────

# Lookup API v4 endpoint. The API key is appended as the ``key`` query parameter
# at request time and is never part of this constant.
SAFE_BROWSING_ENDPOINT: str = "https://safebrowsing.googleapis.com/v4/threatMatches:find"

# Client identification sent in the ``client`` block of every lookup.
DEFAULT_CLIENT_ID: str = "securelink-app"
CLIENT_VERSION: str = "1.0"

# Threat categories requested on every lookup. Order is preserved in the body.
THREAT_TYPES: tuple[str, ...] = ("MALWARE", "SOCIAL_ENGINEERING")
PLATFORM_TYPES: tuple[str, ...] = ("ANY_PLATFORM",)
THREAT_ENTRY_TYPES: tuple[str, ...] = ("URL",)

# ─── Timeouts ─────────────────────────────────────────────────────────────────

# Default bound on the single outbound lookup (seconds).
DEFAULT_CHECK_TIMEOUT_S: float = 10.0

# Lookups slower than this are logged at WARNING instead of DEBUG.
SLOW_CHECK_WARN_MS: float = 2_000.0

# ─── HTTP client pool ─────────────────────────────────────────────────────────

POOL_MAX_CONNECTIONS: int = 100
POOL_MAX_KEEPALIVE: int = 20
POOL_KEEPALIVE_EXPIRY_S: float = 30.0

# ─── Inbound limits ───────────────────────────────────────────────────────────

# The check form carries a single URL field; anything larger is not a URL.
MAX_FORM_BODY_BYTES: int = 16_384  # 16 KB

# ─── Server defaults ──────────────────────────────────────────────────────────

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8080
