"""Config loading for SecureLink.

Reads an optional `.securelink/config.yaml` (or `~/.securelink/config.yaml`), then
applies environment overrides. The Safe Browsing API key comes from the
environment only and is REQUIRED: the process refuses to start without it.

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. SECURELINK_CONFIG environment variable (if set)
  3. `.securelink/config.yaml` (working directory — for development)
  4. `~/.securelink/config.yaml` (home directory — for production deployments)

Environment variable overrides (empty values count as unset):
  GOOGLE_API_KEY        — Safe Browsing API key (required, no default)
  GOOGLE_CLIENT_ID      — client identifier sent with each lookup (default "securelink-app")
  HOST                  — listen host (default "0.0.0.0")
  PORT                  — listen port (default 8080)
  SECURELINK_TIMEOUT_S  — outbound lookup timeout in seconds (default 10)
  SECURELINK_CONFIG     — explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from securelink.constants import (
    CLIENT_VERSION,
    DEFAULT_CHECK_TIMEOUT_S,
    DEFAULT_CLIENT_ID,
    DEFAULT_HOST,
    DEFAULT_PORT,
    SAFE_BROWSING_ENDPOINT,
)
from securelink.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".securelink/config.yaml",
    os.path.expanduser("~/.securelink/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class SafeBrowsingConfig:
    """Outbound Safe Browsing lookup configuration.

    api_key:        Credential appended as the ``key`` query parameter (env only).
    client_id:      ``client.clientId`` sent in every lookup body.
    client_version: ``client.clientVersion`` sent in every lookup body.
    endpoint:       Lookup endpoint URL (overridable for staging or test doubles).
    timeout_s:      Bound on the single outbound call.
    """

    api_key: str = ""
    client_id: str = DEFAULT_CLIENT_ID
    client_version: str = CLIENT_VERSION
    endpoint: str = SAFE_BROWSING_ENDPOINT
    timeout_s: float = DEFAULT_CHECK_TIMEOUT_S


@dataclass
class ServerConfig:
    """Standalone server binding configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class Config:
    """Root configuration object.

    Every field except ``safe_browsing.api_key`` has a usable default.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    safe_browsing: SafeBrowsingConfig = field(default_factory=SafeBrowsingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    path: Optional[str] = None  # Path to the loaded config file, if any

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required, no API key)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.
        ``safe_browsing.api_key`` is never read from a file.
        """
        sb_raw = raw.get("safe_browsing") or {}
        if "api_key" in sb_raw:
            logger.warning(
                "safe_browsing.api_key in config file is ignored — set GOOGLE_API_KEY instead",
                path=path,
            )
        safe_browsing = SafeBrowsingConfig(
            client_id=sb_raw.get("client_id", DEFAULT_CLIENT_ID),
            client_version=sb_raw.get("client_version", CLIENT_VERSION),
            endpoint=sb_raw.get("endpoint", SAFE_BROWSING_ENDPOINT),
            timeout_s=sb_raw.get("timeout_s", DEFAULT_CHECK_TIMEOUT_S),
        )

        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", DEFAULT_HOST),
            port=server_raw.get("port", DEFAULT_PORT),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            safe_browsing=safe_browsing,
            server=server,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate SecureLink configuration.

    If no file is found at any search path, defaults are used (not an error).
    Environment overrides are applied afterwards, then the result is validated.

    Returns:
        Config object with all values populated.

    Raises:
        SystemExit(1): On YAML parse error, missing/unsupported ``version``,
                       missing GOOGLE_API_KEY, or an invalid port/timeout.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("SECURELINK_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
    else:
        config = _load_file(found_path)

    _apply_env_overrides(config)
    _validate(config)

    logger.info(
        "Config loaded",
        path=found_path,
        client_id=config.safe_browsing.client_id,
        timeout_s=config.safe_browsing.timeout_s,
        host=config.server.host,
        port=config.server.port,
    )
    return config


def _load_file(found_path: str) -> Config:
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "SecureLink refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    return Config.from_dict(raw, path=found_path)


def _env(key: str) -> Optional[str]:
    value = os.environ.get(key)
    return value if value else None


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(1): If PORT or SECURELINK_TIMEOUT_S is set but not numeric.
    """
    api_key = _env("GOOGLE_API_KEY")
    if api_key is not None:
        config.safe_browsing.api_key = api_key

    client_id = _env("GOOGLE_CLIENT_ID")
    if client_id is not None:
        config.safe_browsing.client_id = client_id

    host = _env("HOST")
    if host is not None:
        config.server.host = host

    env_port = _env("PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            _fail(
                f"CONFIG ERROR: PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )

    env_timeout = _env("SECURELINK_TIMEOUT_S")
    if env_timeout is not None:
        try:
            config.safe_browsing.timeout_s = float(env_timeout)
        except ValueError:
            _fail(
                f"CONFIG ERROR: SECURELINK_TIMEOUT_S environment variable is not a "
                f"valid number: '{env_timeout}'"
            )


def _validate(config: Config) -> None:
    """Reject configurations the service must not start with.

    Raises:
        SystemExit(1): Missing API key, port outside 1-65535, non-positive timeout.
    """
    if not config.safe_browsing.api_key:
        _fail(
            "CONFIG ERROR: GOOGLE_API_KEY environment variable is required.\n"
            "SecureLink cannot check URLs without a Safe Browsing API key."
        )

    port = config.server.port
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        _fail(f"CONFIG ERROR: Invalid server port: {port!r}. Must be 1-65535.")

    timeout = config.safe_browsing.timeout_s
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        _fail(
            f"CONFIG ERROR: Invalid safe_browsing.timeout_s: {timeout!r}. "
            "Must be a positive number of seconds."
        )
