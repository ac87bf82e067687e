"""Async Safe Browsing v4 lookup client.

One ``ThreatChecker.check()`` call issues exactly one POST to the
``threatMatches:find`` endpoint and maps the answer to a ``CheckResult``:

  - ``{}`` / ``{"matches": []}``            → CheckResult(safe=True, threats=())
  - ``{"matches": [{"threatType": ...}]}``  → CheckResult(safe=False, threats=(...))

Failure mode separation (each a distinct ThreatCheckError subclass):
  - body / request cannot be built                               → RequestConstructionFailed
  - httpx.TimeoutException / other RequestError / HTTP 4xx-5xx   → NetworkFailure
  - bad Content-Encoding, body not JSON, or not the expected shape → DecodeFailure

No retries and no caching: a single failed attempt is reported to the caller.

Key design properties:
  - The httpx.AsyncClient is injected (created once at lifespan startup and stored
    in app.state.http_client) — NEVER instantiated per check.
  - The API key travels only as the ``key`` query parameter. It is never logged and
    never appears in an exception message.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from securelink.constants import (
    CLIENT_VERSION,
    DEFAULT_CHECK_TIMEOUT_S,
    DEFAULT_CLIENT_ID,
    PLATFORM_TYPES,
    POOL_KEEPALIVE_EXPIRY_S,
    POOL_MAX_CONNECTIONS,
    POOL_MAX_KEEPALIVE,
    SAFE_BROWSING_ENDPOINT,
    SLOW_CHECK_WARN_MS,
    THREAT_ENTRY_TYPES,
    THREAT_TYPES,
)
from securelink.models.check import (
    CheckResult,
    DecodeFailure,
    NetworkFailure,
    RequestConstructionFailed,
)
from securelink.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)


# ─── httpx.AsyncClient factory ────────────────────────────────────────────────


def create_http_client() -> httpx.AsyncClient:
    """Create the shared httpx.AsyncClient used for every lookup.

    Created once at lifespan startup and closed at shutdown. The per-check
    timeout is applied on each request, so the client default is only a backstop.
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY_S,
        ),
        timeout=httpx.Timeout(DEFAULT_CHECK_TIMEOUT_S),
        follow_redirects=False,
    )


# ─── Body building / response parsing ─────────────────────────────────────────


def build_request_body(
    url: str,
    client_id: str = DEFAULT_CLIENT_ID,
    client_version: str = CLIENT_VERSION,
) -> dict[str, Any]:
    """Build the ``threatMatches:find`` request body for a single URL."""
    return {
        "client": {
            "clientId": client_id,
            "clientVersion": client_version,
        },
        "threatInfo": {
            "threatTypes": list(THREAT_TYPES),
            "platformTypes": list(PLATFORM_TYPES),
            "threatEntryTypes": list(THREAT_ENTRY_TYPES),
            "threatEntries": [{"url": url}],
        },
    }


def parse_matches(payload: Any) -> list[str]:
    """Extract threat-type labels from a decoded response, preserving order.

    Raises:
        DecodeFailure: If the payload is not ``{"matches": [{"threatType": str}, ...]}``
                       (``matches`` may be absent or null).
    """
    if not isinstance(payload, dict):
        raise DecodeFailure(f"expected JSON object, got {type(payload).__name__}")

    matches = payload.get("matches")
    if matches is None:
        return []
    if not isinstance(matches, list):
        raise DecodeFailure(f"'matches' must be a list, got {type(matches).__name__}")

    labels: list[str] = []
    for index, match in enumerate(matches):
        if not isinstance(match, dict):
            raise DecodeFailure(f"match #{index} is not an object")
        threat_type = match.get("threatType")
        if not isinstance(threat_type, str) or not threat_type:
            raise DecodeFailure(f"match #{index} has no threatType")
        labels.append(threat_type)
    return labels


# ─── Checker ──────────────────────────────────────────────────────────────────


class ThreatChecker:
    """Looks up one URL against the Safe Browsing API per ``check()`` call.

    Holds no mutable state between calls; safe to share across concurrent requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        client_id: str = DEFAULT_CLIENT_ID,
        *,
        endpoint: str = SAFE_BROWSING_ENDPOINT,
        client_version: str = CLIENT_VERSION,
        timeout: float = DEFAULT_CHECK_TIMEOUT_S,
    ) -> None:
        if not api_key:
            raise ValueError("ThreatChecker requires a non-empty API key")
        self._http = http_client
        self._api_key = api_key
        self._client_id = client_id
        self._client_version = client_version
        self._endpoint = endpoint
        self._timeout = timeout

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def timeout(self) -> float:
        return self._timeout

    async def check(self, url: str, timeout: Optional[float] = None) -> CheckResult:
        """Look up ``url`` and return its safety verdict.

        Args:
            url:     A URL that already passed ``is_valid_url()``.
            timeout: Per-call bound in seconds; defaults to the checker's timeout.

        Returns:
            CheckResult with ``threats`` in the service's response order.

        Raises:
            RequestConstructionFailed: Body or request could not be built.
            NetworkFailure:            Lookup did not complete or the service errored.
            DecodeFailure:             Response body is not the expected JSON shape.
        """
        effective_timeout = self._timeout if timeout is None else timeout

        try:
            body = json.dumps(
                build_request_body(url, self._client_id, self._client_version)
            )
            request = self._http.build_request(
                "POST",
                self._endpoint,
                params={"key": self._api_key},
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=effective_timeout,
            )
        except (TypeError, ValueError, httpx.InvalidURL) as exc:
            logger.error(
                "Safe Browsing request construction failed",
                error_type=type(exc).__name__,
            )
            raise RequestConstructionFailed(type(exc).__name__) from exc

        with PerformanceLogger(
            "Safe Browsing lookup",
            logger=logger,
            warn_ms=SLOW_CHECK_WARN_MS,
            endpoint=self._endpoint,
        ) as perf:
            try:
                response = await self._http.send(request)
            except httpx.UnsupportedProtocol as exc:
                raise RequestConstructionFailed("UnsupportedProtocol") from exc
            except httpx.TimeoutException as exc:
                raise NetworkFailure(
                    f"timed out after {effective_timeout}s ({type(exc).__name__})"
                ) from exc
            except httpx.TransportError as exc:
                raise NetworkFailure(type(exc).__name__) from exc
            except httpx.DecodingError as exc:
                # Body arrived but its Content-Encoding could not be undone.
                raise DecodeFailure(f"undecodable body: {type(exc).__name__}") from exc
            except httpx.RequestError as exc:
                raise NetworkFailure(type(exc).__name__) from exc

            if response.is_error:
                # An error body carries no "matches" and must never read as safe.
                raise NetworkFailure(f"Safe Browsing returned HTTP {response.status_code}")

            try:
                payload = response.json()
            except ValueError as exc:
                raise DecodeFailure(f"invalid JSON: {type(exc).__name__}") from exc

            threats = parse_matches(payload)

        result = CheckResult.from_threats(threats)
        logger.info(
            "URL checked",
            safe=result.safe,
            threat_count=len(result.threats),
            threats=list(result.threats),
            duration_ms=round(perf.duration_ms, 1),
        )
        return result
