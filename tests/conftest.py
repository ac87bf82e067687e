"""Root test configuration for SecureLink.

Sets GOOGLE_API_KEY to a test value for the entire suite so that importing
securelink.main and calling load_config() never trips the missing-key exit.
Tests that verify the missing-key behaviour delete it with their own monkeypatch.

Also provides a mock Safe Browsing service built on httpx.MockTransport; no test
ever reaches the real API.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

TEST_API_KEY = "test-api-key"


@pytest.fixture(autouse=True)
def safe_browsing_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide the required credential and clear every other override."""
    monkeypatch.setenv("GOOGLE_API_KEY", TEST_API_KEY)
    for key in ("GOOGLE_CLIENT_ID", "HOST", "PORT", "SECURELINK_TIMEOUT_S", "SECURELINK_CONFIG"):
        monkeypatch.delenv(key, raising=False)


class MockSafeBrowsing:
    """Mock lookup service that records received requests and returns a fixed answer."""

    def __init__(
        self,
        *,
        status_code: int = 200,
        payload: Any = None,
        body: Optional[bytes] = None,
        raise_on_send: Optional[Exception] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.received_requests: list[httpx.Request] = []
        self._status_code = status_code
        if body is None:
            body = json.dumps({} if payload is None else payload).encode()
        self._body = body
        self._raise_on_send = raise_on_send
        self._headers = {"content-type": "application/json", **(headers or {})}

    @classmethod
    def with_threats(cls, *threat_types: str) -> "MockSafeBrowsing":
        return cls(
            payload={
                "matches": [
                    {
                        "threatType": threat_type,
                        "platformType": "ANY_PLATFORM",
                        "threatEntryType": "URL",
                        "threat": {"url": "https://malicious.example"},
                        "cacheDuration": "300s",
                    }
                    for threat_type in threat_types
                ]
            }
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.received_requests.append(request)
        if self._raise_on_send is not None:
            raise self._raise_on_send
        return httpx.Response(
            self._status_code,
            content=self._body,
            headers=self._headers,
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def request_count(self) -> int:
        return len(self.received_requests)

    def last_body(self) -> dict:
        return json.loads(self.received_requests[-1].content)


@pytest.fixture
def mock_safe_browsing() -> type[MockSafeBrowsing]:
    """The MockSafeBrowsing class, for tests to build a service per scenario."""
    return MockSafeBrowsing
