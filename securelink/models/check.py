"""Lookup result and error contracts.

``CheckResult`` is the only value a successful lookup produces. Its invariant
``safe == (len(threats) == 0)`` is enforced at construction, so a result can
never claim to be safe while carrying threat labels (or the reverse).

Failures are exceptions, one class per ``ErrorKind``. The web layer catches the
common base ``ThreatCheckError`` and renders a single "check unavailable" state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """Terminal failure categories of a URL check."""

    INVALID_INPUT = "invalid_input"
    REQUEST_CONSTRUCTION_FAILED = "request_construction_failed"
    NETWORK_FAILURE = "network_failure"
    DECODE_FAILURE = "decode_failure"


@dataclass(frozen=True)
class CheckResult:
    """Safety verdict for one URL.

    Attributes:
        safe:    True when the service reported no matches.
        threats: Threat-type labels in the order the service returned them.
    """

    safe: bool
    threats: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.threats, tuple):
            object.__setattr__(self, "threats", tuple(self.threats))
        if self.safe != (len(self.threats) == 0):
            raise ValueError(
                f"CheckResult invariant violated: safe={self.safe} "
                f"with {len(self.threats)} threat(s)"
            )

    @classmethod
    def from_threats(cls, threats: Iterable[str]) -> "CheckResult":
        """Build a result whose ``safe`` flag is derived from ``threats``."""
        labels = tuple(threats)
        return cls(safe=not labels, threats=labels)


class ThreatCheckError(Exception):
    """Base class for every failed URL check.

    Attributes:
        kind:   The ErrorKind this failure maps to.
        reason: Short operator-facing description. Never contains the API key.
    """

    kind: ErrorKind = ErrorKind.NETWORK_FAILURE

    def __init__(self, reason: str = "") -> None:
        super().__init__(reason or self.kind.value)
        self.reason = reason


class RequestConstructionFailed(ThreatCheckError):
    """The lookup body or request object could not be built."""

    kind = ErrorKind.REQUEST_CONSTRUCTION_FAILED


class NetworkFailure(ThreatCheckError):
    """The outbound lookup did not complete (timeout, DNS, reset, HTTP error)."""

    kind = ErrorKind.NETWORK_FAILURE


class DecodeFailure(ThreatCheckError):
    """The service answered with a body that is not the expected JSON shape."""

    kind = ErrorKind.DECODE_FAILURE
