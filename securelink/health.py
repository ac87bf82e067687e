"""Health endpoint for SecureLink.

  GET /health — 503 before ``app.state.ready`` is set by the lifespan, 200 after.

Polled by container and cloud health checks. The body never includes the API key.
The readiness gate is the same ``require_ready`` dependency the HTML routes use.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from securelink import __version__
from securelink.checker.client import ThreatChecker
from securelink.dependencies import require_ready

router = APIRouter(tags=["health"])


@router.get("/health", dependencies=[Depends(require_ready)])
async def health(request: Request) -> dict[str, Any]:
    """Readiness and identity of the running service.

    Response body (200):
        {
          "status": "ok",
          "service": "securelink",
          "version": "1.0.0",
          "client_id": "securelink-app",
          "timeout_s": 10.0
        }

    Response body (503):
        {"error": {"status": "starting", "message": "SecureLink is starting up..."}}
    """
    checker: ThreatChecker = request.app.state.checker
    return {
        "status": "ok",
        "service": "securelink",
        "version": __version__,
        "client_id": checker.client_id,
        "timeout_s": checker.timeout,
    }
