"""FastAPI dependencies shared by the HTML and health routers."""

from __future__ import annotations

from fastapi import HTTPException, Request


async def require_ready(request: Request) -> None:
    """Raise HTTP 503 until the lifespan has set ``app.state.ready``."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "SecureLink is starting up...",
            },
        )
