"""HTML page builders for the four presentation states.

  prompt — the empty form (GET /)
  safe   — lookup succeeded, no matches                     (HTTP 200)
  unsafe — lookup succeeded, threat labels listed           (HTTP 200)
  error  — invalid input (HTTP 400) or check unavailable    (HTTP 503)

All states render the same ``index.html`` template. Jinja2 autoescaping is on for
``.html`` templates, so the echoed URL and labels are always escaped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from securelink.models.check import CheckResult

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

INDEX_TEMPLATE = "index.html"

INVALID_URL_MESSAGE = "Invalid URL format"
CHECK_UNAVAILABLE_MESSAGE = "Security check unavailable"

STATE_PROMPT = "prompt"
STATE_SAFE = "safe"
STATE_UNSAFE = "unsafe"
STATE_ERROR = "error"


def create_templates(directory: Path = TEMPLATES_DIR) -> Jinja2Templates:
    """Build the Jinja2 environment once per application."""
    return Jinja2Templates(directory=str(directory))


def _render(
    templates: Jinja2Templates,
    request: Request,
    *,
    state: str,
    url: str = "",
    threats: Sequence[str] = (),
    error: Optional[str] = None,
    status_code: int = 200,
) -> Response:
    return templates.TemplateResponse(
        request,
        INDEX_TEMPLATE,
        {
            "state": state,
            "url": url,
            "threats": list(threats),
            "error": error,
        },
        status_code=status_code,
    )


def render_prompt(templates: Jinja2Templates, request: Request) -> Response:
    return _render(templates, request, state=STATE_PROMPT)


def render_result(
    templates: Jinja2Templates,
    request: Request,
    url: str,
    result: CheckResult,
) -> Response:
    return _render(
        templates,
        request,
        state=STATE_SAFE if result.safe else STATE_UNSAFE,
        url=url,
        threats=result.threats,
    )


def render_invalid_input(templates: Jinja2Templates, request: Request, url: str) -> Response:
    return _render(
        templates,
        request,
        state=STATE_ERROR,
        url=url,
        error=INVALID_URL_MESSAGE,
        status_code=400,
    )


def render_check_unavailable(templates: Jinja2Templates, request: Request, url: str) -> Response:
    # No partial or stale verdict is ever shown alongside this message.
    return _render(
        templates,
        request,
        state=STATE_ERROR,
        url=url,
        error=CHECK_UNAVAILABLE_MESSAGE,
        status_code=503,
    )
