"""HTML routes: the check form and the check action.

  GET  /       — render the empty form
  POST /check  — validate the ``url`` form field, look it up, render the verdict

Dependencies (templates, checker) come from ``app.state`` via FastAPI dependencies;
there are no module-level handles.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from securelink.checker.client import ThreatChecker
from securelink.models.check import ErrorKind, ThreatCheckError
from securelink.utils.logger import get_logger
from securelink.validator import is_valid_url
from securelink.web.pages import (
    render_check_unavailable,
    render_invalid_input,
    render_prompt,
    render_result,
)

logger = get_logger(__name__)

router = APIRouter(tags=["check"])


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def get_checker(request: Request) -> ThreatChecker:
    return request.app.state.checker


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
) -> Response:
    """Render the URL submission form."""
    return render_prompt(templates, request)


@router.post("/check", response_class=HTMLResponse)
async def check(
    request: Request,
    url: str = Form(""),
    templates: Jinja2Templates = Depends(get_templates),
    checker: ThreatChecker = Depends(get_checker),
) -> Response:
    """Validate and look up the submitted URL.

    Invalid input never reaches the Safe Browsing API. Any lookup failure renders
    the "check unavailable" state; there is no retry.
    """
    submitted = url.strip()

    if not is_valid_url(submitted):
        logger.info("Rejected invalid URL", error_kind=ErrorKind.INVALID_INPUT.value)
        return render_invalid_input(templates, request, submitted)

    try:
        result = await checker.check(submitted)
    except ThreatCheckError as exc:
        logger.warning(
            "Safe Browsing check unavailable",
            error_kind=exc.kind.value,
            reason=exc.reason,
        )
        return render_check_unavailable(templates, request, submitted)

    return render_result(templates, request, submitted, result)
