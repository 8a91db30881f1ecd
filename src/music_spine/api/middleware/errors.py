"""
Error-handling middleware — maps exceptions to RFC 7807 responses.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from music_spine.api.schemas import ProblemDetail
from music_spine.core.errors import ErrorCategory, MusicSpineError
from music_spine.core.logging import get_logger

logger = get_logger(__name__)

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.DATABASE: 503,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.UNKNOWN: 500,
}


def status_for_category(category: ErrorCategory) -> int:
    """Resolve an error category to HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(category, 500)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(title=title, status=status, detail=detail, instance=instance)
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


async def music_spine_error_handler(request: Request, exc: MusicSpineError) -> JSONResponse:
    """Typed errors carry their own category."""
    status = status_for_category(exc.category)
    logger.warning("request_failed", path=request.url.path, **exc.to_dict())
    return problem_response(
        status=status,
        title=exc.__class__.__name__,
        detail=exc.message if request.app.state.settings.debug else "",
        instance=str(request.url),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500 with ProblemDetail."""
    logger.exception("request_crashed", path=request.url.path)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )
