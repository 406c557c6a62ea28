# standard library
import logging

# typing
from typing import Optional

# third parties
from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

# Academy
from academy.domain import ProblemDetails, ProblemResponse

logger = logging.getLogger(__name__)


class AcademyException(HTTPException):
    """
    Base class for handled exceptions of the application: if not caught, they end up being converted into a
    problem-details JSON response by :func:`academy_exception_handler`.
    """

    exceptionType = "AcademyException"

    def __init__(self, status_code: int, problem: ProblemResponse, **_):
        HTTPException.__init__(self, status_code=status_code, detail=problem.detail)
        self.problem = problem

    def __str__(self):
        return f"""{self.status_code} : {self.problem.title} ({self.problem.detail})"""


class HttpResponseException(AcademyException):
    """
    Raised by path operations to reply with a status other than `2xx` along with a
    :class:`ProblemResponse <academy.domain.models.ProblemResponse>`.
    """

    exceptionType = "HttpResponseException"

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
    ):
        super().__init__(
            status_code=status_code, problem=ProblemResponse(title=title, detail=detail)
        )


async def academy_exception_handler(
    request: Request, exc: AcademyException
) -> JSONResponse:
    """
    Handler for :class:`AcademyException`.

    Parameters:
        request: Associated request from which the exception happened.
        exc: The exception generated.

    Return:
        JSON representation of the problem.
    """
    logger.error(
        "HTTP Exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc.__cause__,
    )
    content = ProblemDetails(
        title=exc.problem.title, detail=exc.problem.detail, status=exc.status_code
    )
    return JSONResponse(status_code=exc.status_code, content=content.model_dump())


def unexpected_exception_handler(development: bool):
    """
    Create the handler for exceptions that are not :class:`AcademyException`, those are due to defaults in the
    implementation.

    Parameters:
        development: If `True` the exception is logged, otherwise a generic problem is returned silently.

    Return:
        The handler.
    """

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if not development:
            content = ProblemDetails(
                title="An error occurred",
                detail="An unexpected error occurred, your request cannot be processed",
                status=500,
            )
            return JSONResponse(status_code=500, content=content.model_dump())

        logger.error(
            "Internal Server Error on %s %s", request.method, request.url.path, exc_info=exc
        )
        content = ProblemDetails(
            title="Internal Server Error", detail="Internal Server Error", status=500
        )
        return JSONResponse(status_code=500, content=content.model_dump())

    return handler
