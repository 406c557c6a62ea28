# standard library
import base64
import binascii
import logging

# typing
from typing import Awaitable, Callable, Optional

# third parties
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

# Academy
from academy.domain import HEADER_AUTHORIZATION_KEY, ProblemDetails

logger = logging.getLogger(__name__)

CredentialsValidator = Callable[[str, str], Awaitable[bool]]
"""
Validate a couple `(username, password)`.
"""


class BasicAuthenticationMiddleware(BaseHTTPMiddleware):
    """
    HTTP Basic authentication.

    *  A request without `Authorization` header is rejected.
    *  A request with a blank `Authorization` header is forwarded anonymously, path operations are then responsible
       for their authorization requirements.
    *  Otherwise, the header has to be the base64 encoding of `username:password` (optionally prefixed by `Basic`),
       and the credentials are checked by the `validator`: the username is then available from `request.state.user`.

    Without validator, every credentials are rejected.
    """

    def __init__(
        self,
        app: ASGIApp,
        validator: Optional[CredentialsValidator] = None,
        excluded_prefixes: tuple[str, ...] = ("/observability",),
    ):
        super().__init__(app)
        self.validator = validator
        self.excluded_prefixes = excluded_prefixes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.user = None
        if request.url.path.startswith(self.excluded_prefixes):
            return await call_next(request)

        if HEADER_AUTHORIZATION_KEY not in request.headers:
            logger.debug("No authentication header found")
            return unauthorized(
                f"Unauthorized - credentials must be specified in {HEADER_AUTHORIZATION_KEY} header"
            )

        credentials = request.headers[HEADER_AUTHORIZATION_KEY].strip()
        if not credentials:
            logger.debug(
                "Empty authentication header, passthrough to the path operation for authorization requirements"
            )
            return await call_next(request)

        if credentials.lower().startswith("basic "):
            credentials = credentials[len("basic ") :].strip()
        try:
            decoded = base64.b64decode(credentials, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            decoded = ""
        if ":" not in decoded:
            return unauthorized(
                f"Bad formatted {HEADER_AUTHORIZATION_KEY} header for HTTP Basic Authentication"
            )
        username, password = decoded.split(":", 1)

        if self.validator is None:
            return unauthorized("Basic Authentication is missing validation logic")
        try:
            valid = await self.validator(username, password)
        except Exception as e:
            logger.error("Error during authentication", exc_info=e)
            return unauthorized(f"Error during authentication: {e}")
        if not valid:
            return unauthorized("Invalid credentials")

        logger.debug("User %s successfully authenticated", username)
        request.state.user = username
        return await call_next(request)


def unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=ProblemDetails(title="Unauthorized", detail=detail, status=401).model_dump(),
        headers={"WWW-Authenticate": 'Basic realm="academy"'},
    )
