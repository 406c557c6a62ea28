# standard library
import logging
import secrets

# typing
from typing import Optional

# third parties
from fastapi import FastAPI

# Academy
from academy.domain import HEADER_AUTHORIZATION_KEY

# relative
from .dependencies import DependenciesFactory, lifespan
from .deployment import AcademyDeployment, ConfigurationFactory, add_observability_routes
from .exceptions import (
    AcademyException,
    academy_exception_handler,
    unexpected_exception_handler,
)
from .middlewares import (
    BasicAuthenticationMiddleware,
    CORSMiddleware,
    CredentialsValidator,
    HTTPSRedirectMiddleware,
    SessionMiddleware,
)
from .paths import router

logger = logging.getLogger(__name__)


def create_app(validator: Optional[CredentialsValidator] = None) -> FastAPI:
    """
    Create the application from the configuration set in
    :class:`ConfigurationFactory <academy.web.deployment.configuration.ConfigurationFactory>`.

    Parameters:
        validator: Validation of the credentials when basic authentication is enabled.

    Return:
        The application.
    """
    configuration = ConfigurationFactory.get()
    development = configuration.is_development

    app = FastAPI(
        title="academy",
        lifespan=lifespan,
        docs_url="/docs" if development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if development else None,
    )
    add_observability_routes(
        app=app, deployment=AcademyDeployment(DependenciesFactory.built)
    )

    if configuration.enable_basic_auth:
        app.add_middleware(BasicAuthenticationMiddleware, validator=validator)

    session_secret = configuration.session_secret
    if not session_secret:
        logger.warning(
            "No session secret configured, sessions will not survive a restart"
        )
        session_secret = secrets.token_urlsafe(32)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        max_age=configuration.session_ttl_minutes * 60,
        same_site="lax",
        https_only=configuration.use_https,
    )

    if development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[configuration.cors_origin],
            allow_methods=["*"],
            allow_headers=["Content-Type", HEADER_AUTHORIZATION_KEY],
            allow_credentials=True,
        )

    if configuration.use_https:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_exception_handler(AcademyException, academy_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler(development))
    app.include_router(router)

    logger.debug("Listing app routes:")
    for route in app.routes:
        logger.debug("* Route %s", route)
    return app
