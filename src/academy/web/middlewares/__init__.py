# third parties
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.sessions import SessionMiddleware

# relative
from .authentication import BasicAuthenticationMiddleware, CredentialsValidator

__all__ = [
    "BasicAuthenticationMiddleware",
    "CORSMiddleware",
    "CredentialsValidator",
    "HTTPSRedirectMiddleware",
    "SessionMiddleware",
]
