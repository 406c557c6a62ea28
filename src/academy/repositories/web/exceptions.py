# typing
from typing import Any


class WebRepositoryError(RuntimeError):
    """
    Base class of the errors raised by
    :class:`BaseWebRepository <academy.repositories.web.base_web_repository.BaseWebRepository>`.

    They never carry HTTP semantics toward the caller of the repository: translating them into a response is
    the responsibility of the path operations.
    """

    exceptionType = "WebRepositoryError"


class ConfigurationError(WebRepositoryError):
    """
    The host pool given to a repository is unusable (empty, or with relative URIs).
    """

    exceptionType = "ConfigurationError"


class TransportError(WebRepositoryError):
    """
    Connectivity-level failure of a request sent to one host: connection refused, DNS failure, timeout,
    server disconnection. It does not cover replies with a non-2xx status.
    """

    exceptionType = "TransportError"

    def __init__(self, host: str, endpoint: str, reason: str | None = None):
        super().__init__(
            f"Request to {host} on {endpoint} failed" + (f": {reason}" if reason else "")
        )
        self.host = host
        self.endpoint = endpoint


class AllHostsExhaustedError(TransportError):
    """
    Every host of the pool failed at transport level: the call failed permanently.

    The cause (`__cause__`) is the error of the last host attempted.
    """

    exceptionType = "AllHostsExhaustedError"

    def __init__(self, endpoint: str, attempted_hosts: list[str]):
        super().__init__(
            host=attempted_hosts[-1],
            endpoint=endpoint,
            reason=f"no alternative host left after {len(attempted_hosts)} attempt(s)",
        )
        self.attempted_hosts = attempted_hosts


class UnsuccessfulStatusError(WebRepositoryError):
    """
    A host replied with a status outside of the `2xx` range.
    """

    exceptionType = "UnsuccessfulStatusError"

    def __init__(self, status: int, url: str, reason: str | None, endpoint: str):
        super().__init__(f"{url} replied {status} ({reason or 'no reason'})")
        self.status = status
        self.url = url
        self.reason = reason
        self.endpoint = endpoint


class EmptyResponseError(WebRepositoryError):
    """
    A host replied successfully but with an empty (or whitespace only) body.
    """

    exceptionType = "EmptyResponseError"

    def __init__(self, endpoint: str, arguments: str):
        super().__init__(
            f"WebService's response was empty\nEndpoint: {endpoint}\nRequest data: {arguments}"
        )
        self.endpoint = endpoint
        self.arguments = arguments


class DecodeError(WebRepositoryError):
    """
    The body of a successful reply is not valid JSON, or does not match the expected type.
    """

    exceptionType = "DecodeError"

    def __init__(self, endpoint: str, body: str, error: Any):
        super().__init__(f"Can not decode the response of {endpoint}: {error}")
        self.endpoint = endpoint
        self.body = body
        self.error = error
