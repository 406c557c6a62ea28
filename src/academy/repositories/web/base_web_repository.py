# standard library
import asyncio
import inspect
import logging
import random

from collections.abc import Awaitable, Iterable, Mapping, Sequence
from functools import lru_cache

# typing
from typing import Any, Callable, Optional, TypeVar, Union

# third parties
from aiohttp import (
    ClientConnectionError,
    ClientPayloadError,
    ClientResponse,
    ClientSession,
    ClientTimeout,
    TCPConnector,
)
from multidict import CIMultiDict
from pydantic import TypeAdapter, ValidationError
from yarl import URL

# relative
from .encoding import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    describe_arguments,
    make_form_arguments,
    make_form_data,
    make_json_body,
    make_query_string,
)
from .exceptions import (
    AllHostsExhaustedError,
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    TransportError,
    UnsuccessfulStatusError,
)
from .metrics import count_exhausted_calls, count_failovers, count_host_attempts
from .models import (
    DEFAULT_CHUNK_SIZE,
    CallOutcome,
    MultipartField,
    ResponseStream,
    SupportsWrite,
)

T = TypeVar("T")

TRANSPORT_ERRORS = (ClientConnectionError, ClientPayloadError, asyncio.TimeoutError)
"""
Errors that trigger a failover to the next host of the pool.

Replies with a non-2xx status are not part of them: a host that answers is considered healthy.
"""


@lru_cache(maxsize=None)
def _type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def is_success(status: int) -> bool:
    return 200 <= status < 300


class BaseWebRepository:
    """
    Dispatches HTTP requests to a pool of interchangeable hosts serving the same API.

    For each call, the hosts are tried in a random order until one of them replies: a connectivity failure
    (connection refused, DNS failure, timeout, disconnection) moves on to the next host, while any reply (whatever
    its status) ends the call. When every host failed,
    :class:`AllHostsExhaustedError <academy.repositories.web.exceptions.AllHostsExhaustedError>` is raised.

    `GET` requests share a single client session (owned by the repository unless one is provided), `POST`
    requests use a dedicated session per call.

    Repositories of the application are expected to derive from this class and expose domain oriented methods.
    """

    def __init__(
        self,
        hosts: Union[str, URL, Iterable[Union[str, URL]]],
        timeout: float,
        logger: Optional[logging.Logger] = None,
        client_session: Optional[ClientSession] = None,
        skip_tls_verification: bool = False,
        rng: Optional[random.Random] = None,
    ):
        """
        Parameters:
            hosts: Base URIs of the hosts, all serving the same API. They must be absolute.
            timeout: Timeout in seconds, applied to each attempt (not to the whole call).
            logger: Logger used to report failovers, defaults to the module's logger.
            client_session: Session used for `GET` requests; if not provided the repository creates (and closes)
                its own.
            skip_tls_verification: If `True`, certificates of the hosts are not verified for `POST` requests.
            rng: Random generator used to shuffle the hosts.

        Raise:
            ConfigurationError: If the pool is empty, if a host is not an absolute URI, or if the timeout is not
                strictly positive.
        """
        if isinstance(hosts, (str, URL)):
            hosts = [hosts]
        self._hosts: list[URL] = [self._to_host(host) for host in hosts]
        if not self._hosts:
            raise ConfigurationError("At least one host is required")
        if timeout <= 0:
            raise ConfigurationError(
                f"The timeout must be strictly positive, got {timeout}"
            )
        self._rng = rng or random.Random()
        self._rng.shuffle(self._hosts)
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self._client_session = client_session
        self._owns_session = client_session is None
        self._skip_tls_verification = skip_tls_verification
        if skip_tls_verification:
            self._logger.warning(
                "TLS certificates of %s will not be verified for POST requests",
                ", ".join(str(h) for h in self._hosts),
            )

    @property
    def hosts(self) -> tuple[URL, ...]:
        return tuple(self._hosts)

    async def get(
        self,
        endpoint: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        target: Any = None,
        timeout: Optional[float] = None,
    ) -> CallOutcome[Any]:
        """
        Send a `GET` request and decode its JSON response.

        Parameters:
            endpoint: Path of the endpoint, relative to the hosts' base URI.
            query: Query parameters, percent-encoded before being sent.
            headers: Headers of the request.
            target: Type the JSON response is validated against (any type supported by pydantic's `TypeAdapter`);
                if `None` the raw JSON is returned.
            timeout: Overrides the default timeout of the repository, must be strictly positive.

        Return:
            The outcome of the call.
        """
        query_string = make_query_string(query)
        client_timeout = self._attempt_timeout(timeout)
        session = self._shared_session()

        async def attempt(host: URL):
            url = self._url(host=host, endpoint=endpoint, query_string=query_string)
            async with await session.get(
                url, headers=headers, timeout=client_timeout
            ) as resp:
                return await self.process_response(
                    resp=resp, endpoint=endpoint, arguments=query, target=target
                )

        result = await self._dispatch(endpoint=endpoint, attempt=attempt)
        return CallOutcome(endpoint=endpoint, arguments=query, result=result)

    async def get_stream(
        self,
        endpoint: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CallOutcome[ResponseStream]:
        """
        Send a `GET` request and return its body without reading it.

        Failover only covers the emission of the request and the reception of the headers: once the stream is
        returned, errors raised while reading it are the caller's.

        Parameters:
            endpoint: Path of the endpoint, relative to the hosts' base URI.
            query: Query parameters, percent-encoded before being sent.
            headers: Headers of the request.
            timeout: Overrides the default timeout of the repository (strictly positive); it applies to the connection
                and to each read.

        Return:
            The outcome of the call, the caller is responsible to close the stream.
        """
        query_string = make_query_string(query)
        session = self._shared_session()
        seconds = self._seconds(timeout)

        async def attempt(host: URL):
            url = self._url(host=host, endpoint=endpoint, query_string=query_string)
            resp = await session.get(
                url,
                headers=headers,
                timeout=ClientTimeout(
                    total=None, sock_connect=seconds, sock_read=seconds
                ),
            )
            if not is_success(resp.status):
                resp.release()
                raise UnsuccessfulStatusError(
                    status=resp.status,
                    url=str(resp.url),
                    reason=resp.reason,
                    endpoint=endpoint,
                )
            return ResponseStream(resp=resp)

        stream = await self._dispatch(endpoint=endpoint, attempt=attempt)
        return CallOutcome(endpoint=endpoint, arguments=query, result=stream)

    async def post(
        self,
        endpoint: str,
        payload: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        encode_as_json: bool = True,
        target: Any = None,
        timeout: Optional[float] = None,
    ) -> CallOutcome[Any]:
        """
        Send a `POST` request and decode its JSON response.

        Parameters:
            endpoint: Path of the endpoint, relative to the hosts' base URI.
            payload: Body of the request, if `None` no body is sent.
            headers: Headers of the request.
            encode_as_json: If `True` the payload is sent as JSON, otherwise as `application/x-www-form-urlencoded`
                (see :func:`make_form_arguments <academy.repositories.web.encoding.make_form_arguments>`).
            target: Type the JSON response is validated against; if `None` the raw JSON is returned.
            timeout: Overrides the default timeout of the repository, must be strictly positive.

        Return:
            The outcome of the call.

        Raise:
            TypeError: If the payload can not be encoded as form; no request is sent in this case.
        """
        request_headers = CIMultiDict(headers or {})
        body: Union[str, dict[str, str], None] = None
        if payload is not None and encode_as_json:
            body = make_json_body(payload)
            request_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        elif payload is not None:
            body = make_form_arguments(payload)
            request_headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        self._logger.debug("Arguments of POST request to %s: %s", endpoint, body)

        async with self._dedicated_session(timeout) as session:

            async def attempt(host: URL):
                url = self._url(host=host, endpoint=endpoint)
                async with await session.post(
                    url, data=body, headers=request_headers
                ) as resp:
                    return await self.process_response(
                        resp=resp, endpoint=endpoint, arguments=payload, target=target
                    )

            result = await self._dispatch(endpoint=endpoint, attempt=attempt)
        return CallOutcome(endpoint=endpoint, arguments=payload, result=result)

    async def post_form_streamed(
        self,
        endpoint: str,
        sink: SupportsWrite,
        headers: Optional[Mapping[str, str]] = None,
        form: Optional[Sequence[MultipartField]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Send a `POST` request with a `multipart/form-data` body, and copy the response's body into a sink.

        Once the copy started, an interruption of the response is not recovered by another host (the sink would
        end up with duplicated data): it raises
        :class:`TransportError <academy.repositories.web.exceptions.TransportError>`.

        Parameters:
            endpoint: Path of the endpoint, relative to the hosts' base URI.
            sink: Destination of the response's body; `write` may be synchronous or asynchronous.
            headers: Headers of the request.
            form: Fields of the body, if `None` no body is sent.
            timeout: Overrides the default timeout of the repository, must be strictly positive.
        """
        async with self._dedicated_session(timeout) as session:

            async def attempt(host: URL):
                url = self._url(host=host, endpoint=endpoint)
                data = make_form_data(form) if form else None
                async with await session.post(
                    url, data=data, headers=headers
                ) as resp:
                    if not is_success(resp.status):
                        raise UnsuccessfulStatusError(
                            status=resp.status,
                            url=str(resp.url),
                            reason=resp.reason,
                            endpoint=endpoint,
                        )
                    try:
                        async for chunk in resp.content.iter_chunked(
                            DEFAULT_CHUNK_SIZE
                        ):
                            written = sink.write(chunk)
                            if inspect.isawaitable(written):
                                await written
                    except TRANSPORT_ERRORS as e:
                        raise TransportError(
                            host=str(host),
                            endpoint=endpoint,
                            reason="response interrupted while copied into the sink",
                        ) from e

            await self._dispatch(endpoint=endpoint, attempt=attempt)

    async def process_response(
        self,
        resp: ClientResponse,
        endpoint: str,
        arguments: Any,
        target: Any = None,
    ) -> Any:
        """
        Decode the JSON body of a response.

        Parameters:
            resp: The response.
            endpoint: The endpoint called, for diagnostic.
            arguments: The arguments of the call, for diagnostic.
            target: Type the JSON is validated against; if `None` the raw JSON is returned.

        Return:
            The decoded value.

        Raise:
            UnsuccessfulStatusError: If the status is not in the `2xx` range.
            EmptyResponseError: If the body is empty or only made of whitespaces.
            DecodeError: If the body is not valid JSON or does not validate against `target`.
        """
        if not is_success(resp.status):
            raise UnsuccessfulStatusError(
                status=resp.status,
                url=str(resp.url),
                reason=resp.reason,
                endpoint=endpoint,
            )
        raw = await resp.read()
        try:
            text = raw.decode(resp.get_encoding())
        except (UnicodeDecodeError, LookupError) as e:
            raise DecodeError(endpoint=endpoint, body=repr(raw), error=e) from e

        self._logger.debug("Response from %s: %s", endpoint, text)
        if not text.strip():
            raise EmptyResponseError(
                endpoint=endpoint, arguments=describe_arguments(arguments)
            )
        try:
            return _type_adapter(Any if target is None else target).validate_json(
                text
            )
        except ValidationError as e:
            raise DecodeError(endpoint=endpoint, body=text, error=e) from e

    async def close(self) -> None:
        """
        Close the client session used for `GET` requests, if owned by the repository.
        """
        if self._owns_session and self._client_session:
            await self._client_session.close()
            self._client_session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_exc_info):
        await self.close()

    async def _dispatch(self, endpoint: str, attempt: Callable[[URL], Awaitable[T]]) -> T:
        hosts = list(self._hosts)
        self._rng.shuffle(hosts)
        *secondaries, last = hosts
        attempted: list[str] = []
        for host in secondaries:
            attempted.append(str(host))
            count_host_attempts.inc()
            try:
                return await attempt(host)
            except TRANSPORT_ERRORS as e:
                count_failovers.inc()
                self._logger.warning(
                    "Request to %s on %s failed (%s). The request will be retried to a secondary host",
                    host,
                    endpoint,
                    _describe_error(e),
                )

        attempted.append(str(last))
        count_host_attempts.inc()
        try:
            return await attempt(last)
        except TRANSPORT_ERRORS as e:
            count_exhausted_calls.inc()
            self._logger.error(
                "Request to %s on %s failed (%s). There are no other alternative hosts to try, "
                "the request failed permanently",
                last,
                endpoint,
                _describe_error(e),
            )
            raise AllHostsExhaustedError(
                endpoint=endpoint, attempted_hosts=attempted
            ) from e

    def _shared_session(self) -> ClientSession:
        if self._client_session is None or self._client_session.closed:
            self._client_session = ClientSession()
            self._owns_session = True
        return self._client_session

    def _dedicated_session(self, timeout: Optional[float]) -> ClientSession:
        client_timeout = self._attempt_timeout(timeout)
        connector = (
            TCPConnector(ssl=False) if self._skip_tls_verification else TCPConnector()
        )
        return ClientSession(
            connector=connector, timeout=client_timeout
        )

    def _attempt_timeout(self, timeout: Optional[float]) -> ClientTimeout:
        return ClientTimeout(total=self._seconds(timeout))

    def _seconds(self, timeout: Optional[float]) -> float:
        if timeout is None:
            return self._timeout
        if timeout <= 0:
            raise ConfigurationError(
                f"The timeout must be strictly positive, got {timeout}"
            )
        return timeout

    @staticmethod
    def _url(host: URL, endpoint: str, query_string: str = "") -> URL:
        relative = endpoint.lstrip("/")
        url = host / relative if relative else host
        if not query_string:
            return url
        return URL(f"{url}?{query_string}", encoded=True)

    @staticmethod
    def _to_host(host: Union[str, URL]) -> URL:
        url = URL(host) if isinstance(host, str) else host
        if not url.is_absolute() or url.scheme not in ("http", "https"):
            raise ConfigurationError(f"'{host}' is not an absolute http(s) URI")
        return url


def _describe_error(e: BaseException) -> str:
    return f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
