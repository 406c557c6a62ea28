# standard library
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass

# typing
from typing import Any, Awaitable, Generic, Protocol, TypeVar, runtime_checkable

# third parties
from aiohttp import ClientResponse

ParsedResponseT = TypeVar("ParsedResponseT")
"""
Generic representing the decoded result of a call.
"""

DEFAULT_CHUNK_SIZE = 2**16


@dataclass(frozen=True)
class CallOutcome(Generic[ParsedResponseT]):
    """
    Result of a call emitted by
    :class:`BaseWebRepository <academy.repositories.web.base_web_repository.BaseWebRepository>`.

    An outcome is always populated: a call that can not complete raises instead.
    """

    endpoint: str
    """
    Relative path of the endpoint called.
    """
    arguments: Any
    """
    Query parameters (GET) or payload (POST) of the call.
    """
    result: ParsedResponseT
    """
    Decoded value.
    """


@dataclass(frozen=True)
class MultipartField:
    """
    A field of a `multipart/form-data` body.

    Values are kept in memory such that the body can be rebuilt for each host attempted.
    """

    name: str
    value: str | bytes
    filename: str | None = None
    content_type: str | None = None


@runtime_checkable
class FormEncodable(Protocol):
    """
    Objects able to project themselves into the flat fields of an `application/x-www-form-urlencoded` body.
    """

    def to_form(self) -> Mapping[str, Any]: ...


class SupportsWrite(Protocol):
    """
    Sink of a streamed response: e.g. `io.BytesIO`, a file opened in binary mode, or an object with an
    asynchronous `write` method.
    """

    def write(self, data: bytes, /) -> int | None | Awaitable[Any]: ...


@dataclass(frozen=True)
class ResponseStream:
    """
    Live body of a response, not read yet.

    The caller owns it: it has to be exhausted or closed, e.g. using `async with`.
    """

    resp: ClientResponse

    @property
    def status(self) -> int:
        return self.resp.status

    @property
    def content_type(self) -> str:
        return self.resp.content_type

    @property
    def headers(self) -> Mapping[str, str]:
        return self.resp.headers

    async def iter_chunks(
        self, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> AsyncIterator[bytes]:
        async for chunk in self.resp.content.iter_chunked(chunk_size):
            yield chunk

    async def read(self) -> bytes:
        """
        Return:
            The remaining content as bytes.
        """
        return await self.resp.read()

    def close(self) -> None:
        self.resp.release()

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        self.close()
