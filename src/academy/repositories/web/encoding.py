# standard library
import io
import json

from collections.abc import Mapping, Sequence
from enum import Enum
from urllib.parse import quote

# typing
from typing import Any

# third parties
from aiohttp import FormData
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

# relative
from .models import FormEncodable, MultipartField

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def make_query_string(query: Mapping[str, Any] | None) -> str:
    """
    Percent-encode keys and values (RFC 3986, only unreserved characters are kept as is) and join them.

    Parameters:
        query: The query parameters, in the order they should appear.

    Return:
        The query string, without the leading `?`; empty if there is no parameter.
    """
    if not query:
        return ""
    return "&".join(
        f"{quote(str(k), safe='')}={quote(_stringify(v), safe='')}"
        for k, v in query.items()
    )


def make_form_arguments(payload: Any) -> dict[str, str]:
    """
    Project a payload into the flat fields of an `application/x-www-form-urlencoded` body.

    `None` values are transmitted as empty strings.

    Parameters:
        payload: Either a mapping, a pydantic model, or a :class:`FormEncodable`.

    Return:
        The fields of the form.
    """
    if isinstance(payload, FormEncodable):
        fields = payload.to_form()
    elif isinstance(payload, BaseModel):
        fields = payload.model_dump(by_alias=True)
    elif isinstance(payload, Mapping):
        fields = payload
    else:
        raise TypeError(
            f"Can not encode a payload of type '{type(payload).__name__}' as form fields"
        )

    return {str(k): _stringify(v) for k, v in fields.items()}


def make_json_body(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True)
    return json.dumps(to_jsonable_python(payload, by_alias=True))


def make_form_data(fields: Sequence[MultipartField]) -> FormData:
    """
    Build a `multipart/form-data` body.

    A `FormData` can only be serialized once: a new one has to be created for each attempt.

    Parameters:
        fields: The parts of the body.

    Return:
        The form, always multipart-encoded.
    """
    form = FormData()
    for field in fields:
        if isinstance(field.value, str):
            form.add_field(
                name=field.name,
                value=field.value,
                filename=field.filename,
                content_type=field.content_type or "text/plain; charset=utf-8",
            )
            continue
        form.add_field(
            name=field.name,
            value=io.BytesIO(field.value),
            filename=field.filename or field.name,
            content_type=field.content_type or "application/octet-stream",
        )
    return form


def describe_arguments(arguments: Any) -> str:
    """
    Serialize arguments for diagnostic purposes, falling back to `str` for values that are not JSON compatible.
    """
    if arguments is None:
        return ""
    if (
        isinstance(arguments, (list, tuple))
        and arguments
        and all(isinstance(f, MultipartField) for f in arguments)
    ):
        return json.dumps([f.name for f in arguments])
    return json.dumps(to_jsonable_python(arguments, fallback=str))


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)
