# third parties
from pydantic import BaseModel


class ExampleDto(BaseModel):
    """
    Public representation of a row of the `dbo.Example` table.
    """

    exampleId: int
    exampleName: str | None = None


class PersonDto(BaseModel):
    """
    Public representation of a person, from the `republic.people` table or from a SWAPI-like web service.
    """

    name: str | None = None
    height: str | None = None
    mass: str | None = None
    hair_color: str | None = None
    skin_color: str | None = None
    eye_color: str | None = None
    birth_name: str | None = None
    gender: str | None = None
    homeworld: str | None = None


class ProblemResponse(BaseModel):
    """
    Content of an :class:`HttpResponseException <academy.web.exceptions.HttpResponseException>`.
    """

    title: str = "Unexpected Error"
    detail: str | None = None


class ProblemDetails(ProblemResponse):
    """
    Body of the HTTP responses generated from errors.
    """

    status: int
