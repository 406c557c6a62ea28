# standard library
from abc import ABC, abstractmethod

# typing
from typing import Optional

# third parties
from pydantic import BaseModel

# Academy
from academy.domain import PersonDto

# relative
from .docdb import Document, LocalDocDb
from .migrations import PEOPLE_TABLE
from .web import BaseWebRepository


class PeopleRepository(ABC):
    """
    Access to the people, whatever the resource that actually provides them.
    """

    @abstractmethod
    async def get_people_by_name(self, name: str) -> Optional[PersonDto]:
        """
        Return:
            The person with exactly this name, `None` if there is none.
        """


class DocDbPeopleRepository(PeopleRepository):
    """
    People stored in the `republic.people` table of a :class:`LocalDocDb <academy.repositories.docdb.LocalDocDb>`.
    """

    def __init__(self, db: LocalDocDb):
        self.db = db

    async def get_people_by_name(self, name: str) -> Optional[PersonDto]:
        docs = await self.db.query(
            PEOPLE_TABLE.qualified_name, where={"Name": name}, max_results=1
        )
        return to_person_dto(docs[0]) if docs else None


class PeopleSearchResponse(BaseModel):
    """
    Response of the `people/?search=` endpoint of the upstream web services.
    """

    count: int = 0
    results: list[PersonDto] = []


class WebPeopleRepository(BaseWebRepository, PeopleRepository):
    """
    People provided by a pool of web services exposing a SWAPI-like API.
    """

    async def get_people_by_name(self, name: str) -> Optional[PersonDto]:
        outcome = await self.get(
            "people/", query={"search": name}, target=PeopleSearchResponse
        )
        return next((p for p in outcome.result.results if p.name == name), None)


def to_person_dto(doc: Document) -> PersonDto:
    return PersonDto(**{column.lower(): value for column, value in doc.items()})
