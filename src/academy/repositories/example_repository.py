# standard library
from abc import ABC, abstractmethod

# typing
from typing import Optional

# Academy
from academy.domain import ExampleDto

# relative
from .docdb import Document, LocalDocDb
from .migrations import EXAMPLE_TABLE


class ExampleRepository(ABC):
    """
    Access to the examples, whatever the resource that actually stores them.
    """

    @abstractmethod
    async def get_example(self, example_id: int) -> Optional[ExampleDto]:
        """
        Return:
            The example, `None` if it does not exist.
        """

    @abstractmethod
    async def delete_example(self, example_id: int) -> None:
        """
        Delete an example, nothing happens if it does not exist.
        """

    @abstractmethod
    async def get_examples_by_name(self, name: str) -> list[ExampleDto]:
        """
        Return:
            The examples whose name starts with `name`.
        """


class DocDbExampleRepository(ExampleRepository):
    """
    Examples stored in the `dbo.Example` table of a :class:`LocalDocDb <academy.repositories.docdb.LocalDocDb>`.
    """

    def __init__(self, db: LocalDocDb):
        self.db = db

    async def get_example(self, example_id: int) -> Optional[ExampleDto]:
        docs = await self.db.query(
            EXAMPLE_TABLE.qualified_name, where={"Id": example_id}, max_results=1
        )
        return to_example_dto(docs[0]) if docs else None

    async def delete_example(self, example_id: int) -> None:
        await self.db.delete(EXAMPLE_TABLE.qualified_name, where={"Id": example_id})

    async def get_examples_by_name(self, name: str) -> list[ExampleDto]:
        docs = await self.db.query(
            EXAMPLE_TABLE.qualified_name,
            predicate=lambda doc: doc["Name"].startswith(name),
            order_by="Id",
        )
        return [to_example_dto(doc) for doc in docs]


def to_example_dto(doc: Document) -> ExampleDto:
    return ExampleDto(exampleId=doc["Id"], exampleName=doc["Name"])
