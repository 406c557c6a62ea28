# standard library
import logging

# typing
from typing import Optional

# Academy
from academy.domain import ExampleDto
from academy.repositories import ExampleRepository


class ExampleService:
    """
    Business logic regarding the examples.

    Services are agnostic of both the nature of the data sources (the repositories' concern) and of the destination
    of their outputs: they never raise HTTP errors.
    """

    def __init__(
        self, repository: ExampleRepository, logger: Optional[logging.Logger] = None
    ):
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)

    async def get_example(self, example_id: int) -> Optional[ExampleDto]:
        return await self.repository.get_example(example_id)

    async def delete_example(self, example: ExampleDto) -> None:
        self.logger.info("Delete example %s", example.exampleId)
        await self.repository.delete_example(example.exampleId)

    async def get_examples_by_name(self, name: str) -> list[ExampleDto]:
        return await self.repository.get_examples_by_name(name)
