# standard library
import logging

# typing
from typing import Optional

# Academy
from academy.domain import PersonDto, PersonNotFound
from academy.repositories import PeopleRepository


class PeopleService:
    """
    Business logic regarding the people.
    """

    def __init__(
        self, repository: PeopleRepository, logger: Optional[logging.Logger] = None
    ):
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)

    async def get_people_by_name(self, name: str) -> PersonDto:
        """
        Parameters:
            name: Exact name of the person.

        Return:
            The person.

        Raise:
            PersonNotFound: If no person has this name.
        """
        person = await self.repository.get_people_by_name(name)
        if person is None:
            self.logger.info("No person named '%s'", name)
            raise PersonNotFound(name)
        return person
