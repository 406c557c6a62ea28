# standard library
import logging

from contextlib import asynccontextmanager

# third parties
import aiohttp

from fastapi import FastAPI

# Academy
from academy.repositories import (
    DocDbExampleRepository,
    DocDbPeopleRepository,
    LocalDocDb,
    PeopleRepository,
    WebPeopleRepository,
    migrate,
)
from academy.services import ExampleService, PeopleService

# relative
from .deployment import Configuration, ConfigurationFactory

logger = logging.getLogger(__name__)


class Dependencies:
    def __init__(self, configuration: Configuration):
        self.configuration = configuration
        self.db = LocalDocDb(root_path=configuration.db_path)
        self.client_session: aiohttp.ClientSession | None = None
        self.people_repository = self.__people_repository()
        self.example_service = ExampleService(
            repository=DocDbExampleRepository(self.db),
            logger=logging.getLogger("academy.services.example"),
        )
        self.people_service = PeopleService(
            repository=self.people_repository,
            logger=logging.getLogger("academy.services.people"),
        )

    def __people_repository(self) -> PeopleRepository:
        if self.configuration.people_source == "db":
            return DocDbPeopleRepository(self.db)
        self.client_session = aiohttp.ClientSession()
        return WebPeopleRepository(
            hosts=self.configuration.web_hosts,
            timeout=self.configuration.rest_timeout_seconds,
            logger=logging.getLogger("academy.repositories.people"),
            client_session=self.client_session,
            skip_tls_verification=self.configuration.skip_tls_verification,
        )

    async def shutdown(self):
        if isinstance(self.people_repository, WebPeopleRepository):
            await self.people_repository.close()
        if self.client_session is not None:
            await self.client_session.close()


class DependenciesFactory:
    __dependencies: Dependencies | None = None

    def __call__(self) -> Dependencies:
        if DependenciesFactory.__dependencies is None:
            raise RuntimeError("Dependencies not build")
        return DependenciesFactory.__dependencies

    @classmethod
    def built(cls) -> bool:
        return cls.__dependencies is not None

    @classmethod
    async def build(cls):
        await cls.shutdown()
        cls.__dependencies = Dependencies(configuration=ConfigurationFactory.get())

    @classmethod
    async def shutdown(cls):
        if cls.__dependencies is not None:
            await cls.__dependencies.shutdown()
            cls.__dependencies = None


dependenciesFactory = DependenciesFactory()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await DependenciesFactory.build()
    deps = dependenciesFactory()
    if deps.configuration.enable_auto_migrate_db:
        logger.info("Migrating database schema if needed")
        await migrate(deps.db)
    yield
    await DependenciesFactory.shutdown()
