# third parties
import pytest

from aiohttp import web

# Academy
from academy.domain import ExampleDto, PersonDto, PersonNotFound
from academy.repositories import (
    DocDbExampleRepository,
    DocDbPeopleRepository,
    LocalDocDb,
    WebPeopleRepository,
    migrate,
)
from academy.services import ExampleService, PeopleService
from academy.web import Configuration
from academy.web.dependencies import Dependencies

# relative
from .web_test_utils import dead_host, serve


async def seeded_db() -> LocalDocDb:
    db = LocalDocDb()
    await migrate(db)
    for name in ["alpha", "alphabet", "beta"]:
        await db.insert("dbo.Example", {"Name": name})
    await db.insert(
        "republic.people",
        {"Name": "Luke Skywalker", "Height": "172", "Hair_Color": "blond"},
    )
    return db


async def people_search_handler(request: web.Request) -> web.Response:
    search = request.query["search"]
    results = [
        {"name": "Luke Skywalker", "height": "172", "birth_year": "19BBY"},
        {"name": "Luke Skywalker Jr", "height": "80"},
    ]
    return web.json_response(
        {"count": 2, "results": [r for r in results if search in r["name"]]}
    )


@pytest.mark.asyncio
class TestExampleService:
    async def test_get_example(self):
        service = ExampleService(repository=DocDbExampleRepository(await seeded_db()))

        assert await service.get_example(2) == ExampleDto(
            exampleId=2, exampleName="alphabet"
        )
        assert await service.get_example(42) is None

    async def test_get_examples_by_name(self):
        service = ExampleService(repository=DocDbExampleRepository(await seeded_db()))

        examples = await service.get_examples_by_name("alpha")

        assert [e.exampleName for e in examples] == ["alpha", "alphabet"]
        assert await service.get_examples_by_name("gamma") == []

    async def test_delete_example(self):
        service = ExampleService(repository=DocDbExampleRepository(await seeded_db()))

        await service.delete_example(ExampleDto(exampleId=1))
        await service.delete_example(ExampleDto(exampleId=1))

        assert await service.get_example(1) is None
        assert await service.get_example(2) is not None


@pytest.mark.asyncio
class TestPeopleService:
    async def test_from_db(self):
        service = PeopleService(repository=DocDbPeopleRepository(await seeded_db()))

        person = await service.get_people_by_name("Luke Skywalker")

        assert person == PersonDto(
            name="Luke Skywalker", height="172", hair_color="blond"
        )
        with pytest.raises(PersonNotFound):
            await service.get_people_by_name("Luke")

    async def test_from_web(self):
        async with serve({("GET", "/api/people/"): people_search_handler}) as server:
            async with WebPeopleRepository(
                hosts=[dead_host(), f"{server.host}api/"], timeout=5
            ) as repository:
                service = PeopleService(repository=repository)
                person = await service.get_people_by_name("Luke Skywalker")
                with pytest.raises(PersonNotFound):
                    await service.get_people_by_name("Luke")

        assert person.name == "Luke Skywalker"
        assert person.height == "172"
        assert "/api/people/?search=Luke%20Skywalker" in server.requests


@pytest.mark.asyncio
class TestDependencies:
    async def test_people_from_db(self):
        dependencies = Dependencies(configuration=Configuration())

        assert isinstance(dependencies.people_repository, DocDbPeopleRepository)
        assert dependencies.client_session is None
        await dependencies.shutdown()

    async def test_people_from_web(self):
        dependencies = Dependencies(
            configuration=Configuration(
                people_source="web", web_hosts=["http://localhost:8080/api/"]
            )
        )
        session = dependencies.client_session

        assert isinstance(dependencies.people_repository, WebPeopleRepository)
        assert session is not None
        assert not session.closed
        await dependencies.shutdown()
        assert session.closed
