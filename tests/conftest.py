# standard library
import asyncio

from pathlib import Path

# typing
from typing import Optional

# third parties
import pytest

from fastapi import FastAPI
from fastapi.testclient import TestClient

# Academy
from academy.repositories import LocalDocDb, migrate
from academy.web import Configuration, ConfigurationFactory, create_app
from academy.web.middlewares import CredentialsValidator


async def seed(root_path: Path) -> None:
    db = LocalDocDb(root_path=root_path)
    await migrate(db)
    for name in ["alpha", "alphabet", "beta"]:
        await db.insert("dbo.Example", {"Name": name})
    await db.insert(
        "republic.people",
        {"Name": "Luke Skywalker", "Height": "172", "Gender": "male"},
    )


@pytest.fixture
def seeded_path(tmp_path) -> Path:
    asyncio.run(seed(tmp_path))
    return tmp_path


@pytest.fixture(autouse=True)
def reset_configuration():
    ConfigurationFactory.reset()
    yield
    ConfigurationFactory.reset()


def make_app(
    validator: Optional[CredentialsValidator] = None, **configuration
) -> FastAPI:
    ConfigurationFactory.set(
        Configuration(**{"use_https": False, "session_secret": "secret", **configuration})
    )
    return create_app(validator=validator)


def make_client(
    validator: Optional[CredentialsValidator] = None, **configuration
) -> TestClient:
    return TestClient(
        make_app(validator=validator, **configuration),
        raise_server_exceptions=False,
        follow_redirects=False,
    )
