# standard library
import logging

from abc import ABC, abstractmethod
from collections.abc import Sequence

# typing
from typing import Optional

# relative
from .docdb import Column, LocalDocDb, TableBody

logger = logging.getLogger(__name__)

EXAMPLE_TABLE = TableBody(
    name="Example",
    schema_name="dbo",
    columns=[
        Column(name="Id", type="int", required=True),
        Column(name="Name", type="text", required=True, max_length=100),
        Column(name="Description", type="text"),
    ],
    primary_key="Id",
    identity=True,
)

PEOPLE_TABLE = TableBody(
    name="people",
    schema_name="republic",
    columns=[
        Column(name=name)
        for name in [
            "Name",
            "Height",
            "Mass",
            "Hair_Color",
            "Skin_Color",
            "Eye_Color",
            "Birth_Name",
            "Gender",
            "Homeworld",
        ]
    ],
    primary_key="Name",
)

MIGRATIONS_TABLE = TableBody(
    name="__migrations__",
    schema_name="dbo",
    columns=[Column(name="MigrationId", required=True)],
    primary_key="MigrationId",
)


class Migration(ABC):
    """
    A step of the evolution of the tables' structure.

    Both directions have to be implemented: `down` reverts what `up` did.
    """

    id: str
    """
    Identifier of the migration, migrations are applied in the order they are provided.
    """

    @abstractmethod
    async def up(self, db: LocalDocDb) -> None: ...

    @abstractmethod
    async def down(self, db: LocalDocDb) -> None: ...


class InitialCreate(Migration):
    id = "20230209223029_InitialCreate"

    async def up(self, db: LocalDocDb) -> None:
        await db.ensure_table(EXAMPLE_TABLE)

    async def down(self, db: LocalDocDb) -> None:
        await db.drop_table(EXAMPLE_TABLE.qualified_name)


class AddPeople(Migration):
    id = "20230216101500_AddPeople"

    async def up(self, db: LocalDocDb) -> None:
        await db.ensure_table(PEOPLE_TABLE)

    async def down(self, db: LocalDocDb) -> None:
        await db.drop_table(PEOPLE_TABLE.qualified_name)


MIGRATIONS: list[Migration] = [InitialCreate(), AddPeople()]


async def applied_migrations(db: LocalDocDb) -> list[str]:
    """
    Return:
        Identifiers of the migrations applied, in the order they have been applied.
    """
    if not await db.table_exists(MIGRATIONS_TABLE.qualified_name):
        return []
    docs = await db.query(MIGRATIONS_TABLE.qualified_name)
    return [d["MigrationId"] for d in docs]


async def migrate(
    db: LocalDocDb,
    migrations: Sequence[Migration] = MIGRATIONS,
    log: Optional[logging.Logger] = None,
) -> list[str]:
    """
    Apply the pending migrations.

    Parameters:
        db: The database.
        migrations: All the migrations, in order.
        log: Logger reporting the migrations applied.

    Return:
        Identifiers of the migrations applied.
    """
    log = log or logger
    await db.ensure_table(MIGRATIONS_TABLE)
    done = set(await applied_migrations(db))
    applied = []
    for migration in migrations:
        if migration.id in done:
            continue
        log.info("Apply migration %s", migration.id)
        await migration.up(db)
        await db.insert(MIGRATIONS_TABLE.qualified_name, {"MigrationId": migration.id})
        applied.append(migration.id)
    if not applied:
        log.info("Database is up to date")
    return applied


async def rollback(
    db: LocalDocDb,
    migrations: Sequence[Migration] = MIGRATIONS,
    target: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> list[str]:
    """
    Revert the applied migrations that come after `target`.

    Parameters:
        db: The database.
        migrations: All the migrations, in order.
        target: Identifier of the last migration to keep, if `None` every migration is reverted.
        log: Logger reporting the migrations reverted.

    Return:
        Identifiers of the migrations reverted.

    Raise:
        ValueError: If `target` is not a known migration.
    """
    log = log or logger
    ids = [m.id for m in migrations]
    if target is not None and target not in ids:
        raise ValueError(f"Unknown migration '{target}'")
    keep = ids[: ids.index(target) + 1] if target else []
    done = set(await applied_migrations(db))
    reverted = []
    for migration in reversed(migrations):
        if migration.id in keep or migration.id not in done:
            continue
        log.info("Revert migration %s", migration.id)
        await migration.down(db)
        await db.delete(
            MIGRATIONS_TABLE.qualified_name, where={"MigrationId": migration.id}
        )
        reverted.append(migration.id)
    return reverted
