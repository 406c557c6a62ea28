# third parties
import pytest

# Academy
from academy.domain import InvalidOperationError
from academy.repositories import (
    EXAMPLE_TABLE,
    MIGRATIONS,
    PEOPLE_TABLE,
    LocalDocDb,
    TableNotFound,
    applied_migrations,
    migrate,
    rollback,
)


@pytest.mark.asyncio
class TestLocalDocDb:
    async def test_insert_and_query(self, tmp_path):
        db = LocalDocDb(root_path=tmp_path)
        assert not await db.ensure_table(EXAMPLE_TABLE)
        assert await db.ensure_table(EXAMPLE_TABLE)

        first = await db.insert("dbo.Example", {"Name": "alpha"})
        second = await db.insert("dbo.Example", {"Name": "beta", "Description": "b"})

        assert first == {"Id": 1, "Name": "alpha", "Description": None}
        assert second["Id"] == 2
        assert (tmp_path / "dbo" / "Example" / "data.json").exists()
        assert await db.query("dbo.Example", where={"Id": 2}) == [second]
        assert await db.query("dbo.Example", order_by="Id", descending=True) == [
            second,
            first,
        ]
        assert await db.query(
            "dbo.Example", predicate=lambda d: d["Name"].startswith("al")
        ) == [first]
        assert len(await db.query("dbo.Example", max_results=1)) == 1

    async def test_persistence(self, tmp_path):
        db = LocalDocDb(root_path=tmp_path)
        await db.ensure_table(EXAMPLE_TABLE)
        await db.insert("dbo.Example", {"Name": "alpha"})

        reloaded = LocalDocDb(root_path=tmp_path)

        assert await reloaded.table_exists("dbo.Example")
        assert await reloaded.insert("dbo.Example", {"Name": "beta"}) == {
            "Id": 2,
            "Name": "beta",
            "Description": None,
        }

    async def test_delete(self):
        db = LocalDocDb()
        await db.ensure_table(EXAMPLE_TABLE)
        await db.insert("dbo.Example", {"Name": "alpha"})

        assert await db.delete("dbo.Example", where={"Id": 1}) == 1
        assert await db.delete("dbo.Example", where={"Id": 1}) == 0
        assert await db.query("dbo.Example") == []

    async def test_constraints(self):
        db = LocalDocDb()
        await db.ensure_table(EXAMPLE_TABLE)
        await db.ensure_table(PEOPLE_TABLE)

        with pytest.raises(InvalidOperationError):
            await db.insert("dbo.Example", {"Description": "no name"})
        with pytest.raises(InvalidOperationError):
            await db.insert("dbo.Example", {"Name": "x" * 101})
        await db.insert("republic.people", {"Name": "Leia Organa"})
        with pytest.raises(InvalidOperationError):
            await db.insert("republic.people", {"Name": "Leia Organa"})

    async def test_missing_table(self, tmp_path):
        db = LocalDocDb(root_path=tmp_path)

        assert not await db.table_exists("dbo.Example")
        with pytest.raises(TableNotFound):
            await db.query("dbo.Example")
        with pytest.raises(InvalidOperationError):
            await db.delete("dbo.Example", where={"Id": 1})

    async def test_drop_table(self, tmp_path):
        db = LocalDocDb(root_path=tmp_path)
        await db.ensure_table(EXAMPLE_TABLE)

        assert await db.drop_table("dbo.Example")
        assert not await db.drop_table("dbo.Example")
        assert not (tmp_path / "dbo" / "Example").exists()


@pytest.mark.asyncio
class TestMigrations:
    async def test_migrate(self, tmp_path):
        db = LocalDocDb(root_path=tmp_path)

        assert await migrate(db) == [m.id for m in MIGRATIONS]
        assert await migrate(db) == []
        assert await db.table_exists("dbo.Example")
        assert await db.table_exists("republic.people")
        assert await applied_migrations(LocalDocDb(root_path=tmp_path)) == [
            m.id for m in MIGRATIONS
        ]

    async def test_rollback(self):
        db = LocalDocDb()
        await migrate(db)
        initial_create, add_people = MIGRATIONS

        assert await rollback(db, target=initial_create.id) == [add_people.id]
        assert await db.table_exists("dbo.Example")
        assert not await db.table_exists("republic.people")

        assert await rollback(db) == [initial_create.id]
        assert await applied_migrations(db) == []

        assert await migrate(db) == [m.id for m in MIGRATIONS]

    async def test_rollback_unknown_target(self):
        db = LocalDocDb()
        await migrate(db)

        with pytest.raises(ValueError):
            await rollback(db, target="unknown")
