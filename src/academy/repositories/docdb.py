# standard library
import json
import shutil

from collections.abc import Callable, Mapping
from pathlib import Path
from threading import Lock

# typing
from typing import Any, Literal, Optional

# third parties
from pydantic import BaseModel

# Academy
from academy.domain import InvalidOperationError

Document = dict[str, Any]


class TableNotFound(InvalidOperationError):
    """
    Raised when accessing a table that has not been created.
    """

    def __init__(self, qualified_name: str):
        super().__init__(f"Table '{qualified_name}' does not exist")
        self.qualified_name = qualified_name


class Column(BaseModel):
    """
    Column definition.
    """

    name: str
    type: Literal["int", "text"] = "text"
    required: bool = False
    max_length: Optional[int] = None
    """
    Maximum length of `text` columns, if any.
    """


class TableBody(BaseModel):
    """
    Table definition.
    """

    name: str
    schema_name: str = "dbo"
    columns: list[Column]
    primary_key: str
    identity: bool = False
    """
    If `True`, the primary key is an integer attributed on insertion (starting from 1).
    """

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"


class LocalDocDb:
    """
    Local document database supporting the application's tables.

    Each table is stored in a single JSON file located at `{root_path}/{schema_name}/{name}/data.json`.
    If `root_path` is `None`, tables only live in memory.
    """

    def __init__(self, root_path: Optional[Path] = None):
        """
        Parameters:
            root_path: Folder in which tables are persisted, or `None` to keep them in memory.
        """
        self.root_path = root_path
        self.__lock = Lock()
        self.__tables: dict[str, Document] = {}

    def data_path(self, qualified_name: str) -> Optional[Path]:
        if self.root_path is None:
            return None
        schema_name, name = qualified_name.split(".", 1)
        return self.root_path / schema_name / name / "data.json"

    async def table_exists(self, qualified_name: str) -> bool:
        with self.__lock:
            return self.__load(qualified_name) is not None

    async def ensure_table(self, table: TableBody) -> bool:
        """
        Ensure the existence of the table.

        Parameters:
            table: Table definition.

        Return:
            Whether the table already existed.
        """
        with self.__lock:
            if self.__load(table.qualified_name) is not None:
                return True
            self.__tables[table.qualified_name] = {
                "table": table.model_dump(),
                "identity": 0,
                "documents": [],
            }
            self.__persist(table.qualified_name)
            return False

    async def drop_table(self, qualified_name: str) -> bool:
        """
        Delete the table and its data.

        Return:
            Whether the table existed.
        """
        with self.__lock:
            existed = self.__load(qualified_name) is not None
            self.__tables.pop(qualified_name, None)
            path = self.data_path(qualified_name)
            if path and path.parent.exists():
                shutil.rmtree(path.parent)
            return existed

    async def insert(self, qualified_name: str, doc: Mapping[str, Any]) -> Document:
        """
        Insert a document.

        Parameters:
            qualified_name: Name of the table, e.g. `dbo.Example`.
            doc: The document, columns not provided are set to `None`.

        Return:
            The document inserted, including its primary key if attributed by the table.

        Raise:
            TableNotFound: If the table does not exist.
            InvalidOperationError: If the document does not comply with the table definition, or if its primary key
                is already used.
        """
        with self.__lock:
            data = self.__get(qualified_name)
            table = TableBody(**data["table"])
            document = {c.name: doc.get(c.name) for c in table.columns}
            if table.identity:
                data["identity"] += 1
                document[table.primary_key] = data["identity"]
            self.__validate(table, document)
            key = document[table.primary_key]
            if any(d[table.primary_key] == key for d in data["documents"]):
                raise InvalidOperationError(
                    f"Primary key {key!r} already exists in '{qualified_name}'"
                )
            data["documents"].append(document)
            self.__persist(qualified_name)
            return dict(document)

    async def query(
        self,
        qualified_name: str,
        where: Optional[Mapping[str, Any]] = None,
        predicate: Optional[Callable[[Document], bool]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        max_results: Optional[int] = None,
    ) -> list[Document]:
        """
        Execute a query on the table.

        Parameters:
            qualified_name: Name of the table.
            where: Equality conditions on columns.
            predicate: Additional condition.
            order_by: Column used to sort the results, by default documents are returned in insertion order.
            descending: Whether the ordering is descending.
            max_results: Maximum count of documents returned.

        Return:
            Copies of the matching documents.
        """
        with self.__lock:
            documents = self.__get(qualified_name)["documents"]
            r = [
                dict(d)
                for d in documents
                if _is_matching(d, where) and (predicate is None or predicate(d))
            ]
        if order_by:
            r = sorted(
                r,
                key=lambda d: (d[order_by] is None, d[order_by]),
                reverse=descending,
            )
        return r[0:max_results] if max_results is not None else r

    async def delete(
        self, qualified_name: str, where: Optional[Mapping[str, Any]] = None
    ) -> int:
        """
        Delete the documents matching the conditions.

        Return:
            The count of documents deleted.
        """
        with self.__lock:
            data = self.__get(qualified_name)
            kept = [d for d in data["documents"] if not _is_matching(d, where)]
            count = len(data["documents"]) - len(kept)
            data["documents"] = kept
            if count:
                self.__persist(qualified_name)
            return count

    def __get(self, qualified_name: str) -> Document:
        data = self.__load(qualified_name)
        if data is None:
            raise TableNotFound(qualified_name)
        return data

    def __load(self, qualified_name: str) -> Optional[Document]:
        # should be called within a mutex section
        if qualified_name in self.__tables:
            return self.__tables[qualified_name]
        path = self.data_path(qualified_name)
        if path is None or not path.exists():
            return None
        self.__tables[qualified_name] = json.loads(path.read_text())
        return self.__tables[qualified_name]

    def __persist(self, qualified_name: str):
        # should be called within a mutex section
        path = self.data_path(qualified_name)
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data=json.dumps(self.__tables[qualified_name], indent=4))

    @staticmethod
    def __validate(table: TableBody, document: Document):
        for column in table.columns:
            value = document[column.name]
            if value is None:
                if column.required:
                    raise InvalidOperationError(
                        f"Column '{column.name}' of '{table.qualified_name}' is required"
                    )
                continue
            if column.type == "int" and (
                not isinstance(value, int) or isinstance(value, bool)
            ):
                raise InvalidOperationError(
                    f"Column '{column.name}' of '{table.qualified_name}' expects an integer"
                )
            if column.type == "text" and not isinstance(value, str):
                raise InvalidOperationError(
                    f"Column '{column.name}' of '{table.qualified_name}' expects a string"
                )
            if (
                column.type == "text"
                and column.max_length is not None
                and len(value) > column.max_length
            ):
                raise InvalidOperationError(
                    f"Column '{column.name}' of '{table.qualified_name}' is limited to {column.max_length} characters"
                )


def _is_matching(doc: Document, where: Optional[Mapping[str, Any]]) -> bool:
    return not where or all(doc.get(k) == v for k, v in where.items())
