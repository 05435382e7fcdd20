"""Shared fixtures: an in-memory ``DumpClient`` stand-in."""

from typing import Any

import pytest


class FakeDumpClient:
    """In-memory implementation of the ``DumpClient`` protocol.

    Args:
        tables: Mapping of table name to its rows (tuples), in server order.
        fail_on: Substrings; ``execute()`` raises for statements containing any.
    """

    def __init__(
        self,
        tables: dict[str, list[tuple]] | None = None,
        fail_on: tuple[str, ...] = (),
    ) -> None:
        self.tables = tables or {}
        self.fail_on = fail_on
        self.calls: list[tuple[str, Any]] = []
        self.executed: list[str] = []
        self.closed = False

    async def list_tables(self) -> list[str]:
        self.calls.append(("list_tables", None))
        return list(self.tables)

    async def show_create_table(self, table: str) -> str:
        self.calls.append(("show_create_table", table))
        return f"CREATE TABLE `{table}` (\n  `id` int NOT NULL\n) ENGINE=InnoDB"

    async def count_rows(self, table: str) -> int:
        self.calls.append(("count_rows", table))
        return len(self.tables[table])

    async def fetch_rows(self, table: str, offset: int, limit: int) -> list[tuple]:
        self.calls.append(("fetch_rows", (table, offset, limit)))
        return self.tables[table][offset:offset + limit]

    def quote(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, (int, float)):
            return str(value)
        escaped = str(value).replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
        return f"'{escaped}'"

    async def execute(self, sql: str) -> None:
        if any(marker in sql for marker in self.fail_on):
            raise RuntimeError(f"You have an error in your SQL syntax near '{sql[:20]}'")
        self.executed.append(sql)

    async def close(self) -> None:
        self.closed = True

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


@pytest.fixture
def make_client():
    """Factory fixture building a ``FakeDumpClient``."""

    def _make(tables: dict[str, list[tuple]] | None = None, fail_on: tuple[str, ...] = ()):
        return FakeDumpClient(tables, fail_on)

    return _make
