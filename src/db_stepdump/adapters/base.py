"""Database client protocol definition.

Defines the ``DumpClient`` Protocol that the backup and restore engines
consume.  Query methods are ``async def``; value quoting is sync because it
is pure string work done by the driver's escaping rules.

Usage:
    from db_stepdump.adapters.base import DumpClient

    async def dump_one(client: DumpClient) -> None:
        ddl = await client.show_create_table("users")
        total = await client.count_rows("users")
        rows = await client.fetch_rows("users", offset=0, limit=200)
        literal = client.quote("O'Brien")
        await client.close()
"""

from typing import Any, Protocol


class DumpClient(Protocol):
    """Database client interface that dump adapters must implement.

    The engines never open or close connections on their own -- the caller
    constructs an adapter, hands it to an engine and closes it when done.
    """

    async def list_tables(self) -> list[str]:
        """Return table names in the order the server reports them.

        Equivalent of ``SHOW TABLE STATUS``; source order is preserved.
        """
        ...

    async def show_create_table(self, table: str) -> str:
        """Return the server's native ``CREATE TABLE`` statement for ``table``.

        The returned text carries no trailing ``;``.
        """
        ...

    async def count_rows(self, table: str) -> int:
        """Return ``SELECT COUNT(*)`` for ``table``."""
        ...

    async def fetch_rows(self, table: str, offset: int, limit: int) -> list[tuple]:
        """Fetch a window of rows.

        Args:
            table: Table name.
            offset: Number of rows to skip.
            limit: Maximum number of rows to return.

        Returns:
            List of row tuples in column order.  Empty list past the end.

        Example:
            rows = await client.fetch_rows("orders", offset=400, limit=200)
        """
        ...

    def quote(self, value: Any) -> str:
        """Render ``value`` as a SQL literal safe to embed in a statement.

        Example:
            client.quote("it's")  # "'it\\'s'"
            client.quote(None)    # "NULL"
        """
        ...

    async def execute(self, sql: str) -> None:
        """Execute one raw SQL statement without retrieving results.

        Raises:
            Exception: Whatever the driver raises for a failing statement.
        """
        ...

    async def close(self) -> None:
        """Close the connection and release resources."""
        ...
