"""SQL text producers for one table: schema preamble and row batches."""

from typing import Any, Callable, Sequence

from db_stepdump.adapters.base import DumpClient
from db_stepdump.adapters.mysql import quote_identifier

# Statements in a volume end with ";" + newline; restore splits on that.
STATEMENT_END = ";\n"


class SchemaEmitter:
    """Produces the ``DROP TABLE IF EXISTS`` + ``CREATE TABLE`` preamble."""

    def __init__(self, client: DumpClient) -> None:
        self._client = client

    async def emit(self, table: str) -> str:
        """Return the preamble for ``table``.

        Database errors from ``SHOW CREATE TABLE`` propagate to the caller.
        """
        create_sql = await self._client.show_create_table(table)
        return (
            f"DROP TABLE IF EXISTS {quote_identifier(table)}{STATEMENT_END}"
            f"{create_sql.rstrip().rstrip(';')}{STATEMENT_END}"
        )


class RowBatchReader:
    """Reads one bounded window of rows and renders it as an INSERT."""

    def __init__(self, client: DumpClient) -> None:
        self._client = client

    async def read(self, table: str, offset: int, limit: int) -> list[tuple]:
        return await self._client.fetch_rows(table, offset=offset, limit=limit)

    async def read_insert(self, table: str, offset: int, limit: int) -> str:
        """Fetch a window and render it; empty string when no rows came back."""
        rows = await self.read(table, offset, limit)
        return render_insert(table, rows, self._client.quote)


def render_insert(
    table: str,
    rows: Sequence[Sequence[Any]],
    quote: Callable[[Any], str],
) -> str:
    """Render rows as one multi-row ``INSERT INTO ... VALUES (...),(...);``.

    Every value goes through ``quote``.  Returns ``""`` for no rows.

    Example:
        >>> render_insert("t", [(1, "a")], lambda v: repr(v))
        "INSERT INTO `t` VALUES (1,'a');\\n"
    """
    if not rows:
        return ""
    values = ",".join(
        "(" + ",".join(quote(value) for value in row) + ")" for row in rows
    )
    return f"INSERT INTO {quote_identifier(table)} VALUES {values}{STATEMENT_END}"
