"""Step-driven backup engine.

``BackupEngine.backup()`` performs exactly one bounded unit of work per call
-- a table's schema preamble, or one batch of rows -- and returns the cursor
to pass into the next call.  There is no loop inside the engine: a caller
(a CLI loop or a request handler) re-invokes it until the reported
total percentage reaches 100.

Usage:
    from db_stepdump.backup.engine import BackupEngine
    from db_stepdump.backup.models import BackupOptions

    engine = BackupEngine(adapter, BackupOptions(backup_dir="backups/shop"))

    cursor, progress = await engine.backup()
    while not progress.done:
        cursor, progress = await engine.backup(cursor)
"""

import logging

from db_stepdump.adapters.base import DumpClient
from db_stepdump.backup.emitters import RowBatchReader, SchemaEmitter
from db_stepdump.backup.models import BackupCursor, BackupOptions, BackupProgress
from db_stepdump.backup.volumes import VolumeName, VolumeWriter

logger = logging.getLogger(__name__)


class BackupConfigError(ValueError):
    """Raised when a backup cannot start because settings are missing."""

    pass


class BackupEngine:
    """Orchestrates schema emission, row batches and volume rollover.

    One engine holds one database client and the resolved table list for
    its lifetime.  The engine itself keeps no progress state: everything a
    step needs comes from the cursor argument.

    Args:
        client: Adapter implementing ``DumpClient``.
        options: Backup settings.  ``options.tables`` fixes the table order;
            when empty the list comes from ``client.list_tables()`` once.
    """

    def __init__(self, client: DumpClient, options: BackupOptions | None = None) -> None:
        self._client = client
        self._options = options or BackupOptions()
        self._tables: list[str] | None = list(self._options.tables) if self._options.tables else None
        self._schema = SchemaEmitter(client)
        self._rows = RowBatchReader(client)

    @property
    def options(self) -> BackupOptions:
        return self._options

    async def get_tables(self) -> list[str]:
        """Return the ordered table list, querying the server on first use."""
        if self._tables is None:
            tables = await self._client.list_tables()
            if any(not name for name in tables):
                raise ValueError("Server reported a table with an empty name")
            self._tables = tables
        return self._tables

    def _resolve_backup_dir(self, cursor: BackupCursor) -> str:
        backup_dir = cursor.backup_dir or self._options.backup_dir
        if not backup_dir:
            raise BackupConfigError(
                "Backup directory is not set. Pass backup_dir in BackupOptions "
                "or in the resume cursor."
            )
        return backup_dir

    async def backup(
        self, cursor: BackupCursor | None = None
    ) -> tuple[BackupCursor, BackupProgress]:
        """Run one backup step.

        Args:
            cursor: Cursor returned by the previous call, or ``None`` / an
                empty ``BackupCursor`` to start fresh.  It is not modified.

        Returns:
            ``(cursor, progress)`` -- the cursor for the next call and a
            snapshot of where the job stands.

        Raises:
            BackupConfigError: If no backup directory is configured.
            Exception: Database errors from schema, count or row queries
                propagate unchanged; nothing is written for that step, so
                retrying with the same cursor is safe.
        """
        state = (cursor or BackupCursor()).model_copy()
        state.backup_dir = self._resolve_backup_dir(state)
        writer = VolumeWriter(state.backup_dir)
        tables = await self.get_tables()

        # Current table finished: move to the next one and its first volume
        if state.table_percentage >= 100 and state.table_index + 1 < len(tables):
            state.table_index += 1
            state.rows_emitted = 0
            state.rows_total = 0
            state.table_percentage = 0
            state.schema_written = False
            state.filename = str(VolumeName.first(tables[state.table_index]))

        if state.table_index >= len(tables):
            logger.debug("backup_idle | table_index=%s tables=%s", state.table_index, len(tables))
            return state, self._progress(state, "", total_percentage=100)

        table = tables[state.table_index]
        if not state.filename:
            state.filename = str(VolumeName.first(table))

        worked = True
        if not state.schema_written:
            preamble = await self._schema.emit(table)
            rows_total = 0
            if not self._options.is_structure_only(table):
                rows_total = await self._client.count_rows(table)
            writer.append(state.filename, preamble)
            state.schema_written = True
            state.rows_total = rows_total
            logger.debug("schema_written | table=%s rows_total=%s", table, rows_total)
        elif state.rows_emitted < state.rows_total:
            batch_size = self._options.batch_size
            statement = await self._rows.read_insert(table, state.rows_emitted, batch_size)
            state.filename = writer.check_rollover(state.filename, self._options.volume_size_mb)
            if statement:
                writer.append(state.filename, statement)
            state.rows_emitted = min(state.rows_emitted + batch_size, state.rows_total)
            logger.debug(
                "rows_written | table=%s rows_emitted=%s rows_total=%s file=%s",
                table, state.rows_emitted, state.rows_total, state.filename,
            )
        else:
            worked = False

        if state.rows_total == 0:
            state.table_percentage = 100
        else:
            state.table_percentage = state.rows_emitted * 100 // state.rows_total

        completed = state.table_index + 1 if state.table_percentage >= 100 else state.table_index
        total_percentage = completed * 100 // len(tables)

        if worked and state.table_percentage >= 100:
            logger.info(
                "table_backed_up | table=%s rows=%s total_percentage=%s",
                table, state.rows_total, total_percentage,
            )
        return state, self._progress(state, table, total_percentage)

    @staticmethod
    def _progress(state: BackupCursor, table: str, total_percentage: int) -> BackupProgress:
        return BackupProgress(
            table=table,
            table_index=state.table_index,
            rows_emitted=state.rows_emitted,
            rows_total=state.rows_total,
            total_percentage=total_percentage,
            table_percentage=state.table_percentage,
            filename=state.filename,
            backup_dir=state.backup_dir,
        )
