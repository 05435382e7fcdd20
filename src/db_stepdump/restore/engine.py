"""Step-driven restore engine.

``RecoveryEngine.recover()`` replays exactly one volume file per call and
returns the cursor for the next call.

The reported percentage uses the index of the file played in this step
over the total file count, so playing the last of ``N`` files reports
``(N-1)/N``; only the following call, which finds nothing left to play,
reports 100.

Usage:
    from db_stepdump.restore.engine import RecoveryEngine

    engine = RecoveryEngine(adapter, "backups/shop")

    cursor, progress = await engine.recover()
    while not progress.done:
        cursor, progress = await engine.recover(cursor)
"""

import logging
from pathlib import Path

from db_stepdump.adapters.base import DumpClient
from db_stepdump.restore.locator import ScriptLocator
from db_stepdump.restore.models import RecoveryCursor, RecoveryProgress
from db_stepdump.restore.player import ScriptPlayer

logger = logging.getLogger(__name__)


class RecoveryEngine:
    """Orchestrates ScriptLocator and ScriptPlayer over one source directory.

    The ordered file list is computed on first use and reused for the
    lifetime of the engine.

    Args:
        client: Adapter implementing ``DumpClient``.
        source_dir: Directory holding ``<table>#<index>.sql`` volumes.
    """

    def __init__(self, client: DumpClient, source_dir: str | Path) -> None:
        self._locator = ScriptLocator(source_dir)
        self._player = ScriptPlayer(client)
        self._files: list[str] | None = None

    @property
    def source_dir(self) -> Path:
        return self._locator.source_dir

    def get_files(self) -> list[str]:
        """Ordered volume file names (cached after the first scan)."""
        if self._files is None:
            self._files = self._locator.files()
            logger.debug("volumes_located | dir=%s count=%s", self.source_dir, len(self._files))
        return self._files

    async def recover(
        self, cursor: RecoveryCursor | None = None
    ) -> tuple[RecoveryCursor, RecoveryProgress]:
        """Run one restore step.

        Args:
            cursor: Cursor returned by the previous call, or ``None`` to
                start fresh.  It is not modified.

        Returns:
            ``(cursor, progress)``.  A file whose statements failed still
            advances the cursor; ``progress.applied`` is ``False`` and
            ``progress.error`` carries the database message so the caller
            can decide whether to keep going.

        Raises:
            FileNotFoundError: If the source directory does not exist.
            MalformedVolumeNameError: If the directory holds a non-volume file.
        """
        files = self.get_files()
        state = (cursor or RecoveryCursor()).model_copy()
        state.current_index = state.next_index

        if state.current_index >= len(files):
            state.total_percentage = 100
            return state, self._progress(state, len(files))

        filename = files[state.current_index]
        result = await self._player.play(self.source_dir / filename)
        state.total_percentage = state.current_index * 100 // len(files)
        state.next_index = state.current_index + 1

        if not result.applied:
            logger.warning(
                "volume_not_applied | file=%s index=%s error=%s",
                filename, state.current_index, result.error,
            )
        return state, self._progress(
            state, len(files), filename=filename, applied=result.applied, error=result.error
        )

    @staticmethod
    def _progress(
        state: RecoveryCursor,
        total_files: int,
        filename: str | None = None,
        applied: bool = True,
        error: str | None = None,
    ) -> RecoveryProgress:
        return RecoveryProgress(
            current_index=state.current_index,
            next_index=state.next_index,
            total_percentage=state.total_percentage,
            total_files=total_files,
            filename=filename,
            applied=applied,
            error=error,
        )
