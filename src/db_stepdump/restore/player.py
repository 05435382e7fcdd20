"""Replays the statements of one volume file."""

import logging
import re
from pathlib import Path

from db_stepdump.adapters.base import DumpClient
from db_stepdump.restore.models import PlaybackResult

logger = logging.getLogger(__name__)

# Statement delimiter written by the backup side: ";" at end of line.
_STATEMENT_SPLIT = re.compile(r";\r?\n")


def split_statements(content: str) -> list[str]:
    """Split volume text into statements, dropping blank fragments.

    Example:
        >>> split_statements("DROP TABLE t;\\nCREATE TABLE t (id int);\\n")
        ['DROP TABLE t', 'CREATE TABLE t (id int)']
    """
    return [part for part in _STATEMENT_SPLIT.split(content) if part.strip()]


class ScriptPlayer:
    """Executes every statement of a volume file against the database.

    Statement failures are contained per file: playback of the file stops at
    the first failing statement and the outcome comes back as
    ``PlaybackResult(applied=False, error=...)`` instead of an exception.
    A file that cannot be read or is not valid UTF-8 is reported the same way.
    """

    def __init__(self, client: DumpClient) -> None:
        self._client = client

    async def play(self, path: str | Path) -> PlaybackResult:
        path = Path(path)
        result = PlaybackResult(filename=path.name)
        if not path.is_file():
            logger.warning("volume_missing | file=%s", path)
            return result

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("volume_unreadable | file=%s error=%s", path.name, exc)
            result.applied = False
            result.error = str(exc)
            return result

        statements = split_statements(content)
        for statement in statements:
            try:
                await self._client.execute(statement)
            except Exception as exc:
                logger.warning(
                    "volume_statement_failed | file=%s statement=%s error=%s",
                    path.name, result.statements_executed + 1, exc,
                )
                result.applied = False
                result.error = str(exc)
                return result
            result.statements_executed += 1

        logger.debug("volume_played | file=%s statements=%s", path.name, result.statements_executed)
        return result
