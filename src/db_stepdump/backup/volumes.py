"""Volume naming and size-bounded volume writing.

A table's backup is split into volumes named ``<table>#<index>.sql`` with
contiguous indexes starting at 0.  ``VolumeName`` is the structured form of
that name; the packed string only exists at the filesystem boundary.

Usage:
    from db_stepdump.backup.volumes import VolumeName, VolumeWriter

    name = VolumeName.first("orders")          # orders#0.sql
    writer = VolumeWriter("backups/shop")
    writer.append(str(name), "DROP TABLE IF EXISTS `orders`;\\n")
    active = writer.check_rollover(str(name), volume_size_mb=2)
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

VOLUME_EXTENSION = "sql"
BYTES_PER_MB = 1024 * 1024


class MalformedVolumeNameError(ValueError):
    """Raised when a file name is not ``<table>#<index>.<extension>``."""

    pass


class VolumeName(BaseModel):
    """Structured volume name ``{table, index, extension}``."""

    model_config = ConfigDict(frozen=True)

    table: str = Field(min_length=1)
    index: int = Field(default=0, ge=0)
    extension: str = VOLUME_EXTENSION

    def __str__(self) -> str:
        return f"{self.table}#{self.index}.{self.extension}"

    @classmethod
    def first(cls, table: str) -> "VolumeName":
        """The first volume of ``table`` (index 0)."""
        return cls(table=table)

    def next(self) -> "VolumeName":
        """The volume that follows this one for the same table."""
        return self.model_copy(update={"index": self.index + 1})

    @classmethod
    def parse(cls, filename: str) -> "VolumeName":
        """Parse a packed ``<table>#<index>.<extension>`` file name.

        Raises:
            MalformedVolumeNameError: If there is not exactly one ``#``, the
                part after it has no ``.``, the table part is empty or the
                index is not a non-negative integer written without leading
                zeros.

        Example:
            >>> VolumeName.parse("orders#3.sql").index
            3
        """
        parts = filename.split("#")
        if len(parts) != 2 or not parts[0]:
            raise MalformedVolumeNameError(
                f"Volume file name must look like '<table>#<index>.sql': {filename!r}"
            )
        table, remainder = parts
        index, dot, extension = remainder.partition(".")
        if not dot or not (index.isascii() and index.isdigit()):
            raise MalformedVolumeNameError(
                f"Volume file name has no numeric index and extension: {filename!r}"
            )
        volume = cls(table=table, index=int(index), extension=extension)
        # Zero-padded indexes would render to a different file name
        if str(volume) != filename:
            raise MalformedVolumeNameError(
                f"Volume file name is not in canonical form {str(volume)!r}: {filename!r}"
            )
        return volume


class VolumeWriter:
    """Appends SQL text to volumes inside one backup directory.

    Args:
        backup_dir: Directory holding the volumes.  Created if missing.
    """

    def __init__(self, backup_dir: str | Path) -> None:
        self._dir = Path(backup_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def backup_dir(self) -> Path:
        return self._dir

    def path(self, filename: str) -> Path:
        return self._dir / filename

    def touch(self, filename: str) -> None:
        """Create an empty volume if it does not exist yet."""
        self.path(filename).touch(exist_ok=True)

    def append(self, filename: str, text: str) -> None:
        """Append ``text`` to ``filename``, creating the file if needed."""
        with open(self.path(filename), "a", encoding="utf-8", newline="") as f:
            f.write(text)

    def size(self, filename: str) -> int:
        """Current on-disk size in bytes (0 for a missing file)."""
        path = self.path(filename)
        return path.stat().st_size if path.exists() else 0

    def check_rollover(self, filename: str, volume_size_mb: float) -> str:
        """Return the volume subsequent appends should go to.

        When ``filename`` has reached ``volume_size_mb`` megabytes the next
        volume (index + 1) is created and its name returned; the full file is
        left as it is.  Names that do not parse as a volume never roll over.
        """
        if self.size(filename) < volume_size_mb * BYTES_PER_MB:
            return filename

        try:
            volume = VolumeName.parse(filename)
        except MalformedVolumeNameError:
            logger.debug("rollover_skipped | filename=%s", filename)
            return filename

        next_name = str(volume.next())
        self.touch(next_name)
        logger.info("volume_rollover | sealed=%s next=%s", filename, next_name)
        return next_name
