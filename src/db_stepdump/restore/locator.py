"""Deterministic ordering of the volumes found in a restore directory."""

from pathlib import Path

from db_stepdump.backup.volumes import VolumeName


class ScriptLocator:
    """Lists the volumes of a backup directory in replay order.

    Files are ordered by table name, then by numeric volume index, so
    ``orders#0.sql`` always precedes ``orders#1.sql`` and ``orders#10.sql``.
    Every regular file must be a volume: a stray file raises
    ``MalformedVolumeNameError`` instead of being replayed out of order.

    Usage:
        files = ScriptLocator("backups/shop").files()
        # ['orders#0.sql', 'orders#1.sql', 'users#0.sql']
    """

    def __init__(self, source_dir: str | Path) -> None:
        self._dir = Path(source_dir)

    @property
    def source_dir(self) -> Path:
        return self._dir

    def volumes(self) -> list[VolumeName]:
        """Parse and sort every file in the directory.

        Raises:
            FileNotFoundError: If the directory does not exist.
            MalformedVolumeNameError: If a file name is not a volume name.
        """
        if not self._dir.is_dir():
            raise FileNotFoundError(f"Restore directory not found: {self._dir}")

        volumes = [
            VolumeName.parse(entry.name)
            for entry in self._dir.iterdir()
            if entry.is_file()
        ]
        return sorted(volumes, key=lambda v: (v.table, v.index, v.extension))

    def files(self) -> list[str]:
        """File names in replay order."""
        return [str(volume) for volume in self.volumes()]
