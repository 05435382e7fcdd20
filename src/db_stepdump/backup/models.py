"""Backup state and settings models.

``BackupCursor`` is the resume token handed back and forth between the
caller and ``BackupEngine.backup()``; ``BackupProgress`` is the snapshot
reported after every step.  Both are plain pydantic models, so a caller can
persist them as JSON between requests.

Usage:
    from db_stepdump.backup.models import BackupCursor, BackupOptions

    options = BackupOptions(backup_dir="backups/shop", batch_size=500)
    cursor = BackupCursor()                      # start fresh
    token = cursor.model_dump_json()             # persist between ticks
    cursor = BackupCursor.model_validate_json(token)
"""

from pydantic import BaseModel, Field, field_validator


class BackupOptions(BaseModel):
    """Per-job backup settings (the ``[backup]`` section of db.toml)."""

    backup_dir: str = ""                            # destination directory
    tables: list[str] | None = None                 # explicit order; None = SHOW TABLE STATUS
    volume_size_mb: float = Field(default=2, gt=0)  # rollover threshold
    batch_size: int = Field(default=200, gt=0)      # rows per INSERT / per step
    only_structure: bool = False                    # skip rows for every table
    structure_tables: list[str] = Field(default_factory=list)  # skip rows for these

    @field_validator("tables")
    @classmethod
    def _no_empty_table_names(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and any(not name for name in value):
            raise ValueError("table names must not be empty")
        return value

    def is_structure_only(self, table: str) -> bool:
        """True when rows of ``table`` are not backed up."""
        return self.only_structure or table in self.structure_tables


class BackupCursor(BaseModel):
    """Resumable state of an in-progress backup.

    The default instance (all zero / blank) starts a fresh backup.
    ``schema_written`` records that the active table's DROP/CREATE preamble
    is already on disk, so a table's rows start on the following step.
    """

    table_index: int = Field(default=0, ge=0)
    rows_emitted: int = Field(default=0, ge=0)
    rows_total: int = Field(default=0, ge=0)
    table_percentage: int = Field(default=0, ge=0, le=100)
    schema_written: bool = False
    filename: str = ""
    backup_dir: str = ""


class BackupProgress(BaseModel):
    """Progress snapshot returned by each backup step."""

    table: str = ""
    table_index: int = 0
    rows_emitted: int = 0
    rows_total: int = 0
    total_percentage: int = 0
    table_percentage: int = 0
    filename: str = ""
    backup_dir: str = ""

    @property
    def done(self) -> bool:
        """Whether the whole job has reached 100%."""
        return self.total_percentage >= 100
