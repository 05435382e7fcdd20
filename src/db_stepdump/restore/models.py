"""Restore state models.

Usage:
    from db_stepdump.restore.models import RecoveryCursor

    cursor = RecoveryCursor()                    # start fresh
    token = cursor.model_dump_json()
"""

from pydantic import BaseModel, Field


class RecoveryCursor(BaseModel):
    """Resumable state of an in-progress restore.

    Indexes point into the sorted volume listing of the source directory.
    """

    current_index: int = Field(default=0, ge=0)
    next_index: int = Field(default=0, ge=0)
    total_percentage: int = Field(default=0, ge=0, le=100)


class PlaybackResult(BaseModel):
    """Outcome of replaying one volume file."""

    filename: str
    applied: bool = True
    statements_executed: int = 0
    error: str | None = None


class RecoveryProgress(BaseModel):
    """Progress snapshot returned by each restore step.

    ``applied`` and ``error`` describe the file played in this step; a step
    that played nothing reports ``filename=None`` and ``applied=True``.
    """

    current_index: int = 0
    next_index: int = 0
    total_percentage: int = 0
    total_files: int = 0
    filename: str | None = None
    applied: bool = True
    error: str | None = None

    @property
    def done(self) -> bool:
        """Whether the whole restore has reached 100%."""
        return self.total_percentage >= 100
