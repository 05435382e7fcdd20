"""Step-driven backup into size-bounded SQL volumes.

Usage:
    from db_stepdump.backup import BackupEngine, BackupOptions, BackupCursor
"""

from db_stepdump.backup.emitters import RowBatchReader, SchemaEmitter, render_insert
from db_stepdump.backup.engine import BackupConfigError, BackupEngine
from db_stepdump.backup.models import BackupCursor, BackupOptions, BackupProgress
from db_stepdump.backup.volumes import MalformedVolumeNameError, VolumeName, VolumeWriter

__all__ = [
    "BackupEngine",
    "BackupConfigError",
    "BackupOptions",
    "BackupCursor",
    "BackupProgress",
    "SchemaEmitter",
    "RowBatchReader",
    "render_insert",
    "VolumeName",
    "VolumeWriter",
    "MalformedVolumeNameError",
]
