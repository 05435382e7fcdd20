"""db-stepdump: Resumable, step-driven MySQL backup and restore.

Backs up table schemas and rows into ordered, size-bounded SQL volumes
(``<table>#<index>.sql``) one bounded step at a time, and replays those
volumes one file per step.  The caller keeps the cursor between steps.

Usage:
    from db_stepdump import BackupEngine, BackupOptions, RecoveryEngine, get_adapter

    adapter = await get_adapter(profile_name="local")
    engine = BackupEngine(adapter, BackupOptions(backup_dir="backups/shop"))
    cursor, progress = await engine.backup()
"""

__version__ = "0.1.0"

# Adapters
from db_stepdump.adapters.base import DumpClient
from db_stepdump.adapters.mysql import AsyncMySQLAdapter

# Backup
from db_stepdump.backup.engine import BackupConfigError, BackupEngine
from db_stepdump.backup.models import BackupCursor, BackupOptions, BackupProgress
from db_stepdump.backup.volumes import MalformedVolumeNameError, VolumeName

# Restore
from db_stepdump.restore.engine import RecoveryEngine
from db_stepdump.restore.models import RecoveryCursor, RecoveryProgress

# Config
from db_stepdump.config.loader import load_db_config
from db_stepdump.config.models import DatabaseConfig, DatabaseProfile

# Factory
from db_stepdump.factory import (
    ConnectionIdentity,
    EngineRegistry,
    ProfileNotFoundError,
    connect_profile,
    get_adapter,
    resolve_url,
)

__all__ = [
    # Adapters
    "DumpClient",
    "AsyncMySQLAdapter",
    # Backup
    "BackupEngine",
    "BackupConfigError",
    "BackupOptions",
    "BackupCursor",
    "BackupProgress",
    "VolumeName",
    "MalformedVolumeNameError",
    # Restore
    "RecoveryEngine",
    "RecoveryCursor",
    "RecoveryProgress",
    # Config
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    # Factory
    "get_adapter",
    "connect_profile",
    "resolve_url",
    "ProfileNotFoundError",
    "ConnectionIdentity",
    "EngineRegistry",
]
