"""Step-driven restore of SQL volumes.

Usage:
    from db_stepdump.restore import RecoveryEngine, RecoveryCursor, ScriptLocator
"""

from db_stepdump.restore.engine import RecoveryEngine
from db_stepdump.restore.locator import ScriptLocator
from db_stepdump.restore.models import PlaybackResult, RecoveryCursor, RecoveryProgress
from db_stepdump.restore.player import ScriptPlayer, split_statements

__all__ = [
    "RecoveryEngine",
    "RecoveryCursor",
    "RecoveryProgress",
    "PlaybackResult",
    "ScriptLocator",
    "ScriptPlayer",
    "split_statements",
]
