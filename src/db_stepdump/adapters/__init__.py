"""Database adapters package.

Provides the ``DumpClient`` Protocol and the async MySQL adapter.

Usage:
    from db_stepdump.adapters import DumpClient, AsyncMySQLAdapter
"""

from db_stepdump.adapters.base import DumpClient
from db_stepdump.adapters.mysql import AsyncMySQLAdapter

__all__ = [
    "DumpClient",
    "AsyncMySQLAdapter",
]
