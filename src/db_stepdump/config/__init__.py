"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from db_stepdump.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from db_stepdump.config.loader import load_db_config
from db_stepdump.config.models import ConnectionResult, DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "DatabaseConfig", "DatabaseProfile", "ConnectionResult"]
