"""Pydantic models for database configuration."""

from pydantic import BaseModel, Field

from db_stepdump.backup.models import BackupOptions


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    charset: str = "utf8mb4"


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    backup: BackupOptions = Field(default_factory=BackupOptions)


class ConnectionResult(BaseModel):
    """Result of connect_profile()."""

    success: bool
    profile_name: str | None = None
    error: str | None = None
