"""TOML loader for database profiles and backup settings."""

import tomllib
from pathlib import Path

from db_stepdump.backup.models import BackupOptions
from db_stepdump.config.models import DatabaseConfig, DatabaseProfile


def load_db_config(config_path: Path | str | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ``./db.toml`` in the current
            working directory).

    Returns:
        DatabaseConfig with all profiles and the ``[backup]`` settings.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If a profile or the backup section is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with a [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    return DatabaseConfig(
        profiles=profiles,
        backup=BackupOptions(**data.get("backup", {})),
    )
