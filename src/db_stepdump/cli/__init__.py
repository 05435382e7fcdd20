"""CLI for step-driven backup and restore.

The CLI is one possible driver of the step functions: it calls
``BackupEngine.backup()`` / ``RecoveryEngine.recover()`` in a loop and can
persist the cursor to a state file after every step, so an interrupted run
picks up where it stopped.

Usage:
    DB_PROFILE=local db-stepdump connect
    db-stepdump status
    db-stepdump profiles
    db-stepdump backup --dir backups/shop --state-file shop.state.json
    db-stepdump backup --dir backups/shop --tables users,orders --batch-size 500
    db-stepdump files backups/shop
    db-stepdump restore backups/shop --yes

Commands:
    connect   - Test the profile's connection and remember it
    status    - Show current connection status
    profiles  - List available profiles
    backup    - Back up tables into <table>#<n>.sql volumes
    restore   - Replay volumes from a backup directory
    files     - Show volumes in replay order
"""

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from db_stepdump.backup.engine import BackupEngine
from db_stepdump.backup.models import BackupCursor, BackupOptions
from db_stepdump.config.loader import load_db_config
from db_stepdump.factory import (
    connect_profile,
    get_adapter,
    read_profile_lock,
)
from db_stepdump.logging_config import setup_logging
from db_stepdump.restore.engine import RecoveryEngine
from db_stepdump.restore.locator import ScriptLocator
from db_stepdump.restore.models import RecoveryCursor

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _backup_options(args: argparse.Namespace) -> BackupOptions:
    """Merge the ``[backup]`` section of db.toml with command line overrides."""
    try:
        base = load_db_config(args.config).backup
    except FileNotFoundError:
        base = BackupOptions()

    overrides: dict = {}
    if args.dir:
        overrides["backup_dir"] = args.dir
    if args.tables:
        overrides["tables"] = [t.strip() for t in args.tables.split(",") if t.strip()]
    if args.volume_size is not None:
        overrides["volume_size_mb"] = args.volume_size
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.only_structure:
        overrides["only_structure"] = True
    if args.structure_tables:
        overrides["structure_tables"] = list(base.structure_tables) + args.structure_tables

    return BackupOptions(**{**base.model_dump(), **overrides})


def _progress_bar() -> Progress:
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    previous_profile = read_profile_lock()

    console.print("Connecting to database...", style="dim")

    result = await connect_profile(
        profile_name=args.profile,
        env_prefix=args.env_prefix,
        config_path=args.config,
    )

    if result.success:
        console.print(
            f"[bold green]v[/bold green] Connected to profile: "
            f"[bold cyan]{result.profile_name}[/bold cyan]"
        )
        if previous_profile and previous_profile != result.profile_name:
            console.print(
                f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
                f"[dim]to[/dim] [bold cyan]{result.profile_name}[/bold cyan]"
            )
        return 0

    console.print(f"[bold red]x[/bold red] {result.error}")
    return 1


async def _async_backup(args: argparse.Namespace) -> int:
    """Drive backup steps until the job reports 100%.

    Returns:
        0 on success, 1 on failure.
    """
    options = _backup_options(args)
    state_file = Path(args.state_file) if args.state_file else None

    cursor = BackupCursor()
    if state_file and state_file.exists():
        cursor = BackupCursor.model_validate_json(state_file.read_text())
        console.print(f"Resuming from [cyan]{state_file}[/cyan]", style="dim")

    adapter = await get_adapter(
        database_url=args.database_url,
        env_prefix=args.env_prefix,
        config_path=args.config,
    )
    try:
        engine = BackupEngine(adapter, options)
        with _progress_bar() as bar:
            task = bar.add_task("backup", total=100)
            while True:
                cursor, progress = await engine.backup(cursor)
                if state_file:
                    state_file.write_text(cursor.model_dump_json())
                bar.update(
                    task,
                    completed=progress.total_percentage,
                    description=f"{progress.table} ({progress.table_percentage}%)",
                )
                if progress.done:
                    break
    finally:
        await adapter.close()

    if state_file and state_file.exists():
        state_file.unlink()
    console.print(
        f"[bold green]v[/bold green] Backup written to [cyan]{cursor.backup_dir}[/cyan]"
    )
    return 0


async def _async_restore(args: argparse.Namespace) -> int:
    """Drive restore steps until every volume has been played.

    Returns:
        0 when every file applied cleanly, 1 otherwise.
    """
    state_file = Path(args.state_file) if args.state_file else None

    cursor = RecoveryCursor()
    if state_file and state_file.exists():
        cursor = RecoveryCursor.model_validate_json(state_file.read_text())
        console.print(f"Resuming from [cyan]{state_file}[/cyan]", style="dim")

    adapter = await get_adapter(
        database_url=args.database_url,
        env_prefix=args.env_prefix,
        config_path=args.config,
    )
    failed: list[tuple[str, str | None]] = []
    retry_from: int | None = None
    try:
        engine = RecoveryEngine(adapter, args.source_dir)
        with _progress_bar() as bar:
            task = bar.add_task("restore", total=100)
            while True:
                next_cursor, progress = await engine.recover(cursor)
                if not progress.applied:
                    failed.append((progress.filename or "", progress.error))
                    if retry_from is None:
                        retry_from = progress.current_index
                    if args.stop_on_error:
                        break
                cursor = next_cursor
                if state_file:
                    state_file.write_text(cursor.model_dump_json())
                bar.update(
                    task,
                    completed=progress.total_percentage,
                    description=progress.filename or "done",
                )
                if progress.done:
                    break
    finally:
        await adapter.close()

    if failed:
        # A rerun with the state file resumes at the first failed file
        if state_file:
            state_file.write_text(RecoveryCursor(next_index=retry_from).model_dump_json())
        console.print(f"\n[yellow]Restore completed with {len(failed)} failed file(s):[/yellow]")
        for filename, error in failed:
            console.print(f"   - {filename}: {error}")
        return 1

    if state_file and state_file.exists():
        state_file.unlink()
    console.print("[bold green]v[/bold green] Restore complete")
    return 0


# ============================================================================
# Command handlers
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Test the connection of a profile and write the lock file."""
    return asyncio.run(_async_connect(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile (connected)")

        try:
            config = load_db_config(args.config)
            if profile in config.profiles and config.profiles[profile].description:
                table.add_row("Description", config.profiles[profile].description)
            if config.backup.backup_dir:
                table.add_row("Backup dir", config.backup.backup_dir)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print(
            "[dim]Run:[/dim] [cyan]DB_PROFILE=<name> db-stepdump connect[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml."""
    try:
        config = load_db_config(args.config)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Charset")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.charset,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    """Back up the database into size-bounded volumes."""
    try:
        return asyncio.run(_async_backup(args))
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Backup failed: {e}")
        return 1


def cmd_restore(args: argparse.Namespace) -> int:
    """Replay a backup directory into the database."""
    if not args.yes:
        console.print(f"This will replay every volume in: [cyan]{args.source_dir}[/cyan]")
        console.print("[yellow]Tables in the backup are dropped and recreated.[/yellow]")
        response = input("Continue? [y/N] ")
        if response.lower() not in ["y", "yes"]:
            console.print("Cancelled.")
            return 0

    try:
        return asyncio.run(_async_restore(args))
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Restore failed: {e}")
        return 1


def cmd_files(args: argparse.Namespace) -> int:
    """Show the volumes of a backup directory in replay order."""
    locator = ScriptLocator(args.source_dir)
    try:
        volumes = locator.volumes()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title=f"Volumes in {args.source_dir}", header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("File")
    table.add_column("Table")
    table.add_column("Volume", justify="right")
    table.add_column("Bytes", justify="right")

    for position, volume in enumerate(volumes):
        size = (locator.source_dir / str(volume)).stat().st_size
        table.add_row(str(position), str(volume), volume.table, str(volume.index), str(size))

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-stepdump",
        description="Resumable MySQL backup and restore in SQL volumes",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help="Prefix for environment variable lookup (e.g., --env-prefix APP_ reads APP_DB_PROFILE)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL env var or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_connect = subparsers.add_parser("connect", help="Test a profile's connection and remember it")
    p_connect.add_argument("--profile", "-p", default=None, help="Profile name from db.toml")
    p_connect.set_defaults(func=cmd_connect)

    p_status = subparsers.add_parser("status", help="Show current connection status")
    p_status.set_defaults(func=cmd_status)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    p_backup = subparsers.add_parser("backup", help="Back up tables into SQL volumes")
    p_backup.add_argument("--dir", "-d", default=None, help="Backup directory (default: [backup].backup_dir)")
    p_backup.add_argument("--tables", default=None, help="Comma-separated tables, in backup order")
    p_backup.add_argument("--volume-size", type=float, default=None, help="Volume size in MB")
    p_backup.add_argument("--batch-size", type=int, default=None, help="Rows per INSERT / per step")
    p_backup.add_argument("--only-structure", action="store_true", help="Back up schemas only")
    p_backup.add_argument(
        "--structure-table",
        action="append",
        dest="structure_tables",
        default=[],
        help="Back up only the schema of this table (can be used multiple times)",
    )
    p_backup.add_argument("--state-file", default=None, help="Persist the cursor here to resume later")
    p_backup.add_argument("--database-url", default=None, help="Connect to this URL instead of a profile")
    p_backup.set_defaults(func=cmd_backup)

    p_restore = subparsers.add_parser("restore", help="Replay a backup directory")
    p_restore.add_argument("source_dir", help="Directory holding <table>#<n>.sql volumes")
    p_restore.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")
    p_restore.add_argument("--state-file", default=None, help="Persist the cursor here to resume later")
    p_restore.add_argument("--stop-on-error", action="store_true", help="Stop at the first failed file")
    p_restore.add_argument("--database-url", default=None, help="Connect to this URL instead of a profile")
    p_restore.set_defaults(func=cmd_restore)

    p_files = subparsers.add_parser("files", help="Show volumes in replay order")
    p_files.add_argument("source_dir", help="Backup directory")
    p_files.set_defaults(func=cmd_files)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
