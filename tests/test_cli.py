"""Tests for the db-stepdump CLI."""

import argparse
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from db_stepdump.cli import _backup_options, build_parser, main
from db_stepdump.restore.models import RecoveryCursor


def _backup_args(*argv: str) -> argparse.Namespace:
    return build_parser().parse_args(["backup", *argv])


# ============================================================================
# Parser
# ============================================================================


class TestParser:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_global_options(self) -> None:
        args = build_parser().parse_args(
            ["--env-prefix", "APP_", "--config", "x.toml", "--log-level", "debug", "status"]
        )
        assert args.env_prefix == "APP_"
        assert args.config == "x.toml"
        assert args.log_level == "debug"

    def test_backup_options(self) -> None:
        args = _backup_args(
            "--dir", "out", "--tables", "a,b", "--volume-size", "0.5", "--batch-size", "50",
            "--structure-table", "logs", "--structure-table", "audit", "--state-file", "s.json",
        )
        assert args.dir == "out"
        assert args.volume_size == 0.5
        assert args.batch_size == 50
        assert args.structure_tables == ["logs", "audit"]
        assert args.state_file == "s.json"

    def test_restore_options(self) -> None:
        args = build_parser().parse_args(["restore", "out", "-y", "--stop-on-error"])
        assert args.source_dir == "out"
        assert args.yes is True
        assert args.stop_on_error is True


class TestBackupOptions:
    def test_defaults_without_config(self, tmp_path: Path) -> None:
        args = _backup_args("--dir", "out")
        args.config = str(tmp_path / "missing.toml")
        options = _backup_options(args)
        assert options.backup_dir == "out"
        assert options.batch_size == 200
        assert options.tables is None

    def test_cli_overrides_config(self, tmp_path: Path) -> None:
        config = tmp_path / "db.toml"
        config.write_text(
            "[profiles]\n\n[backup]\nbackup_dir = \"from-config\"\nbatch_size = 500\n"
            "structure_tables = [\"logs\"]\n"
        )
        args = _backup_args("--tables", " a , b ,", "--structure-table", "audit")
        args.config = str(config)

        options = _backup_options(args)

        assert options.backup_dir == "from-config"
        assert options.batch_size == 500
        assert options.tables == ["a", "b"]
        assert options.structure_tables == ["logs", "audit"]


# ============================================================================
# Commands
# ============================================================================


class TestFilesCommand:
    def test_lists_volumes(self, tmp_path: Path, capsys) -> None:
        for name in ("b#0.sql", "a#1.sql", "a#0.sql"):
            (tmp_path / name).write_text("X;\n")
        assert main(["files", str(tmp_path)]) == 0
        out = capsys.readouterr().out
        assert out.index("a#0.sql") < out.index("a#1.sql") < out.index("b#0.sql")

    def test_malformed_directory(self, tmp_path: Path) -> None:
        (tmp_path / "README").write_text("")
        assert main(["files", str(tmp_path)]) == 1

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert main(["files", str(tmp_path / "nope")]) == 1

    def test_zero_padded_volume(self, tmp_path: Path) -> None:
        (tmp_path / "a#0.sql").write_text("A0;\n")
        (tmp_path / "a#01.sql").write_text("A1;\n")
        assert main(["files", str(tmp_path)]) == 1


class TestBackupCommand:
    def test_runs_to_completion(self, tmp_path: Path, make_client) -> None:
        client = make_client({"t1": [(1, "a"), (2, "b")], "t2": []})
        out_dir = tmp_path / "out"
        state_file = tmp_path / "state.json"

        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main([
                "--config", str(tmp_path / "missing.toml"),
                "backup", "--dir", str(out_dir), "--tables", "t1,t2",
                "--state-file", str(state_file),
            ])

        assert code == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["t1#0.sql", "t2#0.sql"]
        assert "INSERT INTO `t1` VALUES (1,'a'),(2,'b');" in (out_dir / "t1#0.sql").read_text()
        assert not state_file.exists()
        assert client.closed

    def test_resumes_from_state_file(self, tmp_path: Path, make_client) -> None:
        client = make_client({"t1": [(1,)], "t2": [(2,)]})
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        (out_dir / "t1#0.sql").write_text("-- done\n")
        state_file = tmp_path / "state.json"
        state_file.write_text(json.dumps({
            "table_index": 0, "rows_emitted": 1, "rows_total": 1, "table_percentage": 100,
            "schema_written": True, "filename": "t1#0.sql", "backup_dir": str(out_dir),
        }))

        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main([
                "--config", str(tmp_path / "missing.toml"),
                "backup", "--tables", "t1,t2", "--state-file", str(state_file),
            ])

        assert code == 0
        assert (out_dir / "t1#0.sql").read_text() == "-- done\n"
        assert "INSERT INTO `t2` VALUES (2);" in (out_dir / "t2#0.sql").read_text()
        assert client.count("fetch_rows") == 1

    def test_missing_backup_dir_fails(self, tmp_path: Path, make_client) -> None:
        client = make_client({"t1": []})
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main(["--config", str(tmp_path / "missing.toml"), "backup"])
        assert code == 1
        assert client.closed


class TestRestoreCommand:
    @pytest.fixture
    def source(self, tmp_path: Path) -> Path:
        source = tmp_path / "backup"
        source.mkdir()
        (source / "a#0.sql").write_text("A;\n")
        (source / "b#0.sql").write_text("B;\n")
        return source

    def test_replays_all_files(self, source: Path, make_client) -> None:
        client = make_client()
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main(["restore", str(source), "--yes"])
        assert code == 0
        assert client.executed == ["A", "B"]
        assert client.closed

    def test_failed_file_sets_exit_code(self, source: Path, make_client) -> None:
        (source / "a#0.sql").write_text("BROKEN;\n")
        client = make_client(fail_on=("BROKEN",))
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main(["restore", str(source), "--yes"])
        assert code == 1
        assert client.executed == ["B"]

    def test_state_file_points_at_first_failure(self, source: Path, tmp_path: Path, make_client) -> None:
        """Without --stop-on-error a rerun still retries the failed file."""
        (source / "a#0.sql").write_text("BROKEN;\n")
        state_file = tmp_path / "restore.json"
        client = make_client(fail_on=("BROKEN",))
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main(["restore", str(source), "--yes", "--state-file", str(state_file)])

        assert code == 1
        assert client.executed == ["B"]
        cursor = RecoveryCursor.model_validate_json(state_file.read_text())
        assert cursor.next_index == 0

        retry = make_client()
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=retry)):
            (source / "a#0.sql").write_text("A;\n")
            code = main(["restore", str(source), "--yes", "--state-file", str(state_file)])

        assert code == 0
        assert retry.executed == ["A", "B"]
        assert not state_file.exists()

    def test_stop_on_error_keeps_failed_file(self, source: Path, tmp_path: Path, make_client) -> None:
        (source / "a#0.sql").write_text("BROKEN;\n")
        state_file = tmp_path / "restore.json"
        client = make_client(fail_on=("BROKEN",))
        with patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)):
            code = main([
                "restore", str(source), "--yes", "--stop-on-error",
                "--state-file", str(state_file),
            ])

        assert code == 1
        assert client.executed == []
        cursor = RecoveryCursor.model_validate_json(state_file.read_text())
        assert cursor.next_index == 0

    def test_prompt_cancel(self, source: Path, make_client) -> None:
        client = make_client()
        with patch("builtins.input", return_value="n"), \
             patch("db_stepdump.cli.get_adapter", AsyncMock(return_value=client)) as mock_get:
            code = main(["restore", str(source)])
        assert code == 0
        mock_get.assert_not_called()


class TestStatusCommand:
    def test_no_profile(self, tmp_path: Path, capsys) -> None:
        with patch("db_stepdump.factory._PROFILE_LOCK_FILE", tmp_path / ".db-profile"):
            assert main(["status"]) == 0
        assert "No connected profile" in capsys.readouterr().out

    def test_profiles_missing_config(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "db.toml"), "profiles"]) == 1
