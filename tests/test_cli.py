"""Tests for the planstore CLI."""

from __future__ import annotations

import argparse
import io
import json
import sys
from pathlib import Path
from typing import Any

import pytest

import planstore.cli as cli
from planstore import PlanStore
from planstore.cli.app import exit_code_for
from planstore.cli.commands.migrate import format_migration_summary
from planstore.contracts import (
    ConfigError,
    MigrationResult,
    PermissionDeniedError,
    PlanStoreConfig,
    PlanStoreError,
    QuotaExceededError,
    RecordNotFoundError,
    RemoteTransportError,
    StorageWriteError,
)
from planstore.storage import MemoryKeyValueStore
from tests.fakes.remote import BASE_URL, FakeProjectService


class _StoreFactory:
    """Stands in for ``PlanStore`` so commands talk to the fake service and an in-memory store."""

    def __init__(self, service: FakeProjectService, kv: MemoryKeyValueStore) -> None:
        self._service = service
        self._kv = kv

    def from_config(self, config: PlanStoreConfig, **kwargs: Any) -> PlanStore:
        config = config.model_copy(update={"api_url": BASE_URL, "max_retries": 0})
        return PlanStore.from_config(config, kv=self._kv, transport=self._service.transport(), **kwargs)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLANSTORE_API_URL", raising=False)
    monkeypatch.delenv("PLANSTORE_ENV", raising=False)


@pytest.fixture
def fake_store(monkeypatch: pytest.MonkeyPatch, service: FakeProjectService, kv: MemoryKeyValueStore) -> None:
    monkeypatch.setattr(cli, "PlanStore", _StoreFactory(service, kv))


@pytest.fixture
def document_file(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    path = tmp_path / "tower.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


class TestParser:
    def test_save_collects_metadata_options(self) -> None:
        args = cli.build_parser().parse_args(
            ["projects", "save", "doc.json", "--name", "Tower", "--tag", "a", "--tag", "b", "--public", "-v"]
        )

        assert args.command == "projects"
        assert args.projects_command == "save"
        assert args.file == "doc.json"
        assert args.tags == ["a", "b"]
        assert args.public is True
        assert args.verbose is True
        assert args.project_id is None
        assert args.config is None

    def test_restore_confirmation_flag(self) -> None:
        args = cli.build_parser().parse_args(["backups", "restore", "backup_1", "doc.json", "--yes"])

        assert (args.backup_id, args.file, args.yes) == ("backup_1", "doc.json", True)

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args([])
        assert exc_info.value.code == 2


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigError("x"), 3),
        (RecordNotFoundError("x"), 3),
        (PermissionDeniedError("x"), 4),
        (RemoteTransportError("x"), 4),
        (QuotaExceededError("x", key="k", required=2, available=1), 5),
        (StorageWriteError("x", key="k"), 5),
        (PlanStoreError("x"), 1),
    ],
)
def test_exit_code_for(error: PlanStoreError, code: int) -> None:
    assert exit_code_for(error) == code


def test_format_migration_summary() -> None:
    clean = format_migration_summary(MigrationResult())
    failed = format_migration_summary(MigrationResult(migrated_count=1, errors=['Project "A": offline']))

    assert "nothing to migrate" in clean
    assert "Migrated:    1 project\n" in failed
    assert '- Project "A": offline' in failed


def test_main_reports_config_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["whoami", "--config", str(tmp_path / "absent.json")])

    assert code == 3
    assert "failed reading config file" in capsys.readouterr().err


def test_main_returns_5_when_migration_has_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run_migrate(args: argparse.Namespace) -> MigrationResult:
        return MigrationResult(migrated_count=1, errors=["boom"])

    monkeypatch.setattr(cli, "_run_migrate", fake_run_migrate)

    assert cli.main(["migrate"]) == 5


@pytest.mark.usefixtures("fake_store")
class TestCommands:
    def test_whoami_when_anonymous(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["whoami"]) == 0
        assert "Not signed in" in capsys.readouterr().out

    def test_save_list_show_delete(self, document_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["projects", "save", str(document_file), "--name", "Tower", "--tag", "civil"]) == 0
        saved_line = capsys.readouterr().out.strip()
        assert saved_line.endswith("on this device")
        project_id = saved_line.split()[2]

        assert cli.main(["projects", "list"]) == 0
        listing = capsys.readouterr().out
        assert "Tower" in listing
        assert "local only" in listing

        assert cli.main(["projects", "show", project_id]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["name"] == "Tower"
        assert shown["tags"] == ["civil"]

        assert cli.main(["projects", "delete", project_id]) == 0
        capsys.readouterr()
        assert cli.main(["projects", "show", project_id]) == 3
        assert "project not found" in capsys.readouterr().err

    def test_save_rejects_unreadable_document(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text("[]", encoding="utf-8")

        assert cli.main(["projects", "save", str(broken)]) == 3
        assert "JSON object" in capsys.readouterr().err

    def test_migrate_requires_sign_in(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["migrate"]) == 4
        assert "sign in" in capsys.readouterr().err

    def test_login_migrates_then_logout(
        self, document_file: Path, service: FakeProjectService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.main(["projects", "save", str(document_file), "--name", "Tower"]) == 0
        capsys.readouterr()

        assert cli.main(["login", "alice", "-v"]) == 0
        out = capsys.readouterr().out
        assert "Signed in as alice" in out
        assert "Migrated:    1 project" in out
        assert [project["name"] for project in service.projects.values()] == ["Tower"]

        assert cli.main(["whoami"]) == 0
        assert "Signed in as alice" in capsys.readouterr().out

        assert cli.main(["migrate", "-v"]) == 0
        assert "nothing to migrate" in capsys.readouterr().out

        assert cli.main(["logout"]) == 0
        assert cli.main(["whoami"]) == 0
        assert "Not signed in" in capsys.readouterr().out

    def test_backup_create_list_restore_delete(
        self, document_file: Path, sample_document: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.main(["backups", "create", str(document_file), "--project-id", "p-1", "--name", "Tower"]) == 0
        backup_id = capsys.readouterr().out.strip().split()[-1]
        assert backup_id.startswith("backup_")

        assert cli.main(["backups", "list", "--project", "p-1"]) == 0
        listing = capsys.readouterr().out
        assert backup_id in listing
        assert "manual" in listing

        document_file.write_text(json.dumps({"tasks": []}), encoding="utf-8")
        assert cli.main(["backups", "restore", backup_id, str(document_file), "--yes"]) == 0
        assert "restored 'Tower'" in capsys.readouterr().out
        assert json.loads(document_file.read_text(encoding="utf-8")) == sample_document

        assert cli.main(["backups", "delete", backup_id]) == 0
        assert cli.main(["backups", "delete", backup_id]) == 3

    def test_restore_declined_changes_nothing(
        self, document_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.main(["backups", "create", str(document_file)]) == 0
        backup_id = capsys.readouterr().out.strip().split()[-1]
        document_file.write_text(json.dumps({"tasks": [{"id": "new"}]}), encoding="utf-8")
        monkeypatch.setattr(cli, "_confirm_restore", lambda backup_id, target: False)

        assert cli.main(["backups", "restore", backup_id, str(document_file)]) == 3
        assert json.loads(document_file.read_text(encoding="utf-8")) == {"tasks": [{"id": "new"}]}

    def test_empty_backup_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["backups", "list"]) == 0
        assert "No backups found" in capsys.readouterr().out


def test_confirm_restore_refuses_without_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO())

    with pytest.raises(ConfigError, match="--yes"):
        cli._confirm_restore("backup_1", Path("doc.json"))
