"""Backup commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from planstore.cli.common import ensure_success, format_backup_line
from planstore.contracts import BackupRecord, ConfigError


def format_backup_list(backups: list[BackupRecord]) -> str:
    lines = ["", "planstore - backups", ""]
    if not backups:
        lines.append("  No backups found")
    lines.extend(format_backup_line(backup) for backup in backups)
    lines.append("")
    return "\n".join(lines)


def confirm_restore(backup_id: str, target: Path) -> bool:
    if not sys.stdin.isatty():
        raise ConfigError("restoring overwrites the document; rerun with --yes in non-interactive mode")

    import questionary

    answer = questionary.confirm(f"Replace {target} with backup {backup_id}?", default=False).ask()
    return bool(answer)


async def run_backups(args: argparse.Namespace) -> None:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    async with cli.PlanStore.from_config(config, auto_migrate=False) as store:
        if args.backups_command == "list":
            engine = store.backups
            if args.project_id:
                backups = await engine.list_for_project(args.project_id)
            else:
                backups = await engine.list()
            print(format_backup_list(backups))
        elif args.backups_command == "create":
            document = cli.JsonFileDocument(Path(args.file), project_id=args.project_id, project_name=args.name)
            created = await store.backups_for(document).snapshot()
            ensure_success(created)
            print(f"Created backup {created.backup_id}")
        elif args.backups_command == "restore":
            target = Path(args.file)
            confirmed = args.yes or cli._confirm_restore(args.backup_id, target)
            document = cli.JsonFileDocument(target)
            restored = await store.backups_for(document).restore(args.backup_id, confirm=confirmed)
            ensure_success(restored)
            print(restored.message or f"Restored backup {args.backup_id}")
        elif args.backups_command == "delete":
            deleted = await store.backups.delete(args.backup_id)
            ensure_success(deleted)
            print(f"Deleted backup {args.backup_id}")


__all__ = ["confirm_restore", "format_backup_list", "run_backups"]
