"""Command-line interface for planstore."""

from __future__ import annotations

import asyncio
import logging as logging

from planstore import JsonFileDocument as JsonFileDocument
from planstore import PlanStore as PlanStore
from planstore.cli.app import main as main
from planstore.cli.commands import backups as backups_command
from planstore.cli.commands import migrate as migrate_command
from planstore.cli.commands import projects as projects_command
from planstore.cli.commands import session as session_command
from planstore.cli.common import load_cli_config as load_cli_config
from planstore.cli.parser import build_parser as build_parser
from planstore.cli.progress.rich import RichMigrationProgress as RichMigrationProgress

_format_migration_summary = migrate_command.format_migration_summary
_confirm_restore = backups_command.confirm_restore

_run_projects = projects_command.run_projects
_run_backups = backups_command.run_backups
_run_migrate = migrate_command.run_migrate
_run_login = session_command.run_login
_run_logout = session_command.run_logout
_run_whoami = session_command.run_whoami

__all__ = ["asyncio", "build_parser", "main"]


if __name__ == "__main__":
    raise SystemExit(main())
