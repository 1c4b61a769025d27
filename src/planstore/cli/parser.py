"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("planstore")
    except PackageNotFoundError:
        return "0.0.0"


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to planstore.json (default: built-in settings)")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return common


def _add_metadata_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", default=None, help="Project name")
    parser.add_argument("--description", default=None, help="Project description")
    parser.add_argument("--public", action="store_true", help="Make the project readable by anyone")
    parser.add_argument("--tag", dest="tags", action="append", default=[], help="Project tag (repeatable)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planstore")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    common = _common_options()

    subparsers = parser.add_subparsers(dest="command", required=True)

    projects_parser = subparsers.add_parser("projects", help="Saved projects")
    projects_sub = projects_parser.add_subparsers(dest="projects_command", required=True)
    projects_sub.add_parser("list", parents=[common], help="List your projects")
    show_parser = projects_sub.add_parser("show", parents=[common], help="Print a project as JSON")
    show_parser.add_argument("project_id")
    save_parser = projects_sub.add_parser("save", parents=[common], help="Save a document file as a project")
    save_parser.add_argument("file", help="JSON document file")
    save_parser.add_argument("--id", dest="project_id", default=None, help="Update this project instead of creating")
    _add_metadata_options(save_parser)
    delete_parser = projects_sub.add_parser("delete", parents=[common], help="Delete a project")
    delete_parser.add_argument("project_id")

    backups_parser = subparsers.add_parser("backups", help="Local document backups")
    backups_sub = backups_parser.add_subparsers(dest="backups_command", required=True)
    backups_list = backups_sub.add_parser("list", parents=[common], help="List backups, newest first")
    backups_list.add_argument("--project", dest="project_id", default=None, help="Only backups of this project")
    backups_create = backups_sub.add_parser("create", parents=[common], help="Back up a document file")
    backups_create.add_argument("file", help="JSON document file")
    backups_create.add_argument("--project-id", default=None, help="Project the document belongs to")
    backups_create.add_argument("--name", default=None, help="Project name recorded with the backup")
    backups_restore = backups_sub.add_parser("restore", parents=[common], help="Overwrite a document file")
    backups_restore.add_argument("backup_id")
    backups_restore.add_argument("file", help="JSON document file to overwrite")
    backups_restore.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    backups_delete = backups_sub.add_parser("delete", parents=[common], help="Delete a backup")
    backups_delete.add_argument("backup_id")

    subparsers.add_parser("migrate", parents=[common], help="Upload local-only projects to your account")

    login_parser = subparsers.add_parser("login", parents=[common], help="Sign in and migrate local projects")
    login_parser.add_argument("user_id")
    subparsers.add_parser("logout", parents=[common], help="Sign out")
    subparsers.add_parser("whoami", parents=[common], help="Show the current identity")

    return parser


__all__ = ["build_parser"]
