"""Project commands."""

from __future__ import annotations

import argparse

from planstore.cli.common import ensure_success, format_project_line, read_document
from planstore.contracts import ListResult, ProjectMetadata, SaveResult, SessionIdentity


def format_project_list(result: ListResult, identity: SessionIdentity) -> str:
    who = identity.user_id if identity.authenticated else "anonymous (this device only)"
    lines = ["", f"planstore - projects for {who}", ""]
    if not result.projects:
        lines.append("  No projects saved yet")
    lines.extend(format_project_line(summary) for summary in result.projects)
    lines.append("")
    return "\n".join(lines)


def format_save_summary(result: SaveResult) -> str:
    where = "online" if result.source == "remote" else "on this device"
    lines = [f"Saved project {result.project_id} {where}"]
    if result.fallback:
        lines.append("  The server could not be reached; the project will sync after the next sign-in")
    return "\n".join(lines)


async def run_projects(args: argparse.Namespace) -> None:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    async with cli.PlanStore.from_config(config, auto_migrate=False) as store:
        gateway = store.gateway
        if args.projects_command == "list":
            listing = await gateway.list_for_user()
            ensure_success(listing)
            print(format_project_list(listing, store.identity.current()))
        elif args.projects_command == "show":
            loaded = await gateway.load(args.project_id)
            ensure_success(loaded)
            assert loaded.project is not None
            print(loaded.project.model_dump_json(by_alias=True, indent=2))
        elif args.projects_command == "save":
            payload = read_document(args.file)
            metadata = ProjectMetadata(
                name=args.name or "",
                description=args.description or "",
                is_public=args.public,
                tags=args.tags,
            )
            if args.project_id:
                saved = await gateway.update(args.project_id, payload, metadata)
            else:
                saved = await gateway.create(payload, metadata)
            ensure_success(saved)
            print(format_save_summary(saved))
        elif args.projects_command == "delete":
            deleted = await gateway.delete(args.project_id)
            ensure_success(deleted)
            print(f"Deleted project {args.project_id}")
            if deleted.message:
                print(f"  {deleted.message}")


__all__ = ["format_project_list", "format_save_summary", "run_projects"]
