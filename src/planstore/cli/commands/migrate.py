"""Migration command."""

from __future__ import annotations

import argparse

from planstore.contracts import AuthenticationError, MigrationResult


def format_migration_summary(result: MigrationResult) -> str:
    lines = [
        "",
        "planstore - migration complete",
        "",
        f"  Migrated:    {result.migrated_count} project{'s' if result.migrated_count != 1 else ''}",
        f"  Synced:      {result.reconciled_count} offline change{'s' if result.reconciled_count != 1 else ''}",
    ]
    if result.errors:
        lines.append(f"  Errors:      {len(result.errors)}")
        lines.extend(f"    - {error}" for error in result.errors)
    elif result.migrated_count == 0 and result.reconciled_count == 0:
        lines.append("  Status:      nothing to migrate")
    lines.append("")
    return "\n".join(lines)


async def run_migrate(args: argparse.Namespace) -> MigrationResult:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    async with cli.PlanStore.from_config(config, auto_migrate=False) as store:
        if not store.identity.is_authenticated():
            raise AuthenticationError("sign in with 'planstore login USER' before migrating")
        if not args.verbose:
            with cli.RichMigrationProgress() as progress:
                result = await store.migration.migrate_all(progress=progress)
        else:
            result = await store.migration.migrate_all()

    print(cli._format_migration_summary(result))
    return result


__all__ = ["format_migration_summary", "run_migrate"]
