"""Sign-in commands."""

from __future__ import annotations

import argparse

from planstore.contracts import MigrationResult, SessionIdentity


def format_identity(identity: SessionIdentity) -> str:
    if identity.authenticated:
        return f"Signed in as {identity.user_id}"
    return "Not signed in (projects are saved on this device only)"


async def run_login(args: argparse.Namespace) -> MigrationResult | None:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    progress = None if args.verbose else cli.RichMigrationProgress()
    async with cli.PlanStore.from_config(config, progress=progress) as store:
        if progress is not None:
            with progress:
                identity = await store.sign_in(args.user_id)
                result = await store.wait_for_migration()
        else:
            identity = await store.sign_in(args.user_id)
            result = await store.wait_for_migration()

    print(format_identity(identity))
    if result is not None:
        print(cli._format_migration_summary(result))
    return result


async def run_logout(args: argparse.Namespace) -> None:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    async with cli.PlanStore.from_config(config, auto_migrate=False) as store:
        await store.sign_out()
    print("Signed out")


async def run_whoami(args: argparse.Namespace) -> SessionIdentity:
    import planstore.cli as cli

    config = cli.load_cli_config(args.config)
    async with cli.PlanStore.from_config(config, auto_migrate=False) as store:
        identity = store.identity.current()
    print(format_identity(identity))
    return identity


__all__ = ["format_identity", "run_login", "run_logout", "run_whoami"]
