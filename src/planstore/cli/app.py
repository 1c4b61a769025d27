"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from planstore.contracts import ErrorKind, PlanStoreError

_EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.CONFIG: 3,
    ErrorKind.VALIDATION: 3,
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.AUTHENTICATION: 4,
    ErrorKind.PERMISSION: 4,
    ErrorKind.TRANSPORT: 4,
    ErrorKind.QUOTA: 5,
    ErrorKind.CORRUPTION: 5,
    ErrorKind.STORAGE: 5,
    ErrorKind.MIGRATION: 5,
}


def exit_code_for(exc: PlanStoreError) -> int:
    return _EXIT_CODES.get(exc.kind, 1)


def main(argv: list[str] | None = None) -> int:
    import planstore.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "projects":
            cli.asyncio.run(cli._run_projects(args))
        elif args.command == "backups":
            cli.asyncio.run(cli._run_backups(args))
        elif args.command == "migrate":
            result = cli.asyncio.run(cli._run_migrate(args))
            if result.errors:
                return 5
        elif args.command == "login":
            cli.asyncio.run(cli._run_login(args))
        elif args.command == "logout":
            cli.asyncio.run(cli._run_logout(args))
        elif args.command == "whoami":
            cli.asyncio.run(cli._run_whoami(args))
        return 0
    except PlanStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exit_code_for(exc)
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["exit_code_for", "main"]
