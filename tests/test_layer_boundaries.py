from __future__ import annotations

import ast
from pathlib import Path

_PACKAGE = Path(__file__).resolve().parents[1] / "src" / "planstore"


def _collect_python_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.rglob("*.py") if path.is_file())


def _find_forbidden_imports(files: list[Path], forbidden_prefixes: tuple[str, ...]) -> list[str]:
    violations: list[str] = []
    for path in files:
        module = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(module):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.startswith(forbidden_prefixes):
                        violations.append(f"{path}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None:
                    continue
                if node.module.startswith(forbidden_prefixes):
                    violations.append(f"{path}: from {node.module} import ...")
    return violations


def test_contracts_import_nothing_from_the_rest_of_the_package() -> None:
    files = _collect_python_files(_PACKAGE / "contracts")
    forbidden = tuple(
        f"planstore.{name}" for name in ("auth", "backends", "backup", "cli", "config", "gateway", "migration", "storage")
    )
    violations = _find_forbidden_imports(files, forbidden)
    assert not violations, f"contracts depend on implementation modules: {violations}"


def test_backup_engine_never_touches_the_remote_backend() -> None:
    files = _collect_python_files(_PACKAGE / "backup")
    violations = _find_forbidden_imports(files, ("planstore.backends", "httpx"))
    assert not violations, f"backup imports remote modules: {violations}"


def test_gateway_does_not_import_remote_client_internals() -> None:
    files = _collect_python_files(_PACKAGE / "gateway")
    violations = _find_forbidden_imports(files, ("planstore.backends.remote", "httpx"))
    assert not violations, f"gateway imports remote client internals: {violations}"


def test_sdk_does_not_import_cli_layer() -> None:
    violations = _find_forbidden_imports([_PACKAGE / "sdk.py"], ("planstore.cli",))
    assert not violations, f"sdk imports forbidden cli layer modules: {violations}"


def test_library_does_not_depend_on_terminal_libraries() -> None:
    files = [path for path in _collect_python_files(_PACKAGE) if "cli" not in path.relative_to(_PACKAGE).parts]
    violations = _find_forbidden_imports(files, ("rich", "questionary"))
    assert not violations, f"library modules import terminal UI libraries: {violations}"
