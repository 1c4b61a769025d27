"""Config loading and remote base-URL resolution."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from planstore.contracts.config import DEV_API_URL, PlanStoreConfig
from planstore.contracts.exceptions import ConfigError

API_URL_ENV = "PLANSTORE_API_URL"
ENVIRONMENT_ENV = "PLANSTORE_ENV"


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def apply_env_overrides(config: PlanStoreConfig, environ: Mapping[str, str] | None = None) -> PlanStoreConfig:
    env = os.environ if environ is None else environ
    updates: dict[str, Any] = {}

    api_url = (env.get(API_URL_ENV) or "").strip()
    if api_url:
        updates["api_url"] = api_url

    environment = (env.get(ENVIRONMENT_ENV) or "").strip().lower()
    if environment:
        if environment not in {"development", "production"}:
            raise ConfigError(f"{ENVIRONMENT_ENV} must be 'development' or 'production', got {environment!r}")
        updates["environment"] = environment

    return config.model_copy(update=updates) if updates else config


def resolve_api_url(config: PlanStoreConfig) -> str:
    """Explicit URL, else ``<origin>/api`` in production, else the local dev server."""
    if config.api_url:
        return config.api_url.rstrip("/")
    if config.environment == "production":
        if not config.origin:
            raise ConfigError("production environment requires 'origin' to resolve the relative /api path")
        return f"{config.origin.rstrip('/')}/api"
    return DEV_API_URL


def load_config(path: str | Path, *, environ: Mapping[str, str] | None = None) -> PlanStoreConfig:
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = PlanStoreConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    resolved = parsed.model_copy(update={"data_dir": _resolve_path(parsed.data_dir, base_dir=config_dir)})
    return apply_env_overrides(resolved, environ)
