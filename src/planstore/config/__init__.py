"""Configuration loading."""

from planstore.config.loader import API_URL_ENV, ENVIRONMENT_ENV, apply_env_overrides, load_config, resolve_api_url

__all__ = ["API_URL_ENV", "ENVIRONMENT_ENV", "apply_env_overrides", "load_config", "resolve_api_url"]
