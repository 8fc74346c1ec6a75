"""
Configuration for flat_path generation.

Settings are read from FLAT_PATH_* environment variables (and an optional .env
file) the first time generation needs them.
"""

from __future__ import annotations

import os
import pathlib

import lazy_object_proxy
import pydantic
import pydantic_settings


class FlatPathSettings(pydantic_settings.BaseSettings):
    """Generation settings shared by every flat_path rewrite."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='FLAT_PATH_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='ignore',  # .env files are shared with the host application
    )

    # Generated namespaces are implementation detail, never public names
    NAMESPACE_PREFIX: str = '__flat_path_'

    # Base name of generated link models (Link1, Link2, ...)
    LINK_NAME: str = 'Link'

    @pydantic.field_validator('NAMESPACE_PREFIX')
    @classmethod
    def validate_namespace_prefix(cls, v: str) -> str:
        """Keep generated namespaces private."""
        if not v.startswith('_'):
            raise ValueError('NAMESPACE_PREFIX must start with an underscore')
        return v

    @pydantic.field_validator('LINK_NAME')
    @classmethod
    def validate_link_name(cls, v: str) -> str:
        """Link models are real classes, so the name must be an identifier."""
        if not v.isidentifier():
            raise ValueError('LINK_NAME must be a valid Python identifier')
        return v


def get_settings(env_file: str | None = None) -> FlatPathSettings:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables only.

    Args:
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return FlatPathSettings(_env_file=None)  # No .env file, load from environment only

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return FlatPathSettings(_env_file=resolved_path)


def lazy_settings() -> FlatPathSettings:
    """
    Lazy settings - defers instantiation until first access.

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(get_settings)


settings: FlatPathSettings = lazy_settings()
