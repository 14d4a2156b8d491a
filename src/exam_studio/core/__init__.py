"""Core shared helpers for exam-studio."""

from __future__ import annotations

from .ai import load_client
from .config import (
    AppConfig,
    ConfigError,
    default_config,
    load_config,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "load_client",
    "AppConfig",
    "ConfigError",
    "default_config",
    "load_config",
    "write_template",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
