"""TOML configuration for exam-studio.

The config file is optional. When present it is merged over the built-in
defaults; unknown keys are rejected so typos surface early instead of being
silently ignored.
"""

from __future__ import annotations

import copy
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

import tomllib

from .workspace import WorkspaceLayout

__all__ = [
    "CONFIG_PATH_ENV",
    "CONFIG_FILENAME",
    "ConfigError",
    "AIConfig",
    "ExportConfig",
    "LoggingConfig",
    "AppConfig",
    "PAPER_SIZES",
    "load_config",
    "resolve_config_path",
    "default_config",
    "config_template",
    "write_template",
]


CONFIG_PATH_ENV = "EXAM_STUDIO_CONFIG"
CONFIG_FILENAME = "exam_studio.toml"

PAPER_SIZES = {"letter": "Letter", "a4": "A4", "legal": "Legal", "a5": "A5"}

_CSS_LENGTH_RE = re.compile(r"^(?:\d+\.?\d*|\d*\.\d+)(?:in|cm|mm|pt)$")


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class AIConfig:
    model: str
    temperature: float
    max_output_tokens: int
    request_timeout_seconds: int
    api_base: Optional[str]


@dataclass(frozen=True)
class ExportConfig:
    paper_size: str
    margin: str
    output_dir: Optional[Path]


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class AppConfig:
    ai: AIConfig
    export: ExportConfig
    logging: LoggingConfig

    def exports_dir(self, layout: WorkspaceLayout) -> Path:
        """Return the configured export directory or the workspace default."""

        if self.export.output_dir is not None:
            return self.export.output_dir
        return layout.path_for("exports")


_DEFAULTS: Dict[str, Any] = {
    "ai": {
        "model": "gpt-4o-mini",
        "temperature": 0.8,
        "max_output_tokens": 8192,
        "request_timeout_seconds": 120,
        "api_base": None,
    },
    "export": {
        "paper_size": "a4",
        "margin": "15mm",
        "output_dir": None,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base_value, value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _coerce_optional_string(value: Any, *, field: str) -> Optional[str]:
    if value is None:
        return None
    return _require_string(value, field=field)


def _build_ai(section: Mapping[str, Any]) -> AIConfig:
    temperature = section.get("temperature")
    if isinstance(temperature, bool) or not isinstance(
        temperature, (int, float)
    ):
        raise ConfigError("'ai.temperature' must be a number.")
    # Zero would make every regeneration identical.
    if not 0.0 < float(temperature) <= 2.0:
        raise ConfigError("'ai.temperature' must be in (0.0, 2.0].")
    return AIConfig(
        model=_require_string(section.get("model"), field="ai.model"),
        temperature=float(temperature),
        max_output_tokens=_require_positive_int(
            section.get("max_output_tokens"), field="ai.max_output_tokens"
        ),
        request_timeout_seconds=_require_positive_int(
            section.get("request_timeout_seconds"),
            field="ai.request_timeout_seconds",
        ),
        api_base=_coerce_optional_string(
            section.get("api_base"), field="ai.api_base"
        ),
    )


def _build_export(section: Mapping[str, Any]) -> ExportConfig:
    paper_size = _require_string(
        section.get("paper_size"), field="export.paper_size"
    ).lower()
    if paper_size not in PAPER_SIZES:
        raise ConfigError(
            "'export.paper_size' must be one of "
            + ", ".join(sorted(PAPER_SIZES))
            + "."
        )
    margin = _require_string(section.get("margin"), field="export.margin")
    if not all(_CSS_LENGTH_RE.match(part) for part in margin.split()):
        raise ConfigError(
            "'export.margin' must use CSS lengths in in, cm, mm or pt "
            "(e.g. '15mm' or '1cm 2cm')."
        )
    if len(margin.split()) > 4:
        raise ConfigError("'export.margin' accepts 1-4 CSS lengths.")
    output_dir = _coerce_optional_string(
        section.get("output_dir"), field="export.output_dir"
    )
    return ExportConfig(
        paper_size=paper_size,
        margin=margin,
        output_dir=(
            Path(output_dir).expanduser().resolve() if output_dir else None
        ),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(tree: Mapping[str, Any]) -> AppConfig:
    return AppConfig(
        ai=_build_ai(tree["ai"]),
        export=_build_export(tree["export"]),
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    layout: WorkspaceLayout,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Path, bool]:
    """Return the config path and whether the caller asked for it explicitly."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve(), True
    env_override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if env_override:
        return Path(env_override).expanduser().resolve(), True
    return layout.path_for("config") / CONFIG_FILENAME, False


def load_config(
    *,
    layout: WorkspaceLayout,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load the TOML config, applying defaults and validation.

    A missing file at the default location yields the built-in defaults; a
    missing file that was requested explicitly is an error.
    """

    path, explicit = resolve_config_path(
        layout=layout, explicit_path=explicit_path, env=env
    )
    tree = copy.deepcopy(_DEFAULTS)
    if explicit or path.exists():
        data = _load_toml(path)
        _merge_dict(tree, data)
    return _build_config(tree)


def default_config() -> AppConfig:
    return _build_config(copy.deepcopy(_DEFAULTS))


def config_template() -> str:
    """Return the TOML template recommended for new installs."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as fh:
        fh.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_CONFIG_TEMPLATE = """
# exam-studio configuration

[ai]
# Chat completion model used to write exams
model = "gpt-4o-mini"
# Sampling temperature (0.0-2.0, must be above zero)
temperature = 0.8
max_output_tokens = 8192
request_timeout_seconds = 120
# Optional API base override
# api_base = "https://api.openai.com/v1"

[export]
# a4, letter, legal or a5
paper_size = "a4"
# CSS margin shorthand
margin = "15mm"
# Defaults to <workspace>/exports
# output_dir = "~/Documents/exams"

[logging]
level = "INFO"
verbose = false
"""
