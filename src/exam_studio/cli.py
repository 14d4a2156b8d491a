"""Unified CLI entry point for exam-studio."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import metadata
from typing import Callable, Mapping, Optional, Sequence

from . import commands

CommandHandler = Callable[[Sequence[str]], int]


@dataclass(frozen=True)
class CommandSpec:
    """Represents an exam-studio subcommand."""

    name: str
    summary: str
    handler: CommandHandler
    is_tui: bool = False


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec(
        name="app",
        summary="Launch the exam generator.",
        handler=lambda argv: commands.app_main(argv),
        is_tui=True,
    ),
    CommandSpec(
        name="bank",
        summary="Print the bundled question bank as a tree.",
        handler=lambda argv: commands.bank_main(argv),
    ),
    CommandSpec(
        name="init",
        summary="Bootstrap the exam-studio workspace.",
        handler=lambda argv: commands.init_main(argv),
    ),
    CommandSpec(
        name="config",
        summary="Write the default exam_studio.toml template.",
        handler=lambda argv: commands.config_main(argv),
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}


def format_command_table() -> str:
    """Return a formatted command table for help output."""

    width = max(len(spec.name) for spec in _COMMAND_SPECS)
    lines = ["Available commands:"]
    for spec in _COMMAND_SPECS:
        suffix = " (TUI)" if spec.is_tui else ""
        lines.append(f"  {spec.name.ljust(width)}  {spec.summary}{suffix}")
    return "\n".join(lines)


def format_usage() -> str:
    parts = [
        "Usage: exam-studio <command> [args...]",
        "Run `exam-studio list` for commands or `exam-studio help <name>` "
        "for details.",
        "",
        format_command_table(),
    ]
    return "\n".join(parts)


def _print(
    text: str, *, stream: Optional[Callable[[str], object]] = None
) -> None:
    target = stream if stream is not None else sys.stdout.write
    if text:
        target(text + "\n")


def _handle_version() -> int:
    try:
        version = metadata.version("exam-studio")
    except metadata.PackageNotFoundError:
        version = "unknown"
    _print(version)
    return 0


def _handle_help(argv: Sequence[str]) -> int:
    if not argv:
        _print(format_usage())
        return 0
    spec = COMMANDS.get(argv[0])
    if not spec:
        _print(f"Unknown command '{argv[0]}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2
    _print(f"{spec.name}: {spec.summary}")
    _print(f"Run `exam-studio {spec.name} --help` for CLI-specific options.")
    return 0


def _normalize_system_exit(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    _print(str(code), stream=sys.stderr.write)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])

    if not args:
        _print(format_usage())
        return 2

    head, *tail = args

    if head in ("-h", "--help"):
        _print(format_usage())
        return 0
    if head in ("-V", "--version", "version"):
        return _handle_version()
    if head == "list":
        _print(format_command_table())
        return 0
    if head == "help":
        return _handle_help(tail)

    spec = COMMANDS.get(head)
    if spec is None:
        _print(f"Unknown command '{head}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2
    try:
        return spec.handler(tail)
    except SystemExit as exc:
        return _normalize_system_exit(exc)


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
