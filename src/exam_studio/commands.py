"""Subcommand entry points behind ``exam-studio``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from .core import workspace as workspace_mod
from .core.config import (
    ConfigError,
    load_config,
    resolve_config_path,
    write_template,
)
from .core.logging import configure_logger
from .core.workspace import WorkspaceError
from .exams.bank import QuestionBank, load_bank


def _workspace_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Override the workspace root (defaults to EXAM_STUDIO_HOME or "
            "~/.exam-studio)."
        ),
    )


def _err(message: str) -> None:
    sys.stderr.write(message + "\n")


# ------------- app -------------


def _build_app_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-studio app",
        description="Launch the interactive exam generator.",
    )
    _workspace_argument(parser)
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to exam_studio.toml (defaults to the workspace config).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def app_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_app_parser().parse_args(
        list(argv) if argv is not None else None
    )
    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
        config = load_config(layout=layout, explicit_path=args.config)
    except WorkspaceError as exc:
        _err(f"Error: {exc}")
        return 1
    except ConfigError as exc:
        _err(f"Error: {exc}")
        return 2

    logger, log_path = configure_logger(
        log_dir=layout.path_for("logs"),
        level=config.logging.level,
        verbose=args.verbose or config.logging.verbose,
    )
    logger.info(
        "exam-studio starting",
        extra={"workspace": str(layout.home), "model": config.ai.model},
    )

    from .ui.app import build_app

    build_app(config, layout, logger=logger).run()
    logger.info("exam-studio stopped", extra={"log_path": str(log_path)})
    return 0


# ------------- bank -------------


def build_bank_tree(bank: QuestionBank, *, show_questions: bool) -> Tree:
    tree = Tree(Text("Ngân hàng câu hỏi", style="bold"))
    for grade in bank:
        grade_node = tree.add(Text(f"{grade.name} [{grade.id}]"))
        for chapter in grade.chapters:
            chapter_node = grade_node.add(Text(f"{chapter.name} [{chapter.id}]"))
            for topic in chapter.topics:
                label = Text(f"{topic.name} [{topic.id}]")
                label.append(f" ({len(topic.questions)} câu)", style="dim")
                topic_node = chapter_node.add(label)
                if show_questions:
                    for question in topic.questions:
                        topic_node.add(Text(f"{question.id}: {question.text}"))
    return tree


def bank_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    parser = argparse.ArgumentParser(
        prog="exam-studio bank",
        description="Print the bundled question bank.",
    )
    parser.add_argument(
        "--questions",
        action="store_true",
        help="Include the sample question text under each topic.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)
    out = console or Console()
    out.print(build_bank_tree(load_bank(), show_questions=args.questions))
    return 0


# ------------- init -------------


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def init_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="exam-studio init",
        description=(
            "Bootstrap the exam-studio workspace and ensure required "
            "subdirectories exist."
        ),
    )
    _workspace_argument(parser)
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except WorkspaceError as exc:
        _err(f"Error: {exc}")
        return 1

    if args.quiet:
        return 0

    created = layout.created
    lines = [
        f"Workspace ready at {layout.home} "
        f"({_format_created(created, 'home')})"
    ]
    if layout.directories:
        lines.append("Subdirectories:")
        width = max(len(name) for name in layout.directories)
        for name, directory in layout.items():
            status = _format_created(created, name)
            lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


# ------------- config -------------


def config_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="exam-studio config",
        description="Manage the exam-studio configuration file.",
    )
    sub = parser.add_subparsers(dest="action", required=True)
    init_parser = sub.add_parser("init", help="Write the default template.")
    _workspace_argument(init_parser)
    init_parser.add_argument(
        "--path", type=Path, help="Write the template to this path instead."
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing file."
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
        target, _ = resolve_config_path(layout=layout, explicit_path=args.path)
        written = write_template(target, overwrite=args.force)
    except WorkspaceError as exc:
        _err(f"Error: {exc}")
        return 1
    except ConfigError as exc:
        _err(f"Error: {exc}")
        return 2
    sys.stdout.write(f"Wrote config template to {written}\n")
    return 0
