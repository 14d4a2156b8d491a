"""Render exam HTML to a paginated PDF with WeasyPrint.

- Configure paper size and margins via CSS ``@page``.
- Math is typeset into a scratch render surface before HTML is rendered;
  the surface is removed whether or not the PDF is written.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

from ..core.config import PAPER_SIZES
from ..exams.errors import ExportFailure
from ..exams.models import Exam
from .documents import render_exam_html
from .mathtext import MathTypesetter

__all__ = [
    "PAPER_SIZES",
    "PageSetup",
    "RenderSurface",
    "build_page_css",
    "parse_margin_shorthand",
    "write_exam_pdf",
]

_CSS_UNIT_RE = re.compile(r"^(?:\d+\.?\d*|\d*\.\d+)(?:in|cm|mm|pt)$")


@dataclass(frozen=True)
class Margin:
    top: str
    right: str
    bottom: str
    left: str


@dataclass(frozen=True)
class PageSetup:
    paper_size: str = "a4"
    margin: str = "15mm"

    def css(self) -> str:
        return build_page_css(paper_size=self.paper_size, margin=self.margin)


def _validate_unit(value: str) -> str:
    v = value.strip()
    if not _CSS_UNIT_RE.match(v):
        raise ValueError(
            f"Invalid CSS size '{value}'. Use units in, mm, cm, pt "
            "(e.g., '1in', '10mm')."
        )
    return v


def parse_margin_shorthand(margin: str) -> Margin:
    vals = [_validate_unit(p) for p in margin.split() if p]
    if len(vals) == 1:
        return Margin(vals[0], vals[0], vals[0], vals[0])
    if len(vals) == 2:
        return Margin(vals[0], vals[1], vals[0], vals[1])
    if len(vals) == 3:
        return Margin(vals[0], vals[1], vals[2], vals[1])
    if len(vals) == 4:
        return Margin(*vals)
    raise ValueError(
        "Margin accepts 1-4 CSS size values (e.g., '15mm' or '1in 0.5in')."
    )


def build_page_css(*, paper_size: str = "a4", margin: str = "15mm") -> str:
    size_keyword = PAPER_SIZES.get(paper_size.lower())
    if not size_keyword:
        raise ValueError(
            f"Unsupported paper size: {paper_size}. Choose from "
            f"{sorted(PAPER_SIZES)}"
        )
    m = parse_margin_shorthand(margin)
    return (
        "@page {\n"
        f"  size: {size_keyword} portrait;\n"
        f"  margin: {m.top} {m.right} {m.bottom} {m.left};\n"
        "}\n"
    )


class RenderSurface:
    """Scratch directory owned by a single export call."""

    def __init__(self, root: Optional[Path] = None) -> None:
        if root is not None:
            root.mkdir(parents=True, exist_ok=True)
        self.path = Path(
            tempfile.mkdtemp(
                prefix="exam-studio-render-",
                dir=str(root) if root is not None else None,
            )
        )

    @property
    def closed(self) -> bool:
        return not self.path.exists()

    def close(self) -> None:
        shutil.rmtree(self.path, ignore_errors=True)

    def __enter__(self) -> "RenderSurface":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _load_weasyprint() -> Tuple[Any, Any]:
    try:
        from weasyprint import CSS, HTML
    except (ImportError, OSError) as exc:
        raise RuntimeError(
            "WeasyPrint is required. Install system libraries (Cairo, Pango) "
            "and the 'weasyprint' package."
        ) from exc
    return HTML, CSS


def write_exam_pdf(
    exam: Exam,
    target: Path,
    *,
    solutions: bool,
    page: Optional[PageSetup] = None,
    scratch_root: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Write the exam (or its solutions) to ``target`` as a PDF.

    Any failure is raised as :class:`ExportFailure`; the render surface is
    gone by the time this returns or raises.
    """
    log = logger or logging.getLogger("exam_studio.export")
    page = page or PageSetup()
    try:
        with RenderSurface(scratch_root) as surface:
            typesetter = MathTypesetter(surface.path, logger=log)
            html_doc = render_exam_html(
                exam, solutions=solutions, typesetter=typesetter
            )
            html_cls, css_cls = _load_weasyprint()
            target.parent.mkdir(parents=True, exist_ok=True)
            html_cls(string=html_doc, base_url=surface.path.as_uri()).write_pdf(
                target=str(target), stylesheets=[css_cls(string=page.css())]
            )
            log.info(
                "Wrote PDF",
                extra={
                    "path": str(target),
                    "solutions": solutions,
                    "math_rendered": typesetter.rendered,
                    "math_fallback": typesetter.failed,
                },
            )
    except Exception as exc:
        log.exception(
            "PDF export failed",
            extra={"path": str(target), "solutions": solutions},
        )
        raise ExportFailure() from exc
    return target
