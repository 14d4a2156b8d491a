"""Split AI text into plain and math runs and typeset the math as SVG.

Plain runs are always HTML-escaped. Math runs go through matplotlib's
mathtext renderer into SVG files inside the caller's render surface; anything
mathtext cannot parse is shown as escaped LaTeX instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from markupsafe import Markup, escape
from matplotlib import mathtext
from matplotlib.font_manager import FontProperties

__all__ = [
    "MathRun",
    "MathTypesetter",
    "split_math",
    "render_rich_text",
    "math_fallback",
]

# Display delimiters first so "$$" is never read as two empty inline runs.
_MATH_RE = re.compile(
    r"\$\$(?P<dd>.+?)\$\$"
    r"|\\\[(?P<bd>.+?)\\\]"
    r"|\\\((?P<pi>.+?)\\\)"
    r"|(?<!\\)\$(?P<di>[^$]+?)(?<!\\)\$",
    re.DOTALL,
)

_INLINE_SIZE = 11
_DISPLAY_SIZE = 13


@dataclass(frozen=True)
class MathRun:
    text: str
    is_math: bool = False
    display: bool = False


def split_math(text: str) -> List[MathRun]:
    """Segment ``text`` into alternating plain and math runs."""
    runs: List[MathRun] = []
    cursor = 0
    for match in _MATH_RE.finditer(text):
        start, end = match.span()
        if start > cursor:
            runs.append(MathRun(text[cursor:start]))
        display = match.group("dd") is not None or match.group("bd") is not None
        body = next(g for g in match.groups() if g is not None)
        runs.append(MathRun(body.strip(), is_math=True, display=display))
        cursor = end
    if cursor < len(text):
        runs.append(MathRun(text[cursor:]))
    return runs


def math_fallback(latex: str) -> Markup:
    return Markup('<code class="math">{0}</code>').format(latex)


class MathTypesetter:
    """Render LaTeX snippets to SVG files under ``surface_dir``.

    Identical snippets are rendered once per typesetter.
    """

    def __init__(
        self,
        surface_dir: Path,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.surface_dir = Path(surface_dir)
        self._logger = logger or logging.getLogger("exam_studio.export")
        self._cache: Dict[Tuple[str, bool], Markup] = {}
        self.rendered = 0
        self.failed = 0

    def typeset(self, latex: str, *, display: bool = False) -> Markup:
        key = (latex, display)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        markup = self._render(latex, display)
        self._cache[key] = markup
        return markup

    def _render(self, latex: str, display: bool) -> Markup:
        target = self.surface_dir / f"math-{len(self._cache):04d}.svg"
        size = _DISPLAY_SIZE if display else _INLINE_SIZE
        try:
            mathtext.math_to_image(
                f"${latex}$",
                target,
                prop=FontProperties(size=size),
                format="svg",
            )
        except ValueError:
            self.failed += 1
            self._logger.debug("mathtext could not parse", extra={"latex": latex})
            return math_fallback(latex)
        self.rendered += 1
        css_class = "math display" if display else "math"
        return Markup('<img class="{0}" src="{1}" alt="{2}">').format(
            css_class, target.resolve().as_uri(), latex
        )


def render_rich_text(
    text: str, typesetter: Optional[MathTypesetter] = None
) -> Markup:
    """Return safe HTML for ``text``.

    Without a typesetter, math runs keep their LaTeX source verbatim.
    """
    parts: List[Markup] = []
    for run in split_math(text):
        if not run.is_math:
            parts.append(escape(run.text).replace("\n", Markup("<br>")))
        elif typesetter is None:
            parts.append(escape(_delimit(run)))
        else:
            parts.append(typesetter.typeset(run.text, display=run.display))
    return Markup("").join(parts)


def _delimit(run: MathRun) -> str:
    if run.display:
        return f"$${run.text}$$"
    return f"${run.text}$"
