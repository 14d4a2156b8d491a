"""File-producing actions offered from the result view."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from ..exams.errors import ExportFailure
from ..exams.models import Exam
from .documents import render_word_document
from .pdf import PageSetup, write_exam_pdf

__all__ = ["ExamExporter", "WORD_MIME_TYPE", "safe_filename"]

WORD_MIME_TYPE = "application/msword"

_SEPARATORS_RE = re.compile(r"[\\/]+")
_SPACE_RE = re.compile(r"\s+")


def safe_filename(title: str) -> str:
    """Title with whitespace as ``_`` and path separators removed."""
    name = _SEPARATORS_RE.sub("", title.strip())
    name = _SPACE_RE.sub("_", name).strip("._")
    return name or "exam"


class ExamExporter:
    def __init__(
        self,
        output_dir: Path,
        *,
        page: Optional[PageSetup] = None,
        scratch_root: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.page = page or PageSetup()
        self._scratch_root = scratch_root
        self._logger = logger or logging.getLogger("exam_studio.export")

    def _target(self, exam: Exam, suffix: str) -> Path:
        return self.output_dir / f"{safe_filename(exam.title)}{suffix}"

    def _write_pdf(self, exam: Exam, *, solutions: bool, suffix: str) -> Path:
        return write_exam_pdf(
            exam,
            self._target(exam, suffix),
            solutions=solutions,
            page=self.page,
            scratch_root=self._scratch_root,
            logger=self._logger,
        )

    def export_exam_pdf(self, exam: Exam) -> Path:
        return self._write_pdf(exam, solutions=False, suffix="_DeGoc.pdf")

    def export_solution_pdf(self, exam: Exam) -> Path:
        return self._write_pdf(exam, solutions=True, suffix="_LoiGiai.pdf")

    def export_word(self, exam: Exam) -> Path:
        """Write the Word-compatible HTML document with a ``.doc`` name."""
        target = self._target(exam, ".doc")
        try:
            document = render_word_document(exam)
            target.parent.mkdir(parents=True, exist_ok=True)
            # Leading BOM marks the markup as UTF-8 for Word.
            target.write_text("\ufeff" + document, encoding="utf-8")
        except Exception as exc:
            self._logger.exception(
                "Word export failed", extra={"path": str(target)}
            )
            raise ExportFailure() from exc
        self._logger.info(
            "Wrote Word document",
            extra={"path": str(target), "mime_type": WORD_MIME_TYPE},
        )
        return target
