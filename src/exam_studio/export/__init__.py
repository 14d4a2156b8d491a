"""Math typesetting, printable documents, PDF and Word export."""

from __future__ import annotations

from .documents import render_exam_html, render_word_document
from .exporter import WORD_MIME_TYPE, ExamExporter, safe_filename
from .mathtext import MathTypesetter, render_rich_text, split_math
from .pdf import PageSetup, RenderSurface, build_page_css, write_exam_pdf

__all__ = [
    "render_exam_html",
    "render_word_document",
    "WORD_MIME_TYPE",
    "ExamExporter",
    "safe_filename",
    "MathTypesetter",
    "render_rich_text",
    "split_math",
    "PageSetup",
    "RenderSurface",
    "build_page_css",
    "write_exam_pdf",
]
