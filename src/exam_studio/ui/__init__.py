"""Textual user interface."""

from __future__ import annotations

from .app import ExamStudioApp, build_app

__all__ = ["ExamStudioApp", "build_app"]
