"""Shared test doubles for the exam-studio suite."""

from .openai import OpenAIStub, OpenAIStubFactory, exam_payload  # noqa: F401
from .weasyprint import CSSStub, FailingHTMLStub, HTMLStub  # noqa: F401

__all__ = [
    "CSSStub",
    "FailingHTMLStub",
    "HTMLStub",
    "OpenAIStub",
    "OpenAIStubFactory",
    "exam_payload",
]
