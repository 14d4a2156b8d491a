"""Exam model, question bank, prompts and the generation client."""

from __future__ import annotations

from .bank import (
    BankFormatError,
    BankQuestion,
    Chapter,
    Grade,
    QuestionBank,
    Topic,
    TopicRef,
    load_bank,
)
from .client import GenerationClient, strip_code_fence
from .errors import (
    ExamStudioError,
    ExportFailure,
    GenerationFailure,
    SessionStateError,
    ValidationFailure,
)
from .models import OPTION_LABELS, Exam, ExamFormatError, Question
from .params import (
    EXAM_TYPES,
    GRADES,
    BankGenerationParams,
    TextGenerationParams,
)
from .prompts import (
    EXAM_SCHEMA,
    GenerationRequest,
    build_bank_request,
    build_text_request,
    default_bank_title,
)

__all__ = [
    "BankFormatError",
    "BankQuestion",
    "Chapter",
    "Grade",
    "QuestionBank",
    "Topic",
    "TopicRef",
    "load_bank",
    "GenerationClient",
    "strip_code_fence",
    "ExamStudioError",
    "ExportFailure",
    "GenerationFailure",
    "SessionStateError",
    "ValidationFailure",
    "OPTION_LABELS",
    "Exam",
    "ExamFormatError",
    "Question",
    "EXAM_TYPES",
    "GRADES",
    "BankGenerationParams",
    "TextGenerationParams",
    "EXAM_SCHEMA",
    "GenerationRequest",
    "build_bank_request",
    "build_text_request",
    "default_bank_title",
]
