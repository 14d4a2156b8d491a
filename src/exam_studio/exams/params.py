"""Validated generation parameters for the two exam sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .bank import BankQuestion
from .errors import ValidationFailure

__all__ = [
    "EXAM_TYPES",
    "GRADES",
    "DEFAULT_GRADE",
    "DEFAULT_QUESTION_COUNT",
    "MIN_SOURCE_CHARS",
    "TEXT_COUNT_RANGE",
    "BANK_COUNT_RANGE",
    "EMPTY_SOURCE_MESSAGE",
    "SHORT_SOURCE_MESSAGE",
    "EMPTY_SELECTION_MESSAGE",
    "TextGenerationParams",
    "BankGenerationParams",
    "parse_question_count",
]

EXAM_TYPES = (
    "Kiểm tra 15 phút",
    "Kiểm tra 45 phút (1 tiết)",
    "Thi học kỳ 1",
    "Thi học kỳ 2",
    "Thi thử Tốt nghiệp THPT",
)
GRADES = ("10", "11", "12")
DEFAULT_GRADE = "12"
DEFAULT_QUESTION_COUNT = 10
MIN_SOURCE_CHARS = 100
TEXT_COUNT_RANGE = (5, 50)
BANK_COUNT_RANGE = (1, 50)

EMPTY_SOURCE_MESSAGE = "Vui lòng dán nội dung tài liệu học tập."
SHORT_SOURCE_MESSAGE = (
    "Nội dung tài liệu quá ngắn. Vui lòng cung cấp thêm để có kết quả tốt hơn."
)
EMPTY_SELECTION_MESSAGE = "Vui lòng chọn ít nhất một câu hỏi mẫu."


def parse_question_count(raw: object, bounds: tuple[int, int]) -> int:
    """Coerce form input into a bounded integer question count."""
    low, high = bounds
    message = f"Số câu hỏi phải là số nguyên từ {low} đến {high}."
    if isinstance(raw, bool):
        raise ValidationFailure("question_count", message)
    if isinstance(raw, str):
        try:
            raw = int(raw.strip())
        except ValueError as exc:
            raise ValidationFailure("question_count", message) from exc
    if not isinstance(raw, int) or not low <= raw <= high:
        raise ValidationFailure("question_count", message)
    return raw


@dataclass(frozen=True)
class TextGenerationParams:
    source_text: str
    exam_type: str
    question_count: int
    grade: str

    def __post_init__(self) -> None:
        trimmed = self.source_text.strip()
        if not trimmed:
            raise ValidationFailure("source_text", EMPTY_SOURCE_MESSAGE)
        if len(trimmed) < MIN_SOURCE_CHARS:
            raise ValidationFailure("source_text", SHORT_SOURCE_MESSAGE)
        if self.exam_type not in EXAM_TYPES:
            raise ValidationFailure(
                "exam_type", f"Loại đề không hợp lệ: {self.exam_type}"
            )
        object.__setattr__(
            self,
            "question_count",
            parse_question_count(self.question_count, TEXT_COUNT_RANGE),
        )
        if self.grade not in GRADES:
            raise ValidationFailure(
                "grade", f"Khối lớp không hợp lệ: {self.grade}"
            )


@dataclass(frozen=True)
class BankGenerationParams:
    base_questions: tuple[BankQuestion, ...]
    question_count: int
    grade: str
    chapter: str
    topic: str

    def __post_init__(self) -> None:
        if not self.base_questions:
            raise ValidationFailure("base_questions", EMPTY_SELECTION_MESSAGE)
        object.__setattr__(
            self,
            "question_count",
            parse_question_count(self.question_count, BANK_COUNT_RANGE),
        )

    @classmethod
    def create(
        cls,
        base_questions: Sequence[BankQuestion],
        *,
        question_count: int,
        grade: str,
        chapter: str,
        topic: str,
    ) -> "BankGenerationParams":
        return cls(
            base_questions=tuple(base_questions),
            question_count=question_count,
            grade=grade,
            chapter=chapter,
            topic=topic,
        )
