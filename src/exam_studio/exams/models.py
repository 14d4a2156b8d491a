"""Exam and question records produced by the generation client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

__all__ = [
    "OPTION_COUNT",
    "OPTION_LABELS",
    "ExamFormatError",
    "Question",
    "Exam",
]

OPTION_COUNT = 4
OPTION_LABELS = ("A", "B", "C", "D")


class ExamFormatError(ValueError):
    """Raised when a payload does not describe a valid exam."""


@dataclass(frozen=True)
class Question:
    """One multiple-choice item with exactly four options."""

    text: str
    options: tuple[str, ...]
    correct_answer_index: int
    explanation: str

    def __post_init__(self) -> None:
        if len(self.options) != OPTION_COUNT:
            raise ExamFormatError(
                f"question must have exactly {OPTION_COUNT} options, "
                f"got {len(self.options)}"
            )
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ExamFormatError(
                "correctAnswerIndex must point at one of the options"
            )

    @property
    def correct_label(self) -> str:
        return OPTION_LABELS[self.correct_answer_index]

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer_index]

    def labelled_options(self) -> list[tuple[str, str]]:
        return list(zip(OPTION_LABELS, self.options))

    @classmethod
    def from_payload(cls, data: Any) -> "Question":
        if not isinstance(data, Mapping):
            raise ExamFormatError("question must be an object")
        text = data.get("questionText")
        if not isinstance(text, str) or not text.strip():
            raise ExamFormatError("questionText must be a non-empty string")
        options = data.get("options")
        if not isinstance(options, Sequence) or isinstance(options, str):
            raise ExamFormatError("options must be a list of strings")
        if not all(isinstance(opt, str) for opt in options):
            raise ExamFormatError("options must be a list of strings")
        index = data.get("correctAnswerIndex")
        if isinstance(index, bool) or not isinstance(index, int):
            raise ExamFormatError("correctAnswerIndex must be an integer")
        explanation = data.get("explanation", "")
        if not isinstance(explanation, str):
            raise ExamFormatError("explanation must be a string")
        return cls(
            text=text.strip(),
            options=tuple(opt.strip() for opt in options),
            correct_answer_index=index,
            explanation=explanation.strip(),
        )


@dataclass(frozen=True)
class Exam:
    """A titled, timed, non-empty sequence of questions."""

    title: str
    duration: int
    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ExamFormatError("exam title must be non-empty")
        if isinstance(self.duration, bool) or self.duration <= 0:
            raise ExamFormatError("duration must be a positive integer")
        if not self.questions:
            raise ExamFormatError("exam must contain at least one question")

    def __len__(self) -> int:
        return len(self.questions)

    @classmethod
    def from_payload(cls, data: Any) -> "Exam":
        """Build an exam from decoded JSON.

        Accepts ``examTitle`` as an alias for ``title``. Raises
        :class:`ExamFormatError` describing the first problem found.
        """
        if not isinstance(data, Mapping):
            raise ExamFormatError("exam payload must be a JSON object")
        title = data.get("title", data.get("examTitle"))
        if not isinstance(title, str) or not title.strip():
            raise ExamFormatError("title must be a non-empty string")
        duration = data.get("duration")
        if isinstance(duration, float) and duration.is_integer():
            duration = int(duration)
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ExamFormatError("duration must be an integer")
        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list) or not raw_questions:
            raise ExamFormatError("questions must be a non-empty list")
        questions = []
        for position, item in enumerate(raw_questions, start=1):
            try:
                questions.append(Question.from_payload(item))
            except ExamFormatError as exc:
                raise ExamFormatError(f"question {position}: {exc}") from exc
        return cls(
            title=title.strip(),
            duration=duration,
            questions=tuple(questions),
        )
