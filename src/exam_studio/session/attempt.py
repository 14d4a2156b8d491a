"""Answer selection and scoring for one pass through an exam."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..exams.models import OPTION_LABELS, Exam, Question

__all__ = ["ExamAttempt", "AttemptSummary", "QuestionOutcome"]


@dataclass(frozen=True)
class QuestionOutcome:
    """How one question should be shown once the attempt is submitted."""

    index: int
    question: Question
    selected: Optional[int]
    submitted: bool

    @property
    def answered(self) -> bool:
        return self.selected is not None

    @property
    def is_correct(self) -> bool:
        return self.selected == self.question.correct_answer_index

    @property
    def selected_label(self) -> Optional[str]:
        if self.selected is None:
            return None
        return OPTION_LABELS[self.selected]

    def option_state(self, option_index: int) -> str:
        """Return ``correct``, ``incorrect``, ``selected`` or ``plain``."""
        if not self.submitted:
            return "selected" if option_index == self.selected else "plain"
        if option_index == self.question.correct_answer_index:
            return "correct"
        if option_index == self.selected:
            return "incorrect"
        return "plain"


@dataclass(frozen=True)
class AttemptSummary:
    total: int
    answered: int
    correct: int

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


class ExamAttempt:
    """Single-select answers, locked once :meth:`submit` is called."""

    def __init__(self, exam: Exam) -> None:
        self.exam = exam
        self._answers: list[Optional[int]] = [None] * len(exam)
        self._submitted = False

    @property
    def submitted(self) -> bool:
        return self._submitted

    @property
    def answers(self) -> tuple[Optional[int], ...]:
        return tuple(self._answers)

    def select(self, question_index: int, option_index: int) -> bool:
        """Record an answer; returns False once the attempt is locked."""
        if self._submitted:
            return False
        if not 0 <= question_index < len(self.exam):
            raise IndexError(f"question {question_index} out of range")
        question = self.exam.questions[question_index]
        if not 0 <= option_index < len(question.options):
            raise IndexError(f"option {option_index} out of range")
        self._answers[question_index] = option_index
        return True

    def submit(self) -> int:
        self._submitted = True
        return self._count_correct()

    def _count_correct(self) -> int:
        return sum(
            1
            for question, answer in zip(self.exam.questions, self._answers)
            if answer == question.correct_answer_index
        )

    def score(self) -> Optional[int]:
        """Correct answers after submit; ``None`` before."""
        if not self._submitted:
            return None
        return self._count_correct()

    def summary(self) -> AttemptSummary:
        return AttemptSummary(
            total=len(self.exam),
            answered=sum(1 for answer in self._answers if answer is not None),
            correct=self._count_correct() if self._submitted else 0,
        )

    def outcome(self, index: int) -> QuestionOutcome:
        return QuestionOutcome(
            index=index,
            question=self.exam.questions[index],
            selected=self._answers[index],
            submitted=self._submitted,
        )

    def outcomes(self) -> list[QuestionOutcome]:
        return [self.outcome(i) for i in range(len(self.exam))]
