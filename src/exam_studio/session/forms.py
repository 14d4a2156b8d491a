"""In-progress form state for the two generator views.

Both forms validate locally and hand back frozen parameter objects; the
generation client is never reached with invalid input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..exams.bank import (
    BankQuestion,
    Chapter,
    Grade,
    QuestionBank,
    Topic,
    TopicRef,
)
from ..exams.errors import ValidationFailure
from ..exams.params import (
    BANK_COUNT_RANGE,
    DEFAULT_GRADE,
    DEFAULT_QUESTION_COUNT,
    EMPTY_SELECTION_MESSAGE,
    EXAM_TYPES,
    TEXT_COUNT_RANGE,
    BankGenerationParams,
    TextGenerationParams,
    parse_question_count,
)

__all__ = ["TextGeneratorForm", "BankSelectionForm"]


@dataclass
class TextGeneratorForm:
    source_text: str = ""
    exam_type: str = EXAM_TYPES[0]
    question_count: object = DEFAULT_QUESTION_COUNT
    grade: str = DEFAULT_GRADE

    def to_params(self) -> TextGenerationParams:
        """Validate the form; raises ``ValidationFailure`` on bad input."""
        count = parse_question_count(self.question_count, TEXT_COUNT_RANGE)
        return TextGenerationParams(
            source_text=self.source_text,
            exam_type=self.exam_type,
            question_count=count,
            grade=self.grade,
        )


@dataclass
class BankSelectionForm:
    """Cascading grade/chapter/topic choice plus the picked sample questions.

    Changing the grade resets chapter, topic and selection; changing the
    chapter resets topic and selection; changing the topic clears the
    selection.
    """

    bank: QuestionBank
    grade_id: str = ""
    chapter_id: str = ""
    topic_id: str = ""
    selected: set[str] = field(default_factory=set)
    question_count: object = DEFAULT_QUESTION_COUNT

    def __post_init__(self) -> None:
        if not self.grade_id:
            self._apply(self.bank.first_selection())

    @classmethod
    def create(
        cls, bank: QuestionBank, initial: Optional[TopicRef] = None
    ) -> "BankSelectionForm":
        """Start a form, honouring an initial selection from the sidebar.

        Unknown ids fall back to the first entry at that level.
        """
        form = cls(bank=bank)
        if initial is None:
            return form
        try:
            grade = bank.grade(initial.grade_id)
        except KeyError:
            return form
        form.set_grade(grade.id)
        if any(c.id == initial.chapter_id for c in grade.chapters):
            form.set_chapter(initial.chapter_id)
        chapter = form.chapter
        if chapter and any(t.id == initial.topic_id for t in chapter.topics):
            form.set_topic(initial.topic_id)
        return form

    def _apply(self, ref: TopicRef) -> None:
        self.grade_id = ref.grade_id
        self.chapter_id = ref.chapter_id
        self.topic_id = ref.topic_id
        self.selected = set()

    @property
    def grade(self) -> Grade:
        return self.bank.grade(self.grade_id)

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self.grade.chapters

    @property
    def chapter(self) -> Optional[Chapter]:
        if not self.chapter_id:
            return None
        return self.bank.chapter(self.grade_id, self.chapter_id)

    @property
    def topics(self) -> tuple[Topic, ...]:
        chapter = self.chapter
        return chapter.topics if chapter else ()

    @property
    def topic(self) -> Optional[Topic]:
        if not self.topic_id:
            return None
        return self.bank.topic(self.grade_id, self.chapter_id, self.topic_id)

    @property
    def sample_questions(self) -> tuple[BankQuestion, ...]:
        topic = self.topic
        return topic.questions if topic else ()

    @property
    def can_submit(self) -> bool:
        return bool(self.selected)

    def set_grade(self, grade_id: str) -> None:
        self._apply(self.bank.first_selection(grade_id))

    def set_chapter(self, chapter_id: str) -> None:
        self._apply(self.bank.first_selection(self.grade_id, chapter_id))

    def set_topic(self, topic_id: str) -> None:
        topic = self.bank.topic(self.grade_id, self.chapter_id, topic_id)
        self.topic_id = topic.id
        self.selected = set()

    def toggle(self, question_id: str) -> bool:
        """Flip a sample question in or out; returns the new membership."""
        topic = self.topic
        if topic is None:
            raise KeyError(f"Unknown question '{question_id}'")
        topic.question(question_id)
        if question_id in self.selected:
            self.selected.discard(question_id)
            return False
        self.selected.add(question_id)
        return True

    def to_params(self) -> BankGenerationParams:
        """Validate the form; raises ``ValidationFailure`` on bad input."""
        # Keep catalog order, not click order.
        base = [q for q in self.sample_questions if q.id in self.selected]
        if not base:
            raise ValidationFailure("base_questions", EMPTY_SELECTION_MESSAGE)
        count = parse_question_count(self.question_count, BANK_COUNT_RANGE)
        chapter = self.chapter
        topic = self.topic
        return BankGenerationParams.create(
            base,
            question_count=count,
            grade=self.grade.name,
            chapter=chapter.name if chapter else "",
            topic=topic.name if topic else "",
        )
