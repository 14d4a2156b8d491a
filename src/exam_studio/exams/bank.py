"""Read-only question bank: grade -> chapter -> topic -> sample questions.

The catalog ships as package data and is parsed once per process. All records
are frozen so the hierarchy can be shared freely between views.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any, Iterator, Mapping, Optional, Sequence

__all__ = [
    "BankFormatError",
    "BankQuestion",
    "Topic",
    "Chapter",
    "Grade",
    "TopicRef",
    "QuestionBank",
    "load_bank",
    "parse_bank",
]

_PACKAGE = "exam_studio.exams"
_RESOURCE = "data/math_bank.json"


class BankFormatError(ValueError):
    """Raised when the bundled catalog is malformed."""


@dataclass(frozen=True)
class BankQuestion:
    id: str
    text: str


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    questions: tuple[BankQuestion, ...]

    def question(self, question_id: str) -> BankQuestion:
        for item in self.questions:
            if item.id == question_id:
                return item
        raise KeyError(f"Unknown question '{question_id}' in topic {self.id}")


@dataclass(frozen=True)
class Chapter:
    id: str
    name: str
    topics: tuple[Topic, ...]


@dataclass(frozen=True)
class Grade:
    id: str
    name: str
    chapters: tuple[Chapter, ...]


@dataclass(frozen=True)
class TopicRef:
    """A (grade, chapter, topic) identifier triple.

    Chapter and topic ids may be empty when the parent has no children.
    """

    grade_id: str
    chapter_id: str
    topic_id: str

    @property
    def key(self) -> str:
        return f"{self.grade_id}-{self.chapter_id}-{self.topic_id}"


@dataclass(frozen=True)
class QuestionBank:
    grades: tuple[Grade, ...]

    def __iter__(self) -> Iterator[Grade]:
        return iter(self.grades)

    def grade(self, grade_id: str) -> Grade:
        for grade in self.grades:
            if grade.id == grade_id:
                return grade
        raise KeyError(f"Unknown grade '{grade_id}'")

    def chapter(self, grade_id: str, chapter_id: str) -> Chapter:
        for chapter in self.grade(grade_id).chapters:
            if chapter.id == chapter_id:
                return chapter
        raise KeyError(f"Unknown chapter '{chapter_id}' in {grade_id}")

    def topic(self, grade_id: str, chapter_id: str, topic_id: str) -> Topic:
        for topic in self.chapter(grade_id, chapter_id).topics:
            if topic.id == topic_id:
                return topic
        raise KeyError(f"Unknown topic '{topic_id}' in {chapter_id}")

    def first_selection(
        self,
        grade_id: Optional[str] = None,
        chapter_id: Optional[str] = None,
    ) -> TopicRef:
        """Return the first chapter/topic under a grade (or chapter)."""
        grade = self.grade(grade_id) if grade_id else self.grades[0]
        if chapter_id:
            chapter: Optional[Chapter] = self.chapter(grade.id, chapter_id)
        else:
            chapter = grade.chapters[0] if grade.chapters else None
        if chapter is None:
            return TopicRef(grade.id, "", "")
        topic_id = chapter.topics[0].id if chapter.topics else ""
        return TopicRef(grade.id, chapter.id, topic_id)


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BankFormatError(f"{where}: '{key}' must be a non-empty string")
    return value.strip()


def _require_list(data: Mapping[str, Any], key: str, where: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise BankFormatError(f"{where}: '{key}' must be a list")
    return value


def _unique(ids: Sequence[str], where: str) -> None:
    seen: set[str] = set()
    for item in ids:
        if item in seen:
            raise BankFormatError(f"{where}: duplicate id '{item}'")
        seen.add(item)


def _parse_topic(raw: Mapping[str, Any], where: str) -> Topic:
    topic_id = _require_str(raw, "id", where)
    here = f"{where}/{topic_id}"
    questions = tuple(
        BankQuestion(
            id=_require_str(q, "id", here),
            text=_require_str(q, "text", here),
        )
        for q in _require_list(raw, "questions", here)
    )
    _unique([q.id for q in questions], here)
    return Topic(
        id=topic_id, name=_require_str(raw, "name", here), questions=questions
    )


def _parse_chapter(raw: Mapping[str, Any], where: str) -> Chapter:
    chapter_id = _require_str(raw, "id", where)
    here = f"{where}/{chapter_id}"
    topics = tuple(
        _parse_topic(t, here) for t in _require_list(raw, "topics", here)
    )
    _unique([t.id for t in topics], here)
    return Chapter(
        id=chapter_id, name=_require_str(raw, "name", here), topics=topics
    )


def _parse_grade(raw: Mapping[str, Any]) -> Grade:
    grade_id = _require_str(raw, "id", "grade")
    chapters = tuple(
        _parse_chapter(c, grade_id)
        for c in _require_list(raw, "chapters", grade_id)
    )
    _unique([c.id for c in chapters], grade_id)
    return Grade(
        id=grade_id, name=_require_str(raw, "name", grade_id), chapters=chapters
    )


def parse_bank(data: Any) -> QuestionBank:
    """Validate decoded catalog JSON and build the frozen hierarchy."""
    if not isinstance(data, Mapping):
        raise BankFormatError("catalog root must be an object")
    grades = tuple(
        _parse_grade(g) for g in _require_list(data, "grades", "root")
    )
    if not grades:
        raise BankFormatError("catalog must contain at least one grade")
    _unique([g.id for g in grades], "root")
    return QuestionBank(grades=grades)


@lru_cache(maxsize=1)
def load_bank() -> QuestionBank:
    """Load the bundled catalog (parsed once per process)."""
    resource = resources.files(_PACKAGE).joinpath(_RESOURCE)
    try:
        data = json.loads(resource.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise BankFormatError(f"catalog is not valid JSON: {exc}") from exc
    return parse_bank(data)
