from __future__ import annotations

import pytest

from exam_studio.exams.models import Exam, ExamFormatError, Question


def _question(**overrides):
    data = {
        "questionText": "  Tính $1+1$.  ",
        "options": ["$1$", "$2$", "$3$", "$4$"],
        "correctAnswerIndex": 1,
        "explanation": "Vì $1+1=2$.",
    }
    data.update(overrides)
    return data


def test_exam_from_payload(payload):
    exam = Exam.from_payload(payload)

    assert exam.title == payload["title"]
    assert exam.duration == 15
    assert len(exam) == 3
    first = exam.questions[0]
    assert first.options == ("$0$", "$1$", "$2$", "$3$")
    assert first.correct_label == "A"
    assert exam.questions[2].correct_option == "$2$"


def test_question_trims_text_and_labels_options():
    question = Question.from_payload(_question())

    assert question.text == "Tính $1+1$."
    assert question.correct_label == "B"
    assert question.labelled_options() == [
        ("A", "$1$"),
        ("B", "$2$"),
        ("C", "$3$"),
        ("D", "$4$"),
    ]


def test_exam_title_alias_and_float_duration():
    exam = Exam.from_payload(
        {"examTitle": "Đề thi", "duration": 45.0, "questions": [_question()]}
    )

    assert exam.title == "Đề thi"
    assert exam.duration == 45


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"options": ["a", "b", "c"]}, "exactly 4 options"),
        ({"options": "abcd"}, "options must be a list"),
        ({"options": ["a", "b", "c", 4]}, "options must be a list"),
        ({"correctAnswerIndex": 4}, "correctAnswerIndex"),
        ({"correctAnswerIndex": -1}, "correctAnswerIndex"),
        ({"correctAnswerIndex": True}, "correctAnswerIndex"),
        ({"correctAnswerIndex": "1"}, "correctAnswerIndex"),
        ({"questionText": "   "}, "questionText"),
        ({"explanation": 3}, "explanation"),
    ],
)
def test_invalid_question_is_reported_with_position(overrides, fragment):
    payload = {
        "title": "Đề",
        "duration": 15,
        "questions": [_question(), _question(**overrides)],
    }

    with pytest.raises(ExamFormatError) as excinfo:
        Exam.from_payload(payload)

    message = str(excinfo.value)
    assert message.startswith("question 2:")
    assert fragment in message


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"title": "", "duration": 15, "questions": [_question()]},
        {"title": "Đề", "duration": "15", "questions": [_question()]},
        {"title": "Đề", "duration": 0, "questions": [_question()]},
        {"title": "Đề", "duration": 15, "questions": []},
        {"title": "Đề", "duration": 15},
    ],
)
def test_invalid_exam_payloads(payload):
    with pytest.raises(ExamFormatError):
        Exam.from_payload(payload)
