from __future__ import annotations

import pytest

from exam_studio.exams.bank import TopicRef, load_bank
from exam_studio.exams.errors import ValidationFailure
from exam_studio.exams.params import (
    EMPTY_SELECTION_MESSAGE,
    EMPTY_SOURCE_MESSAGE,
    EXAM_TYPES,
)
from exam_studio.session.forms import BankSelectionForm, TextGeneratorForm


@pytest.fixture
def bank():
    return load_bank()


def test_text_form_defaults():
    form = TextGeneratorForm()

    assert form.exam_type == EXAM_TYPES[0]
    assert form.question_count == 10
    assert form.grade == "12"


def test_text_form_builds_params_from_raw_input():
    form = TextGeneratorForm(
        source_text="Tập hợp và mệnh đề. " * 10, question_count=" 15 "
    )

    params = form.to_params()

    assert params.question_count == 15
    assert params.grade == "12"


def test_text_form_rejects_empty_source():
    with pytest.raises(ValidationFailure) as excinfo:
        TextGeneratorForm().to_params()

    assert excinfo.value.message == EMPTY_SOURCE_MESSAGE


def test_bank_form_starts_at_first_topic(bank):
    form = BankSelectionForm(bank=bank)

    assert (form.grade_id, form.chapter_id, form.topic_id) == (
        "grade-12",
        "g12-c1",
        "g12-c1-t1",
    )
    assert len(form.sample_questions) == 4
    assert form.can_submit is False


def test_bank_form_cascades_resets(bank):
    form = BankSelectionForm(bank=bank)
    form.toggle("g12c1t1q1")

    form.set_topic("g12-c1-t2")
    assert form.selected == set()
    assert [q.id for q in form.sample_questions] == ["g12c1t2q1", "g12c1t2q2"]

    form.toggle("g12c1t2q1")
    form.set_chapter("g12-c2")
    assert (form.chapter_id, form.topic_id) == ("g12-c2", "g12-c2-t1")
    assert form.selected == set()

    form.set_grade("grade-10")
    assert (form.chapter_id, form.topic_id) == ("g10-c1", "g10-c1-t1")
    assert [c.id for c in form.chapters] == ["g10-c1"]
    assert [t.id for t in form.topics] == ["g10-c1-t1"]


def test_bank_form_honours_initial_selection(bank):
    form = BankSelectionForm.create(
        bank, TopicRef("grade-12", "g12-c1", "g12-c1-t2")
    )

    assert form.topic.name == "Bài 2: Cực trị của hàm số"


def test_bank_form_ignores_unknown_initial_ids(bank):
    unknown_grade = BankSelectionForm.create(bank, TopicRef("x", "y", "z"))
    unknown_topic = BankSelectionForm.create(
        bank, TopicRef("grade-11", "g11-c1", "nope")
    )

    assert unknown_grade.topic_id == "g12-c1-t1"
    assert unknown_topic.topic_id == "g11-c1-t1"


def test_toggle_flips_membership(bank):
    form = BankSelectionForm(bank=bank)

    assert form.toggle("g12c1t1q2") is True
    assert form.can_submit is True
    assert form.toggle("g12c1t1q2") is False
    assert form.can_submit is False
    with pytest.raises(KeyError):
        form.toggle("g12c1t2q1")


def test_bank_params_keep_catalog_order(bank):
    form = BankSelectionForm(bank=bank)
    form.toggle("g12c1t1q4")
    form.toggle("g12c1t1q1")
    form.question_count = "8"

    params = form.to_params()

    assert [q.id for q in params.base_questions] == ["g12c1t1q1", "g12c1t1q4"]
    assert params.question_count == 8
    assert params.grade == "Toán 12"
    assert params.chapter.startswith("Chương I:")
    assert params.topic == "Bài 1: Sự đồng biến, nghịch biến của hàm số"


def test_empty_selection_reported_before_count(bank):
    form = BankSelectionForm(bank=bank, question_count="abc")

    with pytest.raises(ValidationFailure) as excinfo:
        form.to_params()

    assert excinfo.value.message == EMPTY_SELECTION_MESSAGE

    form.toggle("g12c1t1q1")
    with pytest.raises(ValidationFailure) as excinfo:
        form.to_params()
    assert excinfo.value.field == "question_count"
