from __future__ import annotations

import pytest

from exam_studio.exams.bank import (
    BankFormatError,
    TopicRef,
    load_bank,
    parse_bank,
)


def test_bundled_bank_hierarchy():
    bank = load_bank()

    assert [grade.id for grade in bank] == [
        "grade-12",
        "grade-11",
        "grade-10",
    ]
    topic = bank.topic("grade-12", "g12-c1", "g12-c1-t1")
    assert topic.name == "Bài 1: Sự đồng biến, nghịch biến của hàm số"
    assert [q.id for q in topic.questions] == [
        "g12c1t1q1",
        "g12c1t1q2",
        "g12c1t1q3",
        "g12c1t1q4",
    ]
    assert topic.question("g12c1t1q2").text.startswith("Tìm các khoảng")


def test_load_bank_is_cached():
    assert load_bank() is load_bank()


def test_first_selection_defaults():
    bank = load_bank()

    assert bank.first_selection() == TopicRef(
        "grade-12", "g12-c1", "g12-c1-t1"
    )
    assert bank.first_selection("grade-11") == TopicRef(
        "grade-11", "g11-c1", "g11-c1-t1"
    )
    assert bank.first_selection("grade-12", "g12-c2") == TopicRef(
        "grade-12", "g12-c2", "g12-c2-t1"
    )


def test_lookups_raise_key_error_for_unknown_ids():
    bank = load_bank()

    with pytest.raises(KeyError):
        bank.grade("grade-9")
    with pytest.raises(KeyError):
        bank.chapter("grade-12", "g11-c1")
    with pytest.raises(KeyError):
        bank.topic("grade-12", "g12-c1", "missing")
    with pytest.raises(KeyError):
        bank.topic("grade-12", "g12-c1", "g12-c1-t1").question("nope")


def test_first_selection_with_empty_grade():
    bank = parse_bank(
        {"grades": [{"id": "g", "name": "Trống", "chapters": []}]}
    )

    ref = bank.first_selection()

    assert ref == TopicRef("g", "", "")
    assert ref.key == "g--"


@pytest.mark.parametrize(
    "data, fragment",
    [
        ([], "root"),
        ({"grades": []}, "at least one grade"),
        ({"grades": [{"id": "g", "name": ""}]}, "'name'"),
        (
            {
                "grades": [
                    {"id": "g", "name": "A", "chapters": []},
                    {"id": "g", "name": "B", "chapters": []},
                ]
            },
            "duplicate id 'g'",
        ),
        (
            {
                "grades": [
                    {
                        "id": "g",
                        "name": "A",
                        "chapters": [
                            {
                                "id": "c",
                                "name": "C",
                                "topics": [
                                    {
                                        "id": "t",
                                        "name": "T",
                                        "questions": [
                                            {"id": "q", "text": "x"},
                                            {"id": "q", "text": "y"},
                                        ],
                                    }
                                ],
                            }
                        ],
                    }
                ]
            },
            "g/c/t: duplicate id 'q'",
        ),
        ({"grades": [{"id": "g", "name": "A", "chapters": {}}]}, "list"),
    ],
)
def test_parse_bank_rejects_malformed_catalogs(data, fragment):
    with pytest.raises(BankFormatError) as excinfo:
        parse_bank(data)

    assert fragment in str(excinfo.value)
