from __future__ import annotations

from markupsafe import escape

from exam_studio.exams.models import Exam
from exam_studio.export.documents import (
    SOLUTION_SUFFIX,
    answer_key_rows,
    render_exam_html,
    render_word_document,
)

from fixtures import exam_payload


def test_exam_html_lists_questions_without_answers(sample_exam):
    html = render_exam_html(sample_exam, solutions=False)

    assert f"<h1>{sample_exam.title}</h1>" in html
    assert "Thời gian: 15 phút" in html
    assert "Câu 1:" in html and "Câu 3:" in html
    assert "<strong>D.</strong>" in html
    assert "Đáp án đúng" not in html
    assert "Giải thích" not in html
    assert 'class="correct"' not in html
    assert str(escape(SOLUTION_SUFFIX)) not in html
    assert "Lời Giải" not in html


def test_solution_html_marks_correct_options(sample_exam):
    html = render_exam_html(sample_exam, solutions=True)

    title = f"{sample_exam.title} {SOLUTION_SUFFIX}"
    assert f"<h1>{escape(title)}</h1>" in html
    assert "Đáp Án &amp; Lời Giải" in html
    assert html.count('<li class="correct">') == len(sample_exam)
    assert "Đáp án đúng: A" in html
    assert "Đáp án đúng: C" in html
    assert "Giải thích cho câu 2." in html


def test_ai_text_is_escaped():
    payload = exam_payload(1, title="<i>Đề</i>")
    payload["questions"][0]["questionText"] = "<script>alert(1)</script>"
    payload["questions"][0]["explanation"] = "<img src=x onerror=alert(1)>"
    exam = Exam.from_payload(payload)

    for html in (
        render_exam_html(exam, solutions=True),
        render_word_document(exam),
    ):
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "<i>" not in html
        assert "onerror=alert(1)>" not in html


def test_css_is_not_escaped(sample_exam):
    html = render_exam_html(sample_exam, solutions=False)

    assert "font-family: 'DejaVu Serif'" in html


def test_answer_key_rows_chunk_by_ten():
    exam = Exam.from_payload(exam_payload(23))

    rows = answer_key_rows(exam)

    assert [len(row) for row in rows] == [10, 10, 3]
    assert rows[0][:4] == [(1, "A"), (2, "B"), (3, "C"), (4, "D")]
    assert rows[2][-1] == (23, "C")


def test_word_document_keeps_latex_and_answer_table(sample_exam):
    doc = render_word_document(sample_exam)

    assert 'xmlns:w="urn:schemas-microsoft-com:office:word"' in doc
    assert "$x^1$" in doc
    assert "<img" not in doc
    assert "ĐÁP ÁN" in doc
    assert "<td>1.A</td>" in doc
    assert "<td>3.C</td>" in doc
    assert "Giải thích" not in doc
