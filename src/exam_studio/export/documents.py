"""HTML documents for printing (exam / solutions) and for Word.

All AI-sourced strings reach the templates either as plain ``str`` (escaped by
Jinja2 autoescape) or as :class:`markupsafe.Markup` built by
:func:`render_rich_text`, which escapes everything except typeset math.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import Markup

from ..exams.models import OPTION_LABELS, Exam
from .mathtext import MathTypesetter, render_rich_text

__all__ = [
    "SOLUTION_SUFFIX",
    "ANSWER_KEY_COLUMNS",
    "render_exam_html",
    "render_word_document",
    "answer_key_rows",
]

SOLUTION_SUFFIX = "- Đáp Án & Lời Giải"
ANSWER_KEY_COLUMNS = 10

_PRINT_CSS = """
body { font-family: 'DejaVu Serif', 'Times New Roman', serif; color: #111;
       font-size: 12pt; line-height: 1.45; }
h1 { text-align: center; font-size: 18pt; margin-bottom: 0.2em; }
.duration { text-align: center; font-style: italic; margin-bottom: 1.5em; }
.question { margin-bottom: 1.1em; page-break-inside: avoid; }
.question-text { margin-bottom: 0.35em; }
.question-number { font-weight: bold; }
.options { list-style: none; padding-left: 1.2em; margin: 0; }
.options li { margin: 0.15em 0; }
.options li.correct { font-weight: bold; color: #15803d; }
.answer { margin-top: 0.4em; font-weight: bold; }
.explanation { margin-top: 0.2em; padding: 0.4em 0.6em;
               background: #f3f4f6; border-left: 3px solid #9ca3af; }
img.math { vertical-align: middle; }
img.math.display { display: block; margin: 0.3em auto; }
code.math { font-family: 'DejaVu Sans Mono', monospace; font-size: 0.95em; }
"""

_EXAM_TEMPLATE = """<!DOCTYPE html>
<html lang="vi">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>{{ css }}</style>
</head>
<body>
  <h1>{{ title }}</h1>
  <p class="duration">Thời gian: {{ duration }} phút</p>
  {% for q in questions %}
  <div class="question">
    <div class="question-text">
      <span class="question-number">Câu {{ q.number }}:</span> {{ q.text }}
    </div>
    <ul class="options">
      {% for opt in q.options %}
      <li{% if solutions and opt.correct %} class="correct"{% endif %}>
        <strong>{{ opt.label }}.</strong> {{ opt.text }}
      </li>
      {% endfor %}
    </ul>
    {% if solutions %}
    <p class="answer">Đáp án đúng: {{ q.correct_label }}</p>
    <div class="explanation"><strong>Giải thích:</strong> {{ q.explanation }}</div>
    {% endif %}
  </div>
  {% endfor %}
</body>
</html>
"""

_WORD_TEMPLATE = """<html xmlns:o="urn:schemas-microsoft-com:office:office" \
xmlns:w="urn:schemas-microsoft-com:office:word" \
xmlns="http://www.w3.org/TR/REC-html40">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>
    body { font-family: 'Times New Roman', serif; font-size: 12pt; }
    h1 { text-align: center; font-size: 16pt; }
    .duration { text-align: center; font-style: italic; }
    .question { margin-bottom: 12pt; }
    .options { margin-left: 18pt; }
    table.answer-key { border-collapse: collapse; margin-top: 6pt; }
    table.answer-key td { border: 1px solid #000; padding: 3pt 6pt;
                          text-align: center; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>
  <p class="duration">Thời gian: {{ duration }} phút</p>
  {% for q in questions %}
  <div class="question">
    <p><b>Câu {{ q.number }}:</b> {{ q.text }}</p>
    <div class="options">
      {% for opt in q.options %}
      <p>{{ opt.label }}. {{ opt.text }}</p>
      {% endfor %}
    </div>
  </div>
  {% endfor %}
  <br style="page-break-before: always">
  <h2>ĐÁP ÁN</h2>
  <table class="answer-key">
    {% for row in answer_rows %}
    <tr>
      {% for number, label in row %}
      <td>{{ number }}.{{ label }}</td>
      {% endfor %}
    </tr>
    {% endfor %}
  </table>
</body>
</html>
"""

_env = Environment(
    loader=DictLoader({"exam.html": _EXAM_TEMPLATE, "word.html": _WORD_TEMPLATE}),
    autoescape=select_autoescape(default=True, default_for_string=True),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _question_context(
    exam: Exam,
    typesetter: Optional[MathTypesetter],
    *,
    explanations: bool = False,
) -> List[Dict[str, Any]]:
    context = []
    for number, question in enumerate(exam.questions, start=1):
        context.append(
            {
                "number": number,
                "text": render_rich_text(question.text, typesetter),
                "options": [
                    {
                        "label": label,
                        "text": render_rich_text(option, typesetter),
                        "correct": idx == question.correct_answer_index,
                    }
                    for idx, (label, option) in enumerate(
                        question.labelled_options()
                    )
                ],
                "correct_label": question.correct_label,
                "explanation": (
                    render_rich_text(question.explanation, typesetter)
                    if explanations
                    else None
                ),
            }
        )
    return context


def render_exam_html(
    exam: Exam,
    *,
    solutions: bool,
    typesetter: Optional[MathTypesetter] = None,
) -> str:
    """Printable HTML for the exam, or the worked-solution variant."""
    title = exam.title
    if solutions:
        title = f"{title} {SOLUTION_SUFFIX}"
    return _env.get_template("exam.html").render(
        title=title,
        duration=exam.duration,
        questions=_question_context(
            exam, typesetter, explanations=solutions
        ),
        solutions=solutions,
        css=Markup(_PRINT_CSS),
    )


def answer_key_rows(
    exam: Exam, columns: int = ANSWER_KEY_COLUMNS
) -> List[Sequence[tuple[int, str]]]:
    entries = [
        (number, OPTION_LABELS[q.correct_answer_index])
        for number, q in enumerate(exam.questions, start=1)
    ]
    return [entries[i : i + columns] for i in range(0, len(entries), columns)]


def render_word_document(exam: Exam) -> str:
    """Self-contained HTML that Word opens; LaTeX is kept verbatim."""
    return _env.get_template("word.html").render(
        title=exam.title,
        duration=exam.duration,
        questions=_question_context(exam, None),
        answer_rows=answer_key_rows(exam),
    )
