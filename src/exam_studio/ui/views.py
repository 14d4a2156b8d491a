"""Textual views for the exam studio.

Each view owns only its in-progress widget state and reports user intent to
the app through messages. AI-sourced strings are always wrapped in
``rich.text.Text`` so they are never parsed as console markup.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import (
    Button,
    Checkbox,
    Input,
    Label,
    LoadingIndicator,
    Select,
    Static,
    TextArea,
    Tree,
)

from ..exams.bank import QuestionBank, TopicRef
from ..exams.errors import ValidationFailure
from ..exams.models import OPTION_LABELS, Exam
from ..exams.params import (
    BankGenerationParams,
    EXAM_TYPES,
    GRADES,
    TextGenerationParams,
)
from ..session.attempt import ExamAttempt, QuestionOutcome
from ..session.forms import BankSelectionForm, TextGeneratorForm
from ..session.state import View

__all__ = [
    "Sidebar",
    "HomeView",
    "TextGeneratorView",
    "BankGeneratorView",
    "LoadingView",
    "ErrorView",
    "ResultView",
    "EXPORT_KINDS",
    "LOADING_MESSAGE",
    "ERROR_TITLE",
    "score_text",
    "theme_label",
]

LOADING_MESSAGE = "AI đang soạn đề cho bạn..."
ERROR_TITLE = "Tạo đề thất bại"
EXPORT_KINDS = ("exam", "solution", "word")

_QUESTION_PREFIX = "bq-"


def theme_label(dark_mode: bool) -> str:
    return "Chế độ Sáng" if dark_mode else "Chế độ Tối"


def score_text(score: int, total: int) -> str:
    return f"Bạn đạt {score} trên {total} điểm"


class Sidebar(Vertical):
    """Home button, the bank tree, the text generator entry and theme toggle."""

    class HomeRequested(Message):
        pass

    class TextRequested(Message):
        pass

    class ThemeToggled(Message):
        pass

    class TopicChosen(Message):
        def __init__(self, ref: TopicRef) -> None:
            super().__init__()
            self.ref = ref

    def __init__(
        self, bank: QuestionBank, *, dark_mode: bool = False, **kwargs
    ) -> None:
        super().__init__(**kwargs)
        self.bank = bank
        self.dark_mode = dark_mode

    def compose(self) -> ComposeResult:
        yield Button("Trang chủ", id="nav-home", variant="primary")
        yield Label("Tạo đề thi", classes="section")
        yield Tree("Ngân hàng câu hỏi", id="bank-tree")
        yield Button("Tạo từ văn bản", id="nav-text")
        yield Button(theme_label(self.dark_mode), id="theme-toggle")

    def on_mount(self) -> None:
        self.populate_tree(self.query_one("#bank-tree", Tree))

    def populate_tree(self, tree: Tree) -> None:
        tree.root.expand()
        for grade in self.bank:
            grade_node = tree.root.add(Text(grade.name))
            for chapter in grade.chapters:
                chapter_node = grade_node.add(Text(chapter.name))
                for topic in chapter.topics:
                    chapter_node.add_leaf(
                        Text(topic.name),
                        data=TopicRef(grade.id, chapter.id, topic.id),
                    )

    def set_dark_mode(self, dark_mode: bool) -> None:
        self.dark_mode = dark_mode
        try:
            button = self.query_one("#theme-toggle", Button)
        except NoMatches:
            return
        button.label = theme_label(dark_mode)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "nav-home":
            self.post_message(self.HomeRequested())
        elif bid == "nav-text":
            self.post_message(self.TextRequested())
        elif bid == "theme-toggle":
            self.post_message(self.ThemeToggled())
        else:
            return
        event.stop()

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        ref = event.node.data
        if isinstance(ref, TopicRef):
            event.stop()
            self.post_message(self.TopicChosen(ref))


class HomeView(Vertical):
    class ModeChosen(Message):
        def __init__(self, view: View) -> None:
            super().__init__()
            self.view = view

    def compose(self) -> ComposeResult:
        yield Static("Trình tạo đề thi Toán AI", classes="heading")
        yield Static(
            "Chọn một phương thức để AI có thể giúp bạn tạo ra một đề thi "
            "toán hoàn chỉnh một cách nhanh chóng.",
            classes="subtitle",
        )
        with Horizontal(classes="modes"):
            yield Button("Tạo từ Ngân hàng câu hỏi", id="mode-bank")
            yield Button("Tạo từ Văn bản", id="mode-text")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        target = {
            "mode-bank": View.BANK_GENERATOR,
            "mode-text": View.TEXT_GENERATOR,
        }.get(event.button.id or "")
        if target is not None:
            event.stop()
            self.post_message(self.ModeChosen(target))


class BackRequested(Message):
    """Posted by the generator views' "Quay lại" button."""


class TextGeneratorView(Vertical):
    class Submitted(Message):
        def __init__(self, params: TextGenerationParams) -> None:
            super().__init__()
            self.params = params

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.form = TextGeneratorForm()
        self.error: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Button("Quay lại", id="back")
        yield Static("Tạo đề từ Văn bản", classes="heading")
        yield Label("Nội dung tài liệu nguồn")
        yield TextArea(self.form.source_text, id="source-text")
        yield Label("", id="form-error")
        with Horizontal(classes="fields"):
            yield Select(
                [(f"Lớp {g}", g) for g in GRADES],
                value=self.form.grade,
                allow_blank=False,
                id="grade",
            )
            yield Select(
                [(t, t) for t in EXAM_TYPES],
                value=self.form.exam_type,
                allow_blank=False,
                id="exam-type",
            )
            yield Input(
                str(self.form.question_count), type="integer", id="question-count"
            )
        yield Button("Tạo đề thi", id="submit", variant="primary")

    def collect_params(self) -> Optional[TextGenerationParams]:
        """Return params, or None after recording the validation message."""
        try:
            params = self.form.to_params()
        except ValidationFailure as exc:
            self.error = exc.message
            return None
        self.error = None
        return params

    def _read_widgets(self) -> None:
        self.form.source_text = self.query_one("#source-text", TextArea).text
        self.form.grade = str(self.query_one("#grade", Select).value)
        self.form.exam_type = str(self.query_one("#exam-type", Select).value)
        self.form.question_count = self.query_one("#question-count", Input).value

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "back":
            event.stop()
            self.post_message(BackRequested())
        elif bid == "submit":
            event.stop()
            self._read_widgets()
            params = self.collect_params()
            self.query_one("#form-error", Label).update(Text(self.error or ""))
            if params is not None:
                self.post_message(self.Submitted(params))


class BankGeneratorView(Vertical):
    class Submitted(Message):
        def __init__(self, params: BankGenerationParams) -> None:
            super().__init__()
            self.params = params

    def __init__(
        self,
        bank: QuestionBank,
        initial: Optional[TopicRef] = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.form = BankSelectionForm.create(bank, initial)
        self.error: Optional[str] = None

    def compose(self) -> ComposeResult:
        form = self.form
        yield Button("Quay lại", id="back")
        yield Static("Tạo đề từ Ngân hàng câu hỏi", classes="heading")
        yield Static(
            "Chọn các câu hỏi mẫu để AI tạo ra các câu hỏi tương tự.",
            classes="subtitle",
        )
        with Horizontal(classes="fields"):
            yield Select(
                [(g.name, g.id) for g in form.bank],
                value=form.grade_id,
                allow_blank=False,
                id="grade",
            )
            yield Select(
                [(c.name, c.id) for c in form.chapters],
                value=form.chapter_id or Select.BLANK,
                allow_blank=not form.chapters,
                disabled=not form.chapters,
                id="chapter",
            )
            yield Select(
                [(t.name, t.id) for t in form.topics],
                value=form.topic_id or Select.BLANK,
                allow_blank=not form.topics,
                disabled=not form.topics,
                id="topic",
            )
        yield Label("Chọn câu hỏi mẫu (chọn một hoặc nhiều)")
        with VerticalScroll(id="samples"):
            if not form.sample_questions:
                yield Static("Không có câu hỏi mẫu cho chuyên đề này.")
            for question in form.sample_questions:
                yield Checkbox(
                    Text(question.text),
                    value=question.id in form.selected,
                    id=self.checkbox_id(question.id),
                )
        yield Label(Text(self.error or ""), id="form-error")
        yield Label("Số câu hỏi tương tự cần tạo")
        yield Input(str(form.question_count), type="integer", id="question-count")
        yield Button(
            "Tạo đề thi",
            id="submit",
            variant="primary",
            disabled=not form.can_submit,
        )

    @staticmethod
    def checkbox_id(question_id: str) -> str:
        return f"{_QUESTION_PREFIX}{question_id}"

    @staticmethod
    def question_id(widget_id: Optional[str]) -> Optional[str]:
        if widget_id and widget_id.startswith(_QUESTION_PREFIX):
            return widget_id[len(_QUESTION_PREFIX) :]
        return None

    def apply_select(self, select_id: str, value: object) -> bool:
        """Apply a cascading select change; True when the form changed."""
        if not isinstance(value, str):
            return False
        form = self.form
        if select_id == "grade" and value != form.grade_id:
            form.set_grade(value)
        elif select_id == "chapter" and value != form.chapter_id:
            form.set_chapter(value)
        elif select_id == "topic" and value != form.topic_id:
            form.set_topic(value)
        else:
            return False
        self.error = None
        return True

    def apply_checkbox(self, widget_id: Optional[str], checked: bool) -> bool:
        qid = self.question_id(widget_id)
        if qid is None or (qid in self.form.selected) == checked:
            return False
        self.form.toggle(qid)
        return True

    def collect_params(self) -> Optional[BankGenerationParams]:
        try:
            params = self.form.to_params()
        except ValidationFailure as exc:
            self.error = exc.message
            return None
        self.error = None
        return params

    def on_select_changed(self, event: Select.Changed) -> None:
        event.stop()
        if self.apply_select(event.select.id or "", event.value):
            self._remember_count()
            self.refresh(recompose=True)

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        if self.apply_checkbox(event.checkbox.id, event.value):
            self.query_one("#submit", Button).disabled = not self.form.can_submit

    def _remember_count(self) -> None:
        try:
            self.form.question_count = self.query_one(
                "#question-count", Input
            ).value
        except NoMatches:
            return

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "back":
            event.stop()
            self.post_message(BackRequested())
        elif bid == "submit":
            event.stop()
            self._remember_count()
            params = self.collect_params()
            self.query_one("#form-error", Label).update(Text(self.error or ""))
            if params is not None:
                self.post_message(self.Submitted(params))


class LoadingView(Vertical):
    def compose(self) -> ComposeResult:
        yield LoadingIndicator()
        yield Static(LOADING_MESSAGE, classes="subtitle")


class ErrorView(Vertical):
    class RetryPressed(Message):
        pass

    def __init__(self, error_message: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.error_message = error_message

    def compose(self) -> ComposeResult:
        yield Static(ERROR_TITLE, classes="heading error")
        yield Static(Text(self.error_message), id="error-message")
        yield Button("Thử lại", id="retry", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "retry":
            event.stop()
            self.post_message(self.RetryPressed())


class ResultView(VerticalScroll):
    """Interactive exam: pick one option per question, submit, see the score."""

    class ExportRequested(Message):
        def __init__(self, kind: str, exam: Exam) -> None:
            super().__init__()
            self.kind = kind
            self.exam = exam

    def __init__(self, exam: Exam, **kwargs) -> None:
        super().__init__(**kwargs)
        self.attempt = ExamAttempt(exam)

    @property
    def exam(self) -> Exam:
        return self.attempt.exam

    def compose(self) -> ComposeResult:
        exam = self.exam
        yield Static(Text(exam.title), classes="heading")
        yield Static(f"Thời gian: {exam.duration} phút", classes="subtitle")
        with Horizontal(classes="exports"):
            yield Button("Tải PDF (Đề gốc)", id="export-exam")
            yield Button("Tải PDF (Lời giải)", id="export-solution")
            yield Button("Tải Word", id="export-word")
        score = self.attempt.score()
        if score is not None:
            with Vertical(id="score-panel"):
                yield Static("Kết quả", classes="section")
                yield Static(score_text(score, len(exam)), id="score")
        for outcome in self.attempt.outcomes():
            with Vertical(classes="question", id=f"question-{outcome.index}"):
                yield Static(self.question_heading(outcome))
                for opt_index in range(len(outcome.question.options)):
                    button = Button(
                        self.option_text(outcome, opt_index),
                        id=self.option_id(outcome.index, opt_index),
                        disabled=self.attempt.submitted,
                    )
                    state = outcome.option_state(opt_index)
                    if state != "plain":
                        button.add_class(state)
                    yield button
                if self.attempt.submitted and outcome.question.explanation:
                    yield Static(
                        Text.assemble(
                            ("Giải thích: ", "bold"),
                            outcome.question.explanation,
                        ),
                        classes="explanation",
                    )
        if not self.attempt.submitted:
            yield Button("Nộp bài", id="submit", variant="primary")

    @staticmethod
    def option_id(question_index: int, option_index: int) -> str:
        return f"opt-{question_index}-{option_index}"

    @staticmethod
    def parse_option_id(widget_id: str) -> Optional[tuple[int, int]]:
        parts = widget_id.split("-")
        if len(parts) != 3 or parts[0] != "opt":
            return None
        try:
            return int(parts[1]), int(parts[2])
        except ValueError:
            return None

    @staticmethod
    def question_heading(outcome: QuestionOutcome) -> Text:
        return Text.assemble(
            (f"Câu {outcome.index + 1}: ", "bold"), outcome.question.text
        )

    @staticmethod
    def option_text(outcome: QuestionOutcome, option_index: int) -> Text:
        label = OPTION_LABELS[option_index]
        return Text.assemble(
            (f"{label}. ", "bold"), outcome.question.options[option_index]
        )

    def option_states(self, question_index: int) -> List[str]:
        outcome = self.attempt.outcome(question_index)
        return [
            outcome.option_state(i) for i in range(len(outcome.question.options))
        ]

    def choose(self, question_index: int, option_index: int) -> bool:
        """Record an answer and restyle that question's buttons."""
        if not self.attempt.select(question_index, option_index):
            return False
        for i, state in enumerate(self.option_states(question_index)):
            try:
                button = self.query_one(
                    f"#{self.option_id(question_index, i)}", Button
                )
            except NoMatches:
                continue
            button.set_class(state == "selected", "selected")
        return True

    def submit(self) -> int:
        score = self.attempt.submit()
        self.refresh(recompose=True)
        return score

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        exports: Dict[str, str] = {
            "export-exam": "exam",
            "export-solution": "solution",
            "export-word": "word",
        }
        if bid in exports:
            event.stop()
            self.post_message(self.ExportRequested(exports[bid], self.exam))
        elif bid == "submit":
            event.stop()
            self.submit()
        else:
            parsed = self.parse_option_id(bid)
            if parsed is not None:
                event.stop()
                self.choose(*parsed)
