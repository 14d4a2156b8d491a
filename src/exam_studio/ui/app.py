"""Textual application wiring the session controller to the views."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from textual import work
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widget import Widget

from ..core.config import AppConfig
from ..core.workspace import WorkspaceLayout
from ..exams.bank import QuestionBank, load_bank
from ..exams.client import GenerationClient
from ..exams.errors import ExportFailure, SessionStateError
from ..exams.models import Exam
from ..exams.prompts import (
    GenerationRequest,
    build_bank_request,
    build_text_request,
)
from ..export.exporter import ExamExporter
from ..export.pdf import PageSetup
from ..session.controller import SessionController
from ..session.state import (
    Event,
    NavigateHome,
    RetryRequested,
    SelectBankTopic,
    SelectMode,
    SessionState,
    ToggleTheme,
    View,
)
from .views import (
    BackRequested,
    BankGeneratorView,
    ErrorView,
    HomeView,
    LoadingView,
    ResultView,
    Sidebar,
    TextGeneratorView,
)

__all__ = ["ExamStudioApp", "build_app", "view_signature", "theme_name"]

DARK_THEME = "textual-dark"
LIGHT_THEME = "textual-light"


def theme_name(dark_mode: bool) -> str:
    return DARK_THEME if dark_mode else LIGHT_THEME


def view_signature(state: SessionState) -> Tuple[Hashable, ...]:
    """Identity of what the content pane shows; theme changes are excluded."""
    return (
        state.rendered_view,
        state.bank_form_key,
        id(state.exam) if state.exam is not None else None,
        state.error,
    )


class ExamStudioApp(App):
    CSS_PATH = "app.tcss"
    TITLE = "Trình tạo đề thi Toán AI"
    BINDINGS = [
        ("ctrl+t", "toggle_theme", "Theme"),
        ("ctrl+g", "go_home", "Home"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        client: GenerationClient,
        exporter: ExamExporter,
        *,
        bank: Optional[QuestionBank] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__()
        self.bank = bank or load_bank()
        self.exporter = exporter
        self.log_sink = logger or logging.getLogger("exam_studio.ui")
        self.controller = SessionController(
            client, listener=self._on_state, logger=self.log_sink
        )
        self._signature: Optional[Tuple[Hashable, ...]] = None
        self._generation_token = 0

    # Pure helpers (testable without running the app)
    def build_view(self, state: SessionState) -> Widget:
        view = state.rendered_view
        if view is View.LOADING:
            return LoadingView()
        if view is View.ERROR:
            return ErrorView(state.error or "")
        if view is View.RESULT and state.exam is not None:
            return ResultView(state.exam)
        if view is View.TEXT_GENERATOR:
            return TextGeneratorView()
        if view is View.BANK_GENERATOR:
            return BankGeneratorView(self.bank, state.bank_selection)
        return HomeView()

    def export_action(self, kind: str) -> Callable[[Exam], Path]:
        actions: Dict[str, Callable[[Exam], Path]] = {
            "exam": self.exporter.export_exam_pdf,
            "solution": self.exporter.export_solution_pdf,
            "word": self.exporter.export_word,
        }
        return actions[kind]

    def compose(self) -> ComposeResult:
        state = self.controller.state
        with Horizontal(id="layout"):
            yield Sidebar(self.bank, dark_mode=state.dark_mode, id="sidebar")
            with Container(id="content"):
                yield self.build_view(state)
        self._signature = view_signature(state)

    def on_mount(self) -> None:
        self.theme = theme_name(self.controller.state.dark_mode)

    def _on_state(self, state: SessionState) -> None:
        if not self.is_running:
            return
        self.theme = theme_name(state.dark_mode)
        try:
            self.query_one("#sidebar", Sidebar).set_dark_mode(state.dark_mode)
        except NoMatches:
            pass
        signature = view_signature(state)
        if signature == self._signature:
            return
        self._signature = signature
        try:
            content = self.query_one("#content", Container)
        except NoMatches:
            return
        content.remove_children()
        content.mount(self.build_view(state))

    def apply_event(self, event: Event) -> None:
        self.controller.dispatch(event)

    # Navigation
    def action_toggle_theme(self) -> None:
        self.apply_event(ToggleTheme())

    def action_go_home(self) -> None:
        self.apply_event(NavigateHome())

    def on_sidebar_home_requested(self, message: Sidebar.HomeRequested) -> None:
        self.apply_event(NavigateHome())

    def on_sidebar_text_requested(self, message: Sidebar.TextRequested) -> None:
        self.apply_event(SelectMode(View.TEXT_GENERATOR))

    def on_sidebar_theme_toggled(self, message: Sidebar.ThemeToggled) -> None:
        self.apply_event(ToggleTheme())

    def on_sidebar_topic_chosen(self, message: Sidebar.TopicChosen) -> None:
        ref = message.ref
        self.apply_event(
            SelectBankTopic(ref.grade_id, ref.chapter_id, ref.topic_id)
        )

    def on_home_view_mode_chosen(self, message: HomeView.ModeChosen) -> None:
        self.apply_event(SelectMode(message.view))

    def on_back_requested(self, message: BackRequested) -> None:
        self.apply_event(NavigateHome())

    def on_error_view_retry_pressed(
        self, message: ErrorView.RetryPressed
    ) -> None:
        self.apply_event(RetryRequested())

    # Generation
    def on_text_generator_view_submitted(
        self, message: TextGeneratorView.Submitted
    ) -> None:
        self.start_generation(build_text_request(message.params))

    def on_bank_generator_view_submitted(
        self, message: BankGeneratorView.Submitted
    ) -> None:
        self.start_generation(build_bank_request(message.params))

    def start_generation(self, request: GenerationRequest) -> bool:
        try:
            self.controller.begin()
        except SessionStateError:
            self.log_sink.warning("Generation already in flight")
            return False
        self._generation_token += 1
        self._run_generation(request, self._generation_token)
        return True

    @work(thread=True, exclusive=True, group="generation")
    def _run_generation(self, request: GenerationRequest, token: int) -> None:
        event = self.controller.generate(request)
        self.call_from_thread(self.finish_generation, event, token)

    def finish_generation(self, event: Event, token: int) -> bool:
        """Apply a completion unless the user has moved on since it started."""
        state = self.controller.state
        if token != self._generation_token or not state.loading:
            self.log_sink.info(
                "Discarding stale generation result",
                extra={"event": type(event).__name__},
            )
            return False
        self.apply_event(event)
        return True

    # Export
    def on_result_view_export_requested(
        self, message: ResultView.ExportRequested
    ) -> None:
        self._run_export(message.kind, message.exam)

    @work(thread=True, group="export")
    def _run_export(self, kind: str, exam: Exam) -> None:
        self.export_now(kind, exam, notify=self._notify_from_thread)

    def _notify_from_thread(self, message: str, **kwargs: Any) -> None:
        self.call_from_thread(self.notify, message, **kwargs)

    def export_now(
        self,
        kind: str,
        exam: Exam,
        *,
        notify: Optional[Callable[..., None]] = None,
    ) -> Optional[Path]:
        """Run one export; a failure becomes a single error notification."""
        send = notify or self.notify
        try:
            path = self.export_action(kind)(exam)
        except ExportFailure as exc:
            send(exc.message, title="Xuất file", severity="error")
            return None
        send(f"Đã lưu {path}", title="Xuất file")
        return path


def build_app(
    config: AppConfig,
    layout: WorkspaceLayout,
    *,
    logger: Optional[logging.Logger] = None,
) -> ExamStudioApp:
    """Assemble the app from config; the OpenAI client is created lazily."""
    log = logger or logging.getLogger("exam_studio")
    client = GenerationClient(
        model=config.ai.model,
        temperature=config.ai.temperature,
        max_tokens=config.ai.max_output_tokens,
        api_base=config.ai.api_base,
        timeout=float(config.ai.request_timeout_seconds),
        logger=log.getChild("generation"),
    )
    exporter = ExamExporter(
        config.exports_dir(layout),
        page=PageSetup(
            paper_size=config.export.paper_size, margin=config.export.margin
        ),
        logger=log.getChild("export"),
    )
    return ExamStudioApp(client, exporter, logger=log.getChild("ui"))
