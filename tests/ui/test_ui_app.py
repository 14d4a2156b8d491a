from __future__ import annotations

import pytest

from fixtures import OpenAIStub

from exam_studio.core.config import default_config
from exam_studio.core.workspace import ensure_workspace
from exam_studio.exams.client import GenerationClient
from exam_studio.exams.errors import EXPORT_FAILURE_MESSAGE, ExportFailure
from exam_studio.exams.prompts import GenerationRequest
from exam_studio.export.exporter import ExamExporter
from exam_studio.session.state import (
    GenerationFailed,
    GenerationSucceeded,
    NavigateHome,
    SelectBankTopic,
    SelectMode,
    SessionState,
    ToggleTheme,
    View,
)
from exam_studio.ui import app as app_mod
from exam_studio.ui import views


@pytest.fixture
def exam_app(tmp_path):
    client = GenerationClient(OpenAIStub())
    exporter = ExamExporter(tmp_path / "exports")
    return app_mod.ExamStudioApp(client, exporter)


@pytest.fixture
def started(exam_app, monkeypatch):
    tokens = []
    monkeypatch.setattr(
        exam_app,
        "_run_generation",
        lambda request, token: tokens.append(token),
    )
    return tokens


REQUEST = GenerationRequest(system_prompt="s", user_prompt="u")


def test_theme_name():
    assert app_mod.theme_name(True) == "textual-dark"
    assert app_mod.theme_name(False) == "textual-light"


def test_view_signature_ignores_theme(sample_exam):
    state = SessionState(exam=sample_exam)
    toggled = SessionState(exam=sample_exam, dark_mode=True)

    assert app_mod.view_signature(state) == app_mod.view_signature(toggled)
    assert app_mod.view_signature(state) != app_mod.view_signature(
        SessionState()
    )


@pytest.mark.parametrize(
    "state, expected",
    [
        (SessionState(), views.HomeView),
        (SessionState(view=View.TEXT_GENERATOR), views.TextGeneratorView),
        (SessionState(view=View.BANK_GENERATOR), views.BankGeneratorView),
        (SessionState(loading=True), views.LoadingView),
        (SessionState(error="boom"), views.ErrorView),
    ],
)
def test_build_view_follows_rendered_view(exam_app, state, expected):
    assert type(exam_app.build_view(state)) is expected


def test_build_view_result(exam_app, sample_exam):
    view = exam_app.build_view(SessionState(exam=sample_exam))

    assert isinstance(view, views.ResultView)
    assert view.exam is sample_exam


def test_build_view_passes_bank_selection(exam_app):
    state = SessionState(
        view=View.BANK_GENERATOR,
        bank_selection=None,
    )
    chosen = exam_app.controller.dispatch(
        SelectBankTopic("grade-11", "g11-c1", "g11-c1-t1")
    )

    assert exam_app.build_view(state).form.grade_id == "grade-12"
    assert exam_app.build_view(chosen).form.grade_id == "grade-11"


def test_events_update_state_without_running(exam_app):
    exam_app.apply_event(SelectMode(View.TEXT_GENERATOR))
    exam_app.apply_event(ToggleTheme())

    state = exam_app.controller.state
    assert state.rendered_view is View.TEXT_GENERATOR
    assert state.dark_mode is True


def test_start_generation_rejects_concurrent_requests(exam_app, started):
    assert exam_app.start_generation(REQUEST) is True
    assert exam_app.start_generation(REQUEST) is False

    assert started == [1]
    assert exam_app.controller.state.rendered_view is View.LOADING


def test_finish_generation_applies_current_result(
    exam_app, started, sample_exam
):
    exam_app.start_generation(REQUEST)

    applied = exam_app.finish_generation(
        GenerationSucceeded(sample_exam), started[-1]
    )

    assert applied is True
    assert exam_app.controller.state.rendered_view is View.RESULT


def test_finish_generation_discards_stale_results(
    exam_app, started, sample_exam
):
    exam_app.start_generation(REQUEST)
    first = started[-1]
    exam_app.apply_event(NavigateHome())
    exam_app.start_generation(REQUEST)

    assert exam_app.finish_generation(GenerationFailed("old"), first) is False
    assert exam_app.controller.state.loading is True

    exam_app.apply_event(NavigateHome())
    assert (
        exam_app.finish_generation(GenerationSucceeded(sample_exam), started[-1])
        is False
    )
    assert exam_app.controller.state.rendered_view is View.HOME


def test_export_action_maps_kinds(exam_app):
    for kind in views.EXPORT_KINDS:
        assert callable(exam_app.export_action(kind))
    assert exam_app.export_action("word") == exam_app.exporter.export_word
    with pytest.raises(KeyError):
        exam_app.export_action("pptx")


def test_build_app_uses_config(tmp_path):
    layout = ensure_workspace(path=tmp_path / "ws")

    built = app_mod.build_app(default_config(), layout)

    assert built.exporter.output_dir == layout.path_for("exports")
    assert built.exporter.page.paper_size == "a4"
    assert built.controller.state == SessionState()


def _show_result(exam_app, started, exam):
    exam_app.start_generation(REQUEST)
    exam_app.finish_generation(GenerationSucceeded(exam), started[-1])
    return exam_app.build_view(exam_app.controller.state)


def test_failed_export_notifies_once_and_keeps_result(
    exam_app, started, sample_exam, monkeypatch
):
    view = _show_result(exam_app, started, sample_exam)
    view.choose(0, 0)

    def broken(exam):
        raise ExportFailure()

    monkeypatch.setattr(exam_app.exporter, "export_solution_pdf", broken)
    notes = []

    path = exam_app.export_now(
        "solution",
        sample_exam,
        notify=lambda message, **kwargs: notes.append((message, kwargs)),
    )

    assert path is None
    assert notes == [
        (EXPORT_FAILURE_MESSAGE, {"title": "Xuất file", "severity": "error"})
    ]
    state = exam_app.controller.state
    assert state.rendered_view is View.RESULT
    assert state.exam is sample_exam
    assert view.attempt.answers == (0, None, None)


def test_export_success_notifies_saved_path(
    exam_app, sample_exam, monkeypatch
):
    notes = []
    monkeypatch.setattr(
        exam_app,
        "notify",
        lambda message, **kwargs: notes.append((message, kwargs)),
    )

    path = exam_app.export_now("word", sample_exam)

    assert path is not None and path.exists()
    assert notes == [(f"Đã lưu {path}", {"title": "Xuất file"})]


def test_export_request_is_handed_to_worker(
    exam_app, sample_exam, monkeypatch
):
    calls = []
    monkeypatch.setattr(
        exam_app, "_run_export", lambda kind, exam: calls.append((kind, exam))
    )

    exam_app.on_result_view_export_requested(
        views.ResultView.ExportRequested("word", sample_exam)
    )

    assert calls == [("word", sample_exam)]
