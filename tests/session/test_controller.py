from __future__ import annotations

import pytest

from fixtures import OpenAIStub, exam_payload

from exam_studio.exams.bank import load_bank
from exam_studio.exams.client import GenerationClient
from exam_studio.exams.errors import (
    GENERATION_FAILURE_MESSAGE,
    SessionStateError,
)
from exam_studio.exams.params import EXAM_TYPES, TextGenerationParams
from exam_studio.exams.prompts import GenerationRequest
from exam_studio.session.controller import SessionController
from exam_studio.session.forms import BankSelectionForm
from exam_studio.session.state import (
    GenerationFailed,
    GenerationSucceeded,
    SelectMode,
    View,
)

SOURCE = (
    "Phương trình bậc hai $ax^2 + bx + c = 0$ có nghiệm khi "
    "$\\Delta \\ge 0$. "
) * 3


@pytest.fixture
def stub():
    return OpenAIStub()


@pytest.fixture
def seen():
    return []


@pytest.fixture
def controller(stub, seen):
    return SessionController(GenerationClient(stub), listener=seen.append)


def _text_params():
    return TextGenerationParams(
        source_text=SOURCE,
        exam_type=EXAM_TYPES[1],
        question_count=5,
        grade="10",
    )


def test_submit_text_success(controller, stub, seen):
    stub.queue_json(exam_payload(5))
    controller.dispatch(SelectMode(View.TEXT_GENERATOR))

    exam = controller.submit_text(_text_params())

    assert exam is not None and len(exam) == 5
    assert [s.rendered_view for s in seen] == [
        View.TEXT_GENERATOR,
        View.LOADING,
        View.RESULT,
    ]
    assert controller.state.exam is exam
    assert len(stub.calls) == 1


def test_submit_text_failure_shows_fixed_message(controller, stub, seen):
    stub.queue_response("garbage")

    assert controller.submit_text(_text_params()) is None

    assert controller.state.rendered_view is View.ERROR
    assert controller.state.error == GENERATION_FAILURE_MESSAGE
    assert seen[-1] is controller.state


def test_submit_bank_uses_bank_prompt(controller, stub):
    stub.queue_json(exam_payload(2))
    form = BankSelectionForm(bank=load_bank())
    form.toggle("g12c1t1q3")
    form.question_count = "2"

    exam = controller.submit_bank(form.to_params())

    assert exam is not None
    prompt = stub.calls[0]["messages"][1]["content"]
    assert "Hỏi hàm số" in prompt
    assert "Đề ôn tập - Bài 1: Sự đồng biến" in prompt


def test_generate_does_not_touch_state(controller, stub, seen):
    stub.queue_json(exam_payload(1))
    request = GenerationRequest(system_prompt="s", user_prompt="u")

    event = controller.generate(request)

    assert isinstance(event, GenerationSucceeded)
    assert seen == []

    failed = controller.generate(request)
    assert isinstance(failed, GenerationFailed)
    assert failed.message == GENERATION_FAILURE_MESSAGE


def test_begin_twice_raises(controller):
    controller.begin()

    with pytest.raises(SessionStateError):
        controller.begin()
    assert controller.state.loading is True
