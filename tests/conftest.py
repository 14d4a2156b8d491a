from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fixtures import (  # noqa: E402
    CSSStub,
    HTMLStub,
    OpenAIStub,
    OpenAIStubFactory,
    exam_payload,
)

from exam_studio.core import ai  # noqa: E402
from exam_studio.exams.models import Exam  # noqa: E402
from exam_studio.export import pdf  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("EXAM_STUDIO_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setattr(ai, "load_dotenv", lambda *a, **k: False)


@pytest.fixture
def openai_factory(monkeypatch: pytest.MonkeyPatch) -> OpenAIStubFactory:
    """Replace ``OpenAI`` so ``load_client`` returns recorded stubs."""

    factory = OpenAIStubFactory()
    monkeypatch.setattr(ai, "OpenAI", factory)
    return factory


@pytest.fixture
def openai_stub() -> OpenAIStub:
    return OpenAIStub()


@pytest.fixture
def html_stub(monkeypatch: pytest.MonkeyPatch) -> Iterator[type]:
    """Route PDF rendering through ``HTMLStub`` and clear its call log."""

    HTMLStub.pop_calls()
    monkeypatch.setattr(pdf, "_load_weasyprint", lambda: (HTMLStub, CSSStub))
    yield HTMLStub
    HTMLStub.pop_calls()


@pytest.fixture
def payload() -> Dict[str, Any]:
    return exam_payload(3)


@pytest.fixture
def sample_exam(payload: Dict[str, Any]) -> Exam:
    return Exam.from_payload(payload)
