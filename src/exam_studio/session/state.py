"""Immutable session state and the reducer that replaces it.

Every user-visible transition goes through :func:`reduce`. The state value is
never mutated; each event produces a new :class:`SessionState`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from ..exams.bank import TopicRef
from ..exams.errors import SessionStateError
from ..exams.models import Exam

__all__ = [
    "View",
    "NAVIGATION_VIEWS",
    "SessionState",
    "NavigateHome",
    "SelectMode",
    "SelectBankTopic",
    "GenerationStarted",
    "GenerationSucceeded",
    "GenerationFailed",
    "RetryRequested",
    "ToggleTheme",
    "Event",
    "reduce",
]


class View(str, Enum):
    HOME = "home"
    TEXT_GENERATOR = "text-generator"
    BANK_GENERATOR = "bank-generator"
    LOADING = "loading"
    ERROR = "error"
    RESULT = "result"


NAVIGATION_VIEWS = (View.HOME, View.TEXT_GENERATOR, View.BANK_GENERATOR)


@dataclass(frozen=True)
class SessionState:
    view: View = View.HOME
    loading: bool = False
    error: Optional[str] = None
    exam: Optional[Exam] = None
    bank_selection: Optional[TopicRef] = None
    bank_form_key: int = 0
    dark_mode: bool = False

    @property
    def rendered_view(self) -> View:
        """Loading wins over Error, Error over Result, Result over navigation."""
        if self.loading:
            return View.LOADING
        if self.error is not None:
            return View.ERROR
        if self.exam is not None:
            return View.RESULT
        return self.view


@dataclass(frozen=True)
class NavigateHome:
    pass


@dataclass(frozen=True)
class SelectMode:
    view: View


@dataclass(frozen=True)
class SelectBankTopic:
    grade_id: str
    chapter_id: str
    topic_id: str


@dataclass(frozen=True)
class GenerationStarted:
    pass


@dataclass(frozen=True)
class GenerationSucceeded:
    exam: Exam


@dataclass(frozen=True)
class GenerationFailed:
    message: str


@dataclass(frozen=True)
class RetryRequested:
    pass


@dataclass(frozen=True)
class ToggleTheme:
    pass


Event = Union[
    NavigateHome,
    SelectMode,
    SelectBankTopic,
    GenerationStarted,
    GenerationSucceeded,
    GenerationFailed,
    RetryRequested,
    ToggleTheme,
]


def _reset(state: SessionState, view: View) -> SessionState:
    return replace(
        state,
        view=view,
        loading=False,
        error=None,
        exam=None,
        bank_selection=None,
    )


def reduce(state: SessionState, event: Event) -> SessionState:
    if isinstance(event, NavigateHome):
        return _reset(state, View.HOME)
    if isinstance(event, SelectMode):
        if event.view not in NAVIGATION_VIEWS:
            raise SessionStateError(
                f"{event.view.value} is not a navigation view"
            )
        return _reset(state, event.view)
    if isinstance(event, SelectBankTopic):
        selected = _reset(state, View.BANK_GENERATOR)
        return replace(
            selected,
            bank_selection=TopicRef(
                event.grade_id, event.chapter_id, event.topic_id
            ),
            bank_form_key=state.bank_form_key + 1,
        )
    if isinstance(event, GenerationStarted):
        if state.loading:
            raise SessionStateError("a generation is already in flight")
        return replace(state, loading=True, error=None, exam=None)
    if isinstance(event, GenerationSucceeded):
        if not state.loading:
            raise SessionStateError("no generation is in flight")
        return replace(state, loading=False, error=None, exam=event.exam)
    if isinstance(event, GenerationFailed):
        if not state.loading:
            raise SessionStateError("no generation is in flight")
        return replace(state, loading=False, error=event.message, exam=None)
    if isinstance(event, RetryRequested):
        return _reset(state, View.HOME)
    if isinstance(event, ToggleTheme):
        return replace(state, dark_mode=not state.dark_mode)
    raise SessionStateError(f"Unknown event: {event!r}")
