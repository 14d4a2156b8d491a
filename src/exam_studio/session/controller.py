"""Single-session controller that drives generation through the reducer."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..exams.client import GenerationClient
from ..exams.errors import GenerationFailure
from ..exams.models import Exam
from ..exams.params import BankGenerationParams, TextGenerationParams
from ..exams.prompts import (
    GenerationRequest,
    build_bank_request,
    build_text_request,
)
from .state import (
    Event,
    GenerationFailed,
    GenerationStarted,
    GenerationSucceeded,
    SessionState,
    reduce,
)

__all__ = ["SessionController", "StateListener"]

StateListener = Callable[[SessionState], None]


class SessionController:
    """Own the current :class:`SessionState` and apply events to it.

    The listener is called after every transition with the new state. Form
    parameters arrive already validated, so an invalid form never reaches
    :meth:`submit_text` or :meth:`submit_bank`.
    """

    def __init__(
        self,
        client: GenerationClient,
        *,
        listener: Optional[StateListener] = None,
        state: Optional[SessionState] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._listener = listener
        self._state = state or SessionState()
        self._logger = logger or logging.getLogger("exam_studio.session")

    @property
    def state(self) -> SessionState:
        return self._state

    def dispatch(self, event: Event) -> SessionState:
        self._state = reduce(self._state, event)
        self._logger.debug(
            "Session transition",
            extra={
                "event": type(event).__name__,
                "view": self._state.rendered_view.value,
            },
        )
        if self._listener is not None:
            self._listener(self._state)
        return self._state

    def begin(self) -> None:
        """Enter the loading state; raises if a generation is in flight."""
        self.dispatch(GenerationStarted())

    def generate(self, request: GenerationRequest) -> Event:
        """Call the client and return the completion event without applying it.

        Safe to call from a worker thread; the caller dispatches the result
        on the thread that owns the state.
        """
        try:
            exam = self._client.generate(request)
        except GenerationFailure as exc:
            return GenerationFailed(exc.message)
        return GenerationSucceeded(exam)

    def run(self, request: GenerationRequest) -> Optional[Exam]:
        """Generate and apply the outcome; call after :meth:`begin`."""
        event = self.generate(request)
        self.dispatch(event)
        if isinstance(event, GenerationSucceeded):
            return event.exam
        return None

    def submit_text(self, params: TextGenerationParams) -> Optional[Exam]:
        request = build_text_request(params)
        self.begin()
        return self.run(request)

    def submit_bank(self, params: BankGenerationParams) -> Optional[Exam]:
        request = build_bank_request(params)
        self.begin()
        return self.run(request)
