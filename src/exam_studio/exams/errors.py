"""Error taxonomy shared by generation, session and export code."""

from __future__ import annotations

__all__ = [
    "ExamStudioError",
    "ValidationFailure",
    "GenerationFailure",
    "ExportFailure",
    "SessionStateError",
    "GENERATION_FAILURE_MESSAGE",
    "EXPORT_FAILURE_MESSAGE",
]


GENERATION_FAILURE_MESSAGE = (
    "Failed to generate exam. The AI model might be unavailable or the "
    "request was invalid. Check the source material for clarity and try again."
)
EXPORT_FAILURE_MESSAGE = "Không thể tạo file. Vui lòng thử lại."


class ExamStudioError(RuntimeError):
    """Base class for errors presented to the user."""


class ValidationFailure(ExamStudioError):
    """A form value was rejected before any request was made."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class GenerationFailure(ExamStudioError):
    """The AI collaborator failed or returned an unusable exam."""

    def __init__(self, message: str = GENERATION_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class ExportFailure(ExamStudioError):
    """A PDF or Word document could not be produced."""

    def __init__(self, message: str = EXPORT_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class SessionStateError(ExamStudioError):
    """An event was applied in a state that does not accept it."""
