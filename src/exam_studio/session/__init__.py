"""Session state, the generation controller, forms and exam attempts."""

from __future__ import annotations

from .attempt import AttemptSummary, ExamAttempt, QuestionOutcome
from .controller import SessionController
from .forms import BankSelectionForm, TextGeneratorForm
from .state import (
    GenerationFailed,
    GenerationStarted,
    GenerationSucceeded,
    NavigateHome,
    RetryRequested,
    SelectBankTopic,
    SelectMode,
    SessionState,
    ToggleTheme,
    View,
    reduce,
)

__all__ = [
    "AttemptSummary",
    "ExamAttempt",
    "QuestionOutcome",
    "SessionController",
    "BankSelectionForm",
    "TextGeneratorForm",
    "GenerationFailed",
    "GenerationStarted",
    "GenerationSucceeded",
    "NavigateHome",
    "RetryRequested",
    "SelectBankTopic",
    "SelectMode",
    "SessionState",
    "ToggleTheme",
    "View",
    "reduce",
]
