"""Chat-completion client that turns a generation request into an Exam."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from ..core.ai import load_client
from .errors import GenerationFailure
from .models import Exam, ExamFormatError
from .prompts import GenerationRequest

__all__ = ["GenerationClient", "strip_code_fence"]

_FENCE_RE = re.compile(
    r"^```(?:[A-Za-z][\w+-]*)?[ \t]*\n?(.*?)\n?```$", re.DOTALL
)


def strip_code_fence(content: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = content.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


class GenerationClient:
    """Send one request per call; every failure becomes GenerationFailure."""

    def __init__(
        self,
        client: Optional[Any] = None,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.8,
        max_tokens: int = 8192,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_base = api_base
        self._timeout = timeout
        self._logger = logger or logging.getLogger("exam_studio.generation")

    def _resolve_client(self) -> Any:
        if self._client is None:
            self._client = load_client(
                api_base=self._api_base, timeout=self._timeout
            )
        return self._client

    def _complete(self, request: GenerationRequest) -> str:
        client = self._resolve_client()
        resp = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format=request.response_format(),
        )
        content = resp.choices[0].message.content
        if not isinstance(content, str):
            raise ExamFormatError("response carried no text content")
        return content

    def generate(self, request: GenerationRequest) -> Exam:
        self._logger.info(
            "Requesting exam",
            extra={
                "source": request.source,
                "question_count": request.question_count,
                "model": self.model,
            },
        )
        try:
            content = self._complete(request)
            payload = json.loads(strip_code_fence(content))
            exam = Exam.from_payload(payload)
        except Exception as exc:
            self._logger.exception(
                "Exam generation failed",
                extra={"source": request.source, "model": self.model},
            )
            raise GenerationFailure() from exc
        self._logger.info(
            "Exam generated",
            extra={
                "source": request.source,
                "questions": len(exam),
                "requested": request.question_count,
            },
        )
        return exam
