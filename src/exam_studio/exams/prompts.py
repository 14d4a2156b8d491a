"""Prompt construction for exam generation.

Everything here is pure: the functions only assemble strings and the response
schema handed to the chat completion call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .params import BankGenerationParams, TextGenerationParams

__all__ = [
    "EXAM_SCHEMA",
    "SCHEMA_NAME",
    "SYSTEM_PROMPT",
    "GenerationRequest",
    "build_text_request",
    "build_bank_request",
    "default_bank_title",
]

SCHEMA_NAME = "math_exam"
SYSTEM_PROMPT = (
    "You are an AI assistant specialized in creating high school math exams "
    "in Vietnamese. You always answer with a single JSON object."
)

EXAM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": (
                "A suitable title for the exam in Vietnamese, based on the "
                "exam type and grade. For example: 'Đề kiểm tra 15 phút - "
                "Đại số 10' or 'Đề thi học kỳ 1 - Môn Toán Lớp 12'."
            ),
        },
        "duration": {
            "type": "integer",
            "description": "The duration of the exam in minutes. E.g., 15, 45, 90.",
        },
        "questions": {
            "type": "array",
            "description": "An array of multiple-choice questions.",
            "items": {
                "type": "object",
                "properties": {
                    "questionText": {
                        "type": "string",
                        "description": (
                            "The full text of the question, including any "
                            "mathematical formulas in LaTeX format if "
                            "necessary (e.g., `$\\sqrt{x^2+1}$`)."
                        ),
                    },
                    "options": {
                        "type": "array",
                        "description": (
                            "An array of 4 strings, representing the possible "
                            "answers (A, B, C, D)."
                        ),
                        "items": {"type": "string"},
                        "minItems": 4,
                        "maxItems": 4,
                    },
                    "correctAnswerIndex": {
                        "type": "integer",
                        "description": (
                            "The 0-based index of the correct answer in the "
                            "'options' array."
                        ),
                    },
                    "explanation": {
                        "type": "string",
                        "description": (
                            "A detailed step-by-step explanation for how to "
                            "arrive at the correct answer."
                        ),
                    },
                },
                "required": [
                    "questionText",
                    "options",
                    "correctAnswerIndex",
                    "explanation",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": ["title", "duration", "questions"],
    "additionalProperties": False,
}


@dataclass(frozen=True)
class GenerationRequest:
    system_prompt: str
    user_prompt: str
    schema: Dict[str, Any] = field(default_factory=lambda: EXAM_SCHEMA)
    schema_name: str = SCHEMA_NAME
    source: str = "text"
    question_count: int = 0

    def response_format(self) -> Dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.schema_name,
                "schema": self.schema,
                "strict": True,
            },
        }


def default_bank_title(topic: str) -> str:
    return f"Đề ôn tập - {topic}"


def build_text_request(params: TextGenerationParams) -> GenerationRequest:
    source_text = params.source_text.strip()
    count = params.question_count
    user_prompt = (
        "Based on the following high school math learning materials, please "
        "create a practice exam.\n\n"
        "**Exam Specifications:**\n"
        f"- **Grade Level:** Toán {params.grade}\n"
        f"- **Type:** {params.exam_type}\n"
        f"- **Number of Questions:** {count}\n"
        "- **Language:** Vietnamese\n\n"
        "**Learning Materials:**\n"
        "---\n"
        f"{source_text}\n"
        "---\n\n"
        f"Generate {count} multiple-choice questions that are relevant to the "
        "provided materials, grade level, and the specified exam type.\n"
        "Ensure the questions cover a range of difficulties and the whole of "
        "the provided material. For each question, provide 4 options "
        "(A, B, C, D), identify the correct answer, and give a clear "
        "explanation.\n"
        "Format the entire output as a single JSON object that strictly "
        "follows the provided schema.\n"
        "Do not include any text outside of the JSON object."
    )
    return GenerationRequest(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
        source="text",
        question_count=count,
    )


def build_bank_request(params: BankGenerationParams) -> GenerationRequest:
    examples = "\n".join(f"- {q.text}" for q in params.base_questions)
    count = params.question_count
    title = default_bank_title(params.topic)
    user_prompt = (
        "Based on the following example questions from "
        f"Grade {params.grade}, Chapter \"{params.chapter}\", "
        f"Topic \"{params.topic}\", create a new practice exam.\n\n"
        "**Example Questions:**\n"
        "---\n"
        f"{examples}\n"
        "---\n\n"
        "**Exam Specifications:**\n"
        f"- **Number of New Questions to Generate:** {count}\n"
        "- **Topic:** The new questions must be similar in topic, style, and "
        "difficulty to the examples provided.\n"
        "- **Language:** Vietnamese\n\n"
        f"Generate {count} new, unique multiple-choice questions. Do not "
        "simply copy the examples.\n"
        "For each question, provide 4 options (A, B, C, D), identify the "
        "correct answer, and give a clear, step-by-step explanation.\n"
        "Format the entire output as a single JSON object that strictly "
        "follows the provided schema.\n"
        "Do not include any text outside of the JSON object. The title "
        f"should reflect the topic, for example: \"{title}\"."
    )
    return GenerationRequest(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
        source="bank",
        question_count=count,
    )
