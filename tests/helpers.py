"""Test doubles and sample data shared across test modules."""

import json

from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

SAMPLE_CLASSIFICATION = {
    "ai_score": 82,
    "structural_overuse": "high",
    "cliche_phrases": ["In conclusion", "It is worth noting that"],
    "emotional_depth": "missing",
    "format_pattern": "ai_list",
    "analysis": "Uniform paragraphs and stock transitions.",
    "human_touch_examples": [],
    "ai_signals": ["Numbered sections", "Neutral tone throughout"],
}

HUMAN_TEXT = (
    "I burned the toast again. Honestly, the kitchen smelled like a campfire for an hour "
    "and my neighbour knocked to ask whether everything was alright! Nope. "
    "But the coffee was good, so the morning was saved?"
)


def fenced(data: dict) -> str:
    """Wrap a dict the way chat models usually return JSON."""
    return f"Here is my analysis:\n```json\n{json.dumps(data, ensure_ascii=False)}\n```"


def text_model(text: str, calls: list | None = None) -> FunctionModel:
    """FunctionModel that always replies with ``text``.

    Args:
        text: Completion to return
        calls: Optional list collecting the messages of each request
    """

    def reply(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        if calls is not None:
            calls.append(messages)
        return ModelResponse(parts=[TextPart(content=text)])

    return FunctionModel(reply)


def failing_model(error: Exception) -> FunctionModel:
    """FunctionModel whose every request raises ``error``."""

    def reply(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise error

    return FunctionModel(reply)
