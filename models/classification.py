"""Classification result model for AI-content detection.

This module defines the four qualitative dimensions the classifier model
reports and the ClassificationResult that carries them.

Dimension Design:
    STRUCTURAL OVERUSE (low / medium / high):
        How uniform the paragraphing is. Models tend to emit paragraphs of
        near-identical length under tidy headings.

    EMOTIONAL DEPTH (missing / weak / rich):
        Presence of a personal viewpoint and idiosyncratic wording.
        Rich depth is a human signal.

    FORMAT PATTERN (ai_list / human_prose / mixed):
        Numbered lists and symmetric sections versus flowing narrative.

    The model is asked for JSON but may answer with English values, the
    Chinese labels used by the zh prompt, or something else entirely. Every
    raw value goes through an alias table and falls back to a neutral default
    (medium / weak / mixed) instead of failing validation.
"""

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class StructuralOveruse(str, Enum):
    """How strongly the text leans on rigid, evenly sized structure."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmotionalDepth(str, Enum):
    """How much personal voice and subjective stance the text carries."""

    MISSING = "missing"
    WEAK = "weak"
    RICH = "rich"


class FormatPattern(str, Enum):
    """Dominant layout of the text."""

    AI_LIST = "ai_list"          # Numbered lists, symmetric headings
    HUMAN_PROSE = "human_prose"  # Narrative paragraphs, irregular rhythm
    MIXED = "mixed"


DEFAULT_STRUCTURAL_OVERUSE = StructuralOveruse.MEDIUM
DEFAULT_EMOTIONAL_DEPTH = EmotionalDepth.WEAK
DEFAULT_FORMAT_PATTERN = FormatPattern.MIXED

# Score reported when the completion could not be parsed at all
UNCERTAIN_AI_SCORE = 50


# Map label strings seen in model output to supported values.
# Keys are lower-cased with spaces and dashes folded to underscores.
_STRUCTURAL_ALIASES: dict[str, StructuralOveruse] = {
    "低": StructuralOveruse.LOW,
    "中": StructuralOveruse.MEDIUM,
    "高": StructuralOveruse.HIGH,
    "较低": StructuralOveruse.LOW,
    "中等": StructuralOveruse.MEDIUM,
    "较高": StructuralOveruse.HIGH,
    "moderate": StructuralOveruse.MEDIUM,
    "med": StructuralOveruse.MEDIUM,
    "mid": StructuralOveruse.MEDIUM,
}

_EMOTIONAL_ALIASES: dict[str, EmotionalDepth] = {
    "缺失": EmotionalDepth.MISSING,
    "较弱": EmotionalDepth.WEAK,
    "丰富": EmotionalDepth.RICH,
    "弱": EmotionalDepth.WEAK,
    "无": EmotionalDepth.MISSING,
    "none": EmotionalDepth.MISSING,
    "absent": EmotionalDepth.MISSING,
    "low": EmotionalDepth.WEAK,
    "high": EmotionalDepth.RICH,
    "strong": EmotionalDepth.RICH,
}

_FORMAT_ALIASES: dict[str, FormatPattern] = {
    "ai型列表": FormatPattern.AI_LIST,
    "人类散文": FormatPattern.HUMAN_PROSE,
    "混合": FormatPattern.MIXED,
    "list": FormatPattern.AI_LIST,
    "ai": FormatPattern.AI_LIST,
    "prose": FormatPattern.HUMAN_PROSE,
    "human": FormatPattern.HUMAN_PROSE,
}


def _normalize_label(value: Any, enum_cls: type[Enum], aliases: dict, default: Enum) -> Enum:
    """Resolve a raw label into ``enum_cls`` via value, alias table, or default."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    raw = str(value).strip().lower()
    if not raw:
        return default
    normalized = raw.replace(" ", "_").replace("-", "_")
    try:
        return enum_cls(normalized)
    except ValueError:
        mapped = aliases.get(normalized)
        if mapped is not None:
            return mapped
        logger.warning(
            "Unknown %s label; defaulting to %s | value=%s",
            enum_cls.__name__, default.value, value,
        )
        return default


def normalize_structural_overuse(value: Any) -> StructuralOveruse:
    return _normalize_label(value, StructuralOveruse, _STRUCTURAL_ALIASES, DEFAULT_STRUCTURAL_OVERUSE)


def normalize_emotional_depth(value: Any) -> EmotionalDepth:
    return _normalize_label(value, EmotionalDepth, _EMOTIONAL_ALIASES, DEFAULT_EMOTIONAL_DEPTH)


def normalize_format_pattern(value: Any) -> FormatPattern:
    return _normalize_label(value, FormatPattern, _FORMAT_ALIASES, DEFAULT_FORMAT_PATTERN)


def normalize_ai_score(value: Any) -> int | None:
    """Coerce a raw score into an int within [0, 100].

    Accepts ints, floats and numeric strings (an optional trailing '%' is
    ignored). Anything else yields None: a missing score stays visibly
    missing rather than being invented.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return min(100, max(0, value))
    if isinstance(value, str):
        text = value.strip().rstrip("%").strip()
        try:
            return min(100, max(0, int(text)))
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    score = int(round(value))
    return min(100, max(0, score))


def normalize_phrases(value: Any) -> list[str]:
    """Coerce a raw list field into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    phrases = []
    for item in value:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            phrases.append(text)
    return phrases


class ClassificationResult(BaseModel):
    """Normalized output of the classifier model.

    Attributes:
        ai_score: Likelihood (0-100) that the text is machine-generated.
            None when the model reply carried no usable score.
        structural_overuse: Rigidity of structure
        cliche_phrases: Stock phrases and filler transitions found in the text
        emotional_depth: Strength of personal voice
        format_pattern: Dominant layout
        analysis: Short overall explanation from the model
        human_touch_examples: Human signals the model noticed
        ai_signals: Machine signals the model noticed

    Example:
        >>> result = ClassificationResult.model_validate({"ai_score": "82", "emotional_depth": "缺失"})
        >>> result.ai_score, result.emotional_depth
        (82, <EmotionalDepth.MISSING: 'missing'>)
    """

    model_config = ConfigDict(frozen=True)

    ai_score: int | None = Field(default=None, ge=0, le=100, description="AI likelihood (0-100)")
    structural_overuse: StructuralOveruse = Field(default=DEFAULT_STRUCTURAL_OVERUSE)
    cliche_phrases: list[str] = Field(default_factory=list)
    emotional_depth: EmotionalDepth = Field(default=DEFAULT_EMOTIONAL_DEPTH)
    format_pattern: FormatPattern = Field(default=DEFAULT_FORMAT_PATTERN)
    analysis: str = Field(default="", description="Overall analysis in one or two sentences")
    human_touch_examples: list[str] = Field(default_factory=list)
    ai_signals: list[str] = Field(default_factory=list)

    @field_validator("ai_score", mode="before")
    @classmethod
    def _normalize_score(cls, value):
        return normalize_ai_score(value)

    @field_validator("structural_overuse", mode="before")
    @classmethod
    def _normalize_structural(cls, value):
        return normalize_structural_overuse(value)

    @field_validator("emotional_depth", mode="before")
    @classmethod
    def _normalize_emotional(cls, value):
        return normalize_emotional_depth(value)

    @field_validator("format_pattern", mode="before")
    @classmethod
    def _normalize_format(cls, value):
        return normalize_format_pattern(value)

    @field_validator("cliche_phrases", "human_touch_examples", "ai_signals", mode="before")
    @classmethod
    def _normalize_lists(cls, value):
        return normalize_phrases(value)

    @field_validator("analysis", mode="before")
    @classmethod
    def _normalize_analysis(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @classmethod
    def fallback(cls, raw_text: str) -> "ClassificationResult":
        """Create the best-effort result for a completion that held no JSON.

        The score sits at the uncertain midpoint and the model's raw reply
        is kept verbatim as the analysis text.

        Args:
            raw_text: The unparsed completion

        Returns:
            ClassificationResult with neutral defaults
        """
        return cls(
            ai_score=UNCERTAIN_AI_SCORE,
            structural_overuse=DEFAULT_STRUCTURAL_OVERUSE,
            emotional_depth=DEFAULT_EMOTIONAL_DEPTH,
            format_pattern=DEFAULT_FORMAT_PATTERN,
            analysis=raw_text,
        )

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        score = "?" if self.ai_score is None else str(self.ai_score)
        return (
            f"Classification(ai_score={score}, structure={self.structural_overuse.value}, "
            f"emotion={self.emotional_depth.value}, format={self.format_pattern.value})"
        )
