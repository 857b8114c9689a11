"""Map classification labels and scores onto display values.

Radar axes:
    Four axes in [0, 1] for a radar chart, each framed so that larger
    means more machine-like, except uniqueness and emotion which are
    framed as individuality (larger means more human).

Severity:
    ai_score buckets shared by the colour and the verdict label, so the
    two can never disagree.

Burstiness level:
    Independent buckets for the burstiness score.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from models.classification import (
    ClassificationResult,
    EmotionalDepth,
    FormatPattern,
    StructuralOveruse,
)

STRUCTURE_AXIS: dict[StructuralOveruse, float] = {
    StructuralOveruse.HIGH: 1.0,
    StructuralOveruse.MEDIUM: 0.6,
    StructuralOveruse.LOW: 0.3,
}

FORMAT_AXIS: dict[FormatPattern, float] = {
    FormatPattern.AI_LIST: 1.0,
    FormatPattern.MIXED: 0.6,
    FormatPattern.HUMAN_PROSE: 0.3,
}

EMOTION_AXIS: dict[EmotionalDepth, float] = {
    EmotionalDepth.MISSING: 0.3,
    EmotionalDepth.WEAK: 0.6,
    EmotionalDepth.RICH: 1.0,
}

# Cliche-count thresholds were picked by eye, not derived from data
MANY_CLICHES = 3
CLICHE_DENSITY_MANY = 1.0
CLICHE_DENSITY_SOME = 0.6
CLICHE_DENSITY_NONE = 0.2

# ai_score < LOW_SEVERITY_BELOW is low, >= HIGH_SEVERITY_FROM is high
LOW_SEVERITY_BELOW = 40
HIGH_SEVERITY_FROM = 70

# burstiness < FLAT_BELOW is flat, >= VARIED_FROM is varied
FLAT_BURSTINESS_BELOW = 0.3
VARIED_BURSTINESS_FROM = 0.6

# Items shown per list in the result view
MAX_CLICHES_SHOWN = 5
MAX_SIGNALS_SHOWN = 3
MAX_HUMAN_TOUCHES_SHOWN = 3


class Severity(str, Enum):
    LOW = "low"        # Likely human
    MEDIUM = "medium"  # Mixed
    HIGH = "high"      # Likely AI


class BurstinessLevel(str, Enum):
    FLAT = "flat"      # Even rhythm, AI-like
    MEDIUM = "medium"
    VARIED = "varied"  # Irregular rhythm, human-like


SEVERITY_COLORS: dict[Severity, str] = {
    Severity.LOW: "#08A86D",
    Severity.MEDIUM: "#F59E0B",
    Severity.HIGH: "#EF4444",
}

SEVERITY_LABELS: dict[str, dict[Severity, str]] = {
    "zh": {
        Severity.LOW: "可能是人类创作",
        Severity.MEDIUM: "混合内容",
        Severity.HIGH: "高度疑似 AI",
    },
    "en": {
        Severity.LOW: "Likely human-written",
        Severity.MEDIUM: "Mixed content",
        Severity.HIGH: "Highly likely AI-generated",
    },
}

BURSTINESS_LABELS: dict[str, dict[BurstinessLevel, str]] = {
    "zh": {
        BurstinessLevel.FLAT: "平缓 (AI)",
        BurstinessLevel.MEDIUM: "中等",
        BurstinessLevel.VARIED: "参差 (人类)",
    },
    "en": {
        BurstinessLevel.FLAT: "Flat (AI)",
        BurstinessLevel.MEDIUM: "Medium",
        BurstinessLevel.VARIED: "Varied (human)",
    },
}


@dataclass(frozen=True)
class RadarAxes:
    """Radar chart values, each in [0, 1]."""

    structure: float
    format: float
    uniqueness: float
    emotion: float

    def as_dict(self) -> dict[str, float]:
        return {
            "structure": self.structure,
            "format": self.format,
            "uniqueness": self.uniqueness,
            "emotion": self.emotion,
        }


def cliche_density(count: int) -> float:
    if count > MANY_CLICHES:
        return CLICHE_DENSITY_MANY
    if count > 0:
        return CLICHE_DENSITY_SOME
    return CLICHE_DENSITY_NONE


def uniqueness_axis(cliche_count: int) -> float:
    """Individuality axis: the inverse of cliche density."""
    return 1.0 - cliche_density(cliche_count)


def radar_axes(result: ClassificationResult) -> RadarAxes:
    """Compute radar chart values for a classification."""
    return RadarAxes(
        structure=STRUCTURE_AXIS[result.structural_overuse],
        format=FORMAT_AXIS[result.format_pattern],
        uniqueness=uniqueness_axis(len(result.cliche_phrases)),
        emotion=EMOTION_AXIS[result.emotional_depth],
    )


def severity_for_score(ai_score: int | None) -> Severity:
    """Bucket an ai_score: <40 low, 40-69 medium, >=70 high.

    A missing score is uncertain and lands in the medium bucket.
    """
    if ai_score is None:
        return Severity.MEDIUM
    if ai_score < LOW_SEVERITY_BELOW:
        return Severity.LOW
    if ai_score < HIGH_SEVERITY_FROM:
        return Severity.MEDIUM
    return Severity.HIGH


def severity_color(ai_score: int | None) -> str:
    return SEVERITY_COLORS[severity_for_score(ai_score)]


def verdict_label(ai_score: int | None, language: str = "zh") -> str:
    labels = SEVERITY_LABELS.get(language, SEVERITY_LABELS["en"])
    return labels[severity_for_score(ai_score)]


def burstiness_level(score: float) -> BurstinessLevel:
    """Bucket a burstiness score: <0.3 flat, <0.6 medium, else varied."""
    if score < FLAT_BURSTINESS_BELOW:
        return BurstinessLevel.FLAT
    if score < VARIED_BURSTINESS_FROM:
        return BurstinessLevel.MEDIUM
    return BurstinessLevel.VARIED


def burstiness_label(score: float, language: str = "zh") -> str:
    labels = BURSTINESS_LABELS.get(language, BURSTINESS_LABELS["en"])
    return labels[burstiness_level(score)]


def burstiness_percent(score: float) -> int:
    """Burstiness as the 0-100 figure shown next to the chart."""
    return int(round(score * 100))


def top_items(items: Sequence[str], limit: int) -> list[str]:
    return list(items[:limit])
