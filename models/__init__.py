"""Pydantic models for the Sniffer AI-content detector.

This package contains all data models used throughout the detector:

ClassificationResult:
    Normalized classifier output (ai_score plus four qualitative dimensions).

StructuralOveruse, EmotionalDepth, FormatPattern:
    Enums for the qualitative dimensions, with alias-tolerant normalization.

BurstinessMetrics:
    Sentence-length variability score and per-sentence lengths.

AnalysisResult:
    ClassificationResult merged with BurstinessMetrics.

RunStatus, RunState:
    State of the analysis orchestrator.

Example:
    >>> from models import ClassificationResult
    >>> result = ClassificationResult.model_validate({"ai_score": 82, "structural_overuse": "high"})
"""

from models.classification import (
    ClassificationResult,
    EmotionalDepth,
    FormatPattern,
    StructuralOveruse,
)
from models.burstiness import BurstinessMetrics
from models.result import AnalysisResult, RunState, RunStatus

__all__ = [
    "ClassificationResult",
    "StructuralOveruse",
    "EmotionalDepth",
    "FormatPattern",
    "BurstinessMetrics",
    "AnalysisResult",
    "RunState",
    "RunStatus",
]
