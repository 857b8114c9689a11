"""Final analysis result and orchestrator run state.

AnalysisResult:
    ClassificationResult merged with BurstinessMetrics. Built once per
    successful run and never mutated; the next run replaces it.

RunStatus / RunState:
    The orchestrator's state machine. Only AnalysisPipeline writes it;
    presentation code reads it.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import Field

from errors import ErrorKind
from models.burstiness import BurstinessMetrics
from models.classification import ClassificationResult


class AnalysisResult(ClassificationResult):
    """Everything one analysis run produced.

    Attributes:
        burstiness: Normalized burstiness score (0-1) of the analyzed content
        sentence_lengths: Per-sentence lengths of the analyzed content
        source_url: Page URL when the document was a link, else None
        is_fallback: True when the model reply held no parseable JSON and
            the classification fields are neutral defaults
    """

    burstiness: float = Field(default=0.0, ge=0.0, le=1.0)
    sentence_lengths: list[int] = Field(default_factory=list)
    source_url: str | None = None
    is_fallback: bool = False

    @classmethod
    def combine(
        cls,
        classification: ClassificationResult,
        metrics: BurstinessMetrics,
        source_url: str | None = None,
        is_fallback: bool = False,
    ) -> "AnalysisResult":
        """Merge a classification with burstiness metrics."""
        return cls(
            **classification.model_dump(),
            burstiness=metrics.score,
            sentence_lengths=list(metrics.sentence_lengths),
            source_url=source_url,
            is_fallback=is_fallback,
        )

    @property
    def metrics(self) -> BurstinessMetrics:
        return BurstinessMetrics(score=self.burstiness, sentence_lengths=list(self.sentence_lengths))


class RunStatus(str, Enum):
    """States of a single analysis run.

    IDLE -> INPUT_CLASSIFIED -> [FETCHING_CONTENT] -> CONTENT_READY
         -> CLASSIFYING -> DONE | FAILED
    """

    IDLE = "idle"
    INPUT_CLASSIFIED = "input_classified"
    FETCHING_CONTENT = "fetching_content"
    CONTENT_READY = "content_ready"
    CLASSIFYING = "classifying"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({RunStatus.DONE, RunStatus.FAILED})


@dataclass(frozen=True)
class RunState:
    """Snapshot of the orchestrator state.

    Attributes:
        status: Current state machine position
        result: Set only when status is DONE
        error_kind: Set only when status is FAILED
        message: Failure reason when status is FAILED
        is_url: Whether the submitted document was classified as a URL
    """

    status: RunStatus = RunStatus.IDLE
    result: AnalysisResult | None = None
    error_kind: ErrorKind | None = None
    message: str = ""
    is_url: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.DONE

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED
