"""Burstiness metrics model.

Burstiness is the ratio of the standard deviation to the mean of sentence
lengths. Human writing alternates short and long sentences; generated text
tends toward an even rhythm. See analysis.burstiness for the computation.
"""

from pydantic import BaseModel, ConfigDict, Field


class BurstinessMetrics(BaseModel):
    """Sentence-rhythm statistics for one document.

    Attributes:
        score: Normalized burstiness in [0, 1]
        sentence_lengths: Character count of each trimmed sentence, in
            document order
    """

    model_config = ConfigDict(frozen=True)

    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Normalized burstiness (0-1)")
    sentence_lengths: list[int] = Field(default_factory=list, description="Per-sentence lengths")

    @classmethod
    def empty(cls) -> "BurstinessMetrics":
        """Metrics for text with too few sentences to measure."""
        return cls(score=0.0, sentence_lengths=[])

    @property
    def sentence_count(self) -> int:
        return len(self.sentence_lengths)
