"""Sentence segmentation and burstiness scoring.

Burstiness B = sigma / mu over sentence lengths, where sigma is the
population standard deviation. Raw B for natural text rarely exceeds 2,
and human writing usually lands around 0.5-1.5, so the score is B / 2
clamped into [0, 1].

Sentences are split on ASCII and CJK terminators (. ! ? and 。！？). The
length of a sentence is the character count after trimming whitespace.
"""

import math
import re

from models.burstiness import BurstinessMetrics

_SENTENCE_TERMINATORS = re.compile(r"[。！？.!?]")

# Raw burstiness is divided by this before clamping
BURSTINESS_SCALE = 2.0


def split_sentences(text: str) -> list[str]:
    """Split text into trimmed, non-empty sentences."""
    if not isinstance(text, str):
        raise TypeError(f"text must be str, not {type(text).__name__}")
    return [part.strip() for part in _SENTENCE_TERMINATORS.split(text) if part.strip()]


def compute_burstiness(text: str) -> BurstinessMetrics:
    """Compute burstiness metrics for a document.

    Text with fewer than two sentences has no variance to measure and
    yields a zero score with no lengths.

    Args:
        text: Any string, including empty or whitespace-only

    Returns:
        BurstinessMetrics with score in [0, 1] and lengths in sentence order

    Raises:
        TypeError: If text is not a string
    """
    sentences = split_sentences(text)
    if len(sentences) < 2:
        return BurstinessMetrics.empty()

    lengths = [len(sentence) for sentence in sentences]
    mean = sum(lengths) / len(lengths)
    if mean == 0:
        return BurstinessMetrics(score=0.0, sentence_lengths=lengths)

    variance = sum((length - mean) ** 2 for length in lengths) / len(lengths)
    raw = math.sqrt(variance) / mean
    score = min(1.0, max(0.0, raw / BURSTINESS_SCALE))
    return BurstinessMetrics(score=score, sentence_lengths=lengths)
