"""Local, synchronous analysis steps for the detector.

compute_burstiness:
    Sentence segmentation and sentence-length variability score.

downsample / bar_heights:
    Bounded-size sampling of long sequences for fixed-width charts.

normalize / parse_completion:
    Free-form classifier completion to ClassificationResult, with a
    fallback result when no JSON can be parsed.

scoring:
    Radar axes, severity buckets and verdict labels.

Example:
    >>> from analysis import compute_burstiness
    >>> compute_burstiness("Hello world. This is a test.").sentence_lengths
    [11, 14]
"""

from analysis.burstiness import compute_burstiness, split_sentences
from analysis.normalizer import NormalizedCompletion, ParseOutcome, normalize, parse_completion
from analysis.sampling import bar_heights, downsample
from analysis.scoring import (
    BurstinessLevel,
    RadarAxes,
    Severity,
    burstiness_level,
    radar_axes,
    severity_for_score,
    verdict_label,
)

__all__ = [
    "compute_burstiness",
    "split_sentences",
    "normalize",
    "parse_completion",
    "NormalizedCompletion",
    "ParseOutcome",
    "downsample",
    "bar_heights",
    "BurstinessLevel",
    "RadarAxes",
    "Severity",
    "burstiness_level",
    "radar_axes",
    "severity_for_score",
    "verdict_label",
]
