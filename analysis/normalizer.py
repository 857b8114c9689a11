"""Turn a free-form classifier completion into a ClassificationResult.

The classifier is told to answer with bare JSON, but models wrap it in
markdown fences, surround it with prose, or ignore the instruction. The
candidate JSON text is located in this order:

    1. The interior of a ```json fenced block
    2. The span from the first '{' to the last '}'
    3. The whole completion

If the candidate parses to a JSON object, each field is normalized on its
own (see models.classification). Otherwise the result degrades to the
fallback: uncertain score, neutral labels, and the raw reply kept as the
analysis text. Malformed replies never raise.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum

from pydantic import ValidationError

from models.classification import ClassificationResult

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_BRACED_SPAN = re.compile(r"\{[\s\S]*\}")


class ParseOutcome(str, Enum):
    PARSED = "parsed"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class NormalizedCompletion:
    """A ClassificationResult tagged with how it was obtained."""

    result: ClassificationResult
    outcome: ParseOutcome

    @property
    def is_fallback(self) -> bool:
        return self.outcome is ParseOutcome.FALLBACK


def extract_json_candidate(raw: str) -> str:
    """Return the substring of ``raw`` most likely to hold the JSON object."""
    match = _FENCED_JSON.search(raw)
    if match:
        return match.group(1)
    match = _BRACED_SPAN.search(raw)
    if match:
        return match.group(0)
    return raw


def parse_completion(raw: str) -> NormalizedCompletion:
    """Parse a completion, degrading to the fallback result on bad JSON.

    Args:
        raw: Completion text from the classifier

    Returns:
        NormalizedCompletion tagged PARSED or FALLBACK

    Raises:
        TypeError: If raw is not a string
    """
    if not isinstance(raw, str):
        raise TypeError(f"completion must be str, not {type(raw).__name__}")

    candidate = extract_json_candidate(raw)
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; RecursionError comes from deep nesting
        logger.warning("Completion is not valid JSON; using fallback | error=%s chars=%d", type(e).__name__, len(raw))
        return NormalizedCompletion(ClassificationResult.fallback(raw), ParseOutcome.FALLBACK)

    if not isinstance(data, dict):
        logger.warning("Completion JSON is not an object; using fallback | type=%s", type(data).__name__)
        return NormalizedCompletion(ClassificationResult.fallback(raw), ParseOutcome.FALLBACK)

    try:
        result = ClassificationResult.model_validate(data)
    except (ValidationError, RecursionError) as e:
        logger.warning("Completion JSON has unusable fields; using fallback | error=%s", type(e).__name__)
        return NormalizedCompletion(ClassificationResult.fallback(raw), ParseOutcome.FALLBACK)
    if result.ai_score is None:
        logger.warning("Completion has no usable ai_score | value=%r", data.get("ai_score"))
    return NormalizedCompletion(result, ParseOutcome.PARSED)


def normalize(raw: str) -> ClassificationResult:
    """Parse a completion into a ClassificationResult (fallback on bad JSON)."""
    return parse_completion(raw).result
