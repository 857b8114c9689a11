"""Error taxonomy for analysis runs.

Only infrastructure problems are errors. A model reply that does not follow
the JSON contract is not one of them: the normalizer degrades it into a
fallback result instead (see analysis.normalizer).

ConfigurationError:
    Missing credential. Detected before any network call; never retried.

FetchError:
    The page could not be retrieved, or yielded too little text.

ClassificationTransportError:
    The classification request itself failed (network, auth, HTTP status).

The pipeline catches AnalysisError in one place and turns it into a
FAILED run state carrying ``kind`` and the message.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Why a run ended in the FAILED state."""

    CONFIGURATION = "configuration"
    FETCH = "fetch"
    CLASSIFICATION_TRANSPORT = "classification_transport"


class AnalysisError(Exception):
    """Base class for failures that terminate an analysis run."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AnalysisError):
    kind = ErrorKind.CONFIGURATION


class FetchError(AnalysisError):
    kind = ErrorKind.FETCH


class ClassificationTransportError(AnalysisError):
    kind = ErrorKind.CLASSIFICATION_TRANSPORT


_ERROR_TYPES: dict[ErrorKind, type[AnalysisError]] = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.FETCH: FetchError,
    ErrorKind.CLASSIFICATION_TRANSPORT: ClassificationTransportError,
}


def error_for(kind: ErrorKind, message: str) -> AnalysisError:
    """Build the exception matching a failure kind."""
    return _ERROR_TYPES[kind](message)
