"""Analysis orchestration for AI-content detection.

This module coordinates one detection run from raw input to result:

Run Flow:
    1. CLASSIFY INPUT: Decide whether the document is a URL (^https?://)
       and check the API key before any network call
    2. FETCH (URL only): Extract page text through the reader service;
       unreachable pages and pages under 50 characters fail the run
    3. CONTENT READY: Compute burstiness on the resolved content
    4. CLASSIFY: Ask the classifier model for its judgment
    5. DONE: Normalize the completion and merge in burstiness

State Machine:
    IDLE -> INPUT_CLASSIFIED -> [FETCHING_CONTENT] -> CONTENT_READY
         -> CLASSIFYING -> DONE | FAILED

    Only this module writes the run state. Every AnalysisError raised by a
    step lands in one handler that moves the run to FAILED; nothing is
    retried. A model reply that is not valid JSON is not a failure: the
    normalizer degrades it to a fallback result.

Runs do not overlap: callers must not start a run while one is in
flight (disable the trigger in the UI).
"""

import logging
import re
import time
import uuid
from typing import Awaitable, Callable

from config import Config
from agents.classifier import ClassifierAgent
from analysis.burstiness import compute_burstiness
from analysis.normalizer import parse_completion
from errors import AnalysisError, FetchError, error_for
from models.result import AnalysisResult, RunState, RunStatus
from observability.logging import set_run_context, clear_context
from observability.tracing import setup_tracing, trace_operation
from tools.fetch import PageContent, fetch_page_content

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)

FETCH_FAILED_MESSAGE = "cannot retrieve page content, please check that the link is correct"
CONTENT_TOO_SHORT_MESSAGE = "extracted content too short, please check that the link is valid"

# Advisory status text shown while a run crosses an external boundary
STATUS_MESSAGES: dict[str, dict[RunStatus, str]] = {
    "zh": {
        RunStatus.FETCHING_CONTENT: "正在提取网页内容...",
        RunStatus.CLASSIFYING: "正在分析内容...",
    },
    "en": {
        RunStatus.FETCHING_CONTENT: "Extracting page content...",
        RunStatus.CLASSIFYING: "Analyzing content...",
    },
}

Fetcher = Callable[[str], Awaitable[PageContent]]
StatusCallback = Callable[[str], None]


def is_url(document: str) -> bool:
    """Whether a trimmed document should be fetched rather than analyzed."""
    return bool(_URL_PATTERN.match(document))


class AnalysisPipeline:
    """Runs AI-content detection on text or a web page.

    Components:
        - Fetcher: page-to-text extraction (reader service by default)
        - ClassifierAgent: chat model judgment
        - Normalizer and burstiness calculator: local, synchronous

    The state is replaced, never mutated, on every transition, so readers
    always see a consistent RunState snapshot.

    Example:
        >>> pipeline = AnalysisPipeline(Config.load(), on_status=print)
        >>> state = await pipeline.run("https://example.com/post")
        >>> if state.succeeded:
        ...     print(state.result.ai_score)
    """

    def __init__(
        self,
        config: Config,
        classifier: ClassifierAgent | None = None,
        fetcher: Fetcher | None = None,
        on_status: StatusCallback | None = None,
    ):
        """Initialize pipeline with all components.

        Args:
            config: Application configuration (carries the API key)
            classifier: Classifier override, mainly for tests
            fetcher: Page fetcher override, mainly for tests
            on_status: Receives advisory status text for display
        """
        self.config = config
        self.classifier = classifier or ClassifierAgent(config)
        self._fetcher = fetcher or self._fetch_page
        self._on_status = on_status
        self._state = RunState()
        self._history: list[RunStatus] = [RunStatus.IDLE]

        # Optional: Distributed tracing
        if config.enable_logfire:
            setup_tracing(enabled=True, service_name="sniffer", token=config.logfire_token)

    @property
    def state(self) -> RunState:
        """Current run state snapshot."""
        return self._state

    @property
    def history(self) -> list[RunStatus]:
        """Statuses visited by the latest run, in order, starting from IDLE."""
        return list(self._history)

    def _transition(self, status: RunStatus, **fields) -> None:
        fields.setdefault("is_url", self._state.is_url)
        self._state = RunState(status=status, **fields)
        self._history.append(status)
        logger.debug("Run state | status=%s", status.value)

    def _notify(self, status: RunStatus) -> None:
        if self._on_status is None:
            return
        messages = STATUS_MESSAGES.get(self.config.language, STATUS_MESSAGES["en"])
        try:
            self._on_status(messages[status])
        except Exception as e:
            logger.warning("Status callback failed | status=%s error=%s", status.value, e, exc_info=True)

    async def _fetch_page(self, url: str) -> PageContent:
        return await fetch_page_content(
            url,
            reader_base_url=self.config.reader_base_url,
            timeout=self.config.fetch_timeout_seconds,
            max_length=self.config.max_content_length,
        )

    async def _resolve_content(self, document: str, url: bool) -> str:
        """Return the text to analyze: the page text for URLs, else the document.

        Raises:
            FetchError: If the page is unreachable or too short
        """
        if not url:
            return document

        self._transition(RunStatus.FETCHING_CONTENT)
        self._notify(RunStatus.FETCHING_CONTENT)

        page = await self._fetcher(document)
        if not page.success:
            logger.warning("Page fetch failed | url=%s error=%s", document, page.error)
            raise FetchError(FETCH_FAILED_MESSAGE)

        content = page.content or ""
        if len(content.strip()) < self.config.min_content_length:
            logger.warning(
                "Page content too short | url=%s chars=%d min=%d",
                document, len(content.strip()), self.config.min_content_length,
            )
            raise FetchError(CONTENT_TOO_SHORT_MESSAGE)

        logger.info("Page content extracted | url=%s title=%s chars=%d", document, page.title[:60], len(content))
        return content

    async def run(self, text: str) -> RunState:
        """Execute one analysis run.

        Args:
            text: Raw document, plain text or a URL

        Returns:
            Terminal RunState (DONE with result, or FAILED with reason)

        Raises:
            TypeError: If text is not a string
            ValueError: If text is empty after trimming
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, not {type(text).__name__}")
        document = text.strip()
        if not document:
            raise ValueError("Nothing to analyze: input is empty")

        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)
        start = time.time()
        url = is_url(document)

        self._history = [RunStatus.IDLE]
        self._transition(RunStatus.INPUT_CLASSIFIED, is_url=url)
        logger.info("Analysis started | is_url=%s chars=%d", url, len(document))

        try:
            with trace_operation("analysis_run", {"run_id": run_id, "is_url": url}) as attrs:
                self.classifier.ensure_configured()

                content = await self._resolve_content(document, url)
                metrics = compute_burstiness(content)
                self._transition(RunStatus.CONTENT_READY)

                self._transition(RunStatus.CLASSIFYING)
                self._notify(RunStatus.CLASSIFYING)
                completion = await self.classifier.complete(content)

                normalized = parse_completion(completion)
                result = AnalysisResult.combine(
                    normalized.result,
                    metrics,
                    source_url=document if url else None,
                    is_fallback=normalized.is_fallback,
                )
                self._transition(RunStatus.DONE, result=result)
                attrs.update(
                    ai_score=result.ai_score,
                    burstiness=result.burstiness,
                    fallback=result.is_fallback,
                )

        except AnalysisError as e:
            self._transition(RunStatus.FAILED, error_kind=e.kind, message=e.message)
            logger.warning("Analysis failed | kind=%s message=%s", e.kind.value, e.message)

        finally:
            logger.info(
                "Analysis done | status=%s duration=%.1fs",
                self._state.status.value, time.time() - start,
            )
            clear_context()

        return self._state

    async def analyze(self, text: str) -> AnalysisResult:
        """Run an analysis and return its result, raising on failure.

        Raises:
            ConfigurationError, FetchError, ClassificationTransportError:
                Matching the kind of failure that ended the run
        """
        state = await self.run(text)
        if state.failed:
            raise error_for(state.error_kind, state.message)
        return state.result
