"""
Unit tests for the AnalysisPipeline orchestrator (pipeline.py).

These tests verify:
    - Plain text and URL documents reach DONE with burstiness attached.
    - Fetch failures and too-short pages end in FAILED before classification.
    - A missing API key fails the run before any network call.
    - Transport failures surface the upstream message.
    - Malformed completions degrade to the fallback result, not FAILED.
    - Advisory status messages are emitted and may fail harmlessly.

The classifier runs against a PydanticAI FunctionModel and the page
fetcher is an AsyncMock.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic_ai.exceptions import ModelHTTPError

from agents.classifier import ClassifierAgent
from analysis.burstiness import compute_burstiness
from config import Config
from errors import ClassificationTransportError, ErrorKind, FetchError
from models.classification import StructuralOveruse
from models.result import RunStatus
from pipeline import (
    CONTENT_TOO_SHORT_MESSAGE,
    FETCH_FAILED_MESSAGE,
    AnalysisPipeline,
    is_url,
)
from tests.helpers import HUMAN_TEXT, SAMPLE_CLASSIFICATION, failing_model, fenced, text_model
from tools.fetch import PageContent

URL = "https://example.com/blog/post"

PAGE_TEXT = (
    "Title: A walk in the rain\n\n"
    "We walked for hours. The rain never stopped, and nobody minded at all! "
    "Later we dried our socks by the stove. Was it worth it? Absolutely."
)


def page(content: str, success: bool = True, error: str | None = None) -> PageContent:
    return PageContent(url=URL, title="A walk in the rain", content=content, success=success, error=error)


def make_pipeline(config: Config, completion: str = None, model=None, fetcher=None, on_status=None, calls=None):
    if model is None:
        model = text_model(completion if completion is not None else fenced(SAMPLE_CLASSIFICATION), calls)
    classifier = ClassifierAgent(config, model=model)
    return AnalysisPipeline(config, classifier=classifier, fetcher=fetcher, on_status=on_status)


# === Input classification ===


@pytest.mark.parametrize("document,expected", [
    ("https://example.com", True),
    ("http://example.com/a?b=c", True),
    ("HTTPS://EXAMPLE.COM", True),
    ("ftp://example.com", False),
    ("see https://example.com", False),
    ("https://", False),
    ("Plain text.", False),
])
def test_is_url(document, expected):
    assert is_url(document) is expected


def test_initial_state_is_idle(config):
    pipeline = make_pipeline(config)
    assert pipeline.state.status is RunStatus.IDLE
    assert not pipeline.state.is_terminal


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n  "])
async def test_empty_input_rejected(config, text):
    pipeline = make_pipeline(config)
    with pytest.raises(ValueError):
        await pipeline.run(text)
    assert pipeline.state.status is RunStatus.IDLE


@pytest.mark.asyncio
async def test_non_string_input_rejected(config):
    with pytest.raises(TypeError):
        await make_pipeline(config).run(None)


# === Successful runs ===


@pytest.mark.asyncio
async def test_plain_text_run(config):
    fetcher = AsyncMock()
    pipeline = make_pipeline(config, fetcher=fetcher)

    state = await pipeline.run(f"  {HUMAN_TEXT}  ")

    assert state.succeeded
    assert state.is_terminal
    assert not state.is_url
    fetcher.assert_not_awaited()
    assert pipeline.history == [
        RunStatus.IDLE,
        RunStatus.INPUT_CLASSIFIED,
        RunStatus.CONTENT_READY,
        RunStatus.CLASSIFYING,
        RunStatus.DONE,
    ]

    result = state.result
    expected = compute_burstiness(HUMAN_TEXT)
    assert result.ai_score == 82
    assert result.structural_overuse is StructuralOveruse.HIGH
    assert result.burstiness == expected.score
    assert result.sentence_lengths == expected.sentence_lengths
    assert result.source_url is None
    assert not result.is_fallback


@pytest.mark.asyncio
async def test_url_run_analyzes_fetched_content(config):
    calls = []
    fetcher = AsyncMock(return_value=page(PAGE_TEXT))
    pipeline = make_pipeline(config, fetcher=fetcher, calls=calls)

    state = await pipeline.run(URL)

    assert state.succeeded
    assert state.is_url
    fetcher.assert_awaited_once_with(URL)
    assert pipeline.history == [
        RunStatus.IDLE,
        RunStatus.INPUT_CLASSIFIED,
        RunStatus.FETCHING_CONTENT,
        RunStatus.CONTENT_READY,
        RunStatus.CLASSIFYING,
        RunStatus.DONE,
    ]

    # Burstiness and classification both see the page text, not the URL
    expected = compute_burstiness(PAGE_TEXT)
    assert state.result.sentence_lengths == expected.sentence_lengths
    assert state.result.source_url == URL
    user_prompt = calls[0][0].parts[-1].content
    assert user_prompt == PAGE_TEXT


@pytest.mark.asyncio
async def test_status_messages(config):
    statuses = []
    pipeline = make_pipeline(config, fetcher=AsyncMock(return_value=page(PAGE_TEXT)), on_status=statuses.append)

    await pipeline.run(URL)

    assert statuses == ["Extracting page content...", "Analyzing content..."]


@pytest.mark.asyncio
async def test_status_messages_chinese(tmp_path):
    statuses = []
    config = Config(api_key="test-key", language="zh", log_dir=tmp_path)
    pipeline = make_pipeline(config, on_status=statuses.append)

    await pipeline.run(HUMAN_TEXT)

    assert statuses == ["正在分析内容..."]


@pytest.mark.asyncio
async def test_failing_status_callback_is_ignored(config):
    on_status = MagicMock(side_effect=RuntimeError("display gone"))
    pipeline = make_pipeline(config, on_status=on_status)

    state = await pipeline.run(HUMAN_TEXT)

    assert state.succeeded
    on_status.assert_called_once_with("Analyzing content...")


@pytest.mark.asyncio
async def test_malformed_completion_still_succeeds(config):
    reply = "I think this was probably written by a person."
    pipeline = make_pipeline(config, completion=reply)

    state = await pipeline.run(HUMAN_TEXT)

    assert state.succeeded
    assert state.result.is_fallback
    assert state.result.ai_score == 50
    assert state.result.analysis == reply
    assert state.result.sentence_lengths == compute_burstiness(HUMAN_TEXT).sentence_lengths


@pytest.mark.asyncio
async def test_new_run_supersedes_previous_result(config):
    pipeline = make_pipeline(config)
    first = (await pipeline.run(HUMAN_TEXT)).result
    second = (await pipeline.run("Short one. Then a much longer sentence follows it.")).result

    assert pipeline.state.result is second
    assert first.sentence_lengths != second.sentence_lengths


@pytest.mark.asyncio
async def test_every_run_history_starts_idle(config):
    pipeline = make_pipeline(config)
    await pipeline.run(HUMAN_TEXT)
    first = pipeline.history
    await pipeline.run(HUMAN_TEXT)

    assert pipeline.history == first
    assert pipeline.history[0] is RunStatus.IDLE


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [
    '{"ai_score": 1' + "0" * 400 + "}",
    '{"analysis": ' + "[" * 100000 + "]" * 100000 + "}",
    '{"ai_score": NaN, "cliche_phrases": {"a": 1}}',
    '```json\n{"ai_score": [1], "emotional_depth": {}}\n```',
])
async def test_odd_replies_still_reach_terminal_state(config, reply):
    pipeline = make_pipeline(config, completion=reply)

    state = await pipeline.run(HUMAN_TEXT)

    assert state.is_terminal
    assert state.succeeded


# === Failed runs ===


@pytest.mark.asyncio
async def test_short_page_fails_before_classification(config):
    calls = []
    fetcher = AsyncMock(return_value=page("0123456789"))
    pipeline = make_pipeline(config, fetcher=fetcher, calls=calls)

    state = await pipeline.run(URL)

    assert state.failed
    assert state.error_kind is ErrorKind.FETCH
    assert state.message == CONTENT_TOO_SHORT_MESSAGE
    assert "extracted content too short" in state.message
    assert state.result is None
    assert calls == []
    assert RunStatus.CLASSIFYING not in pipeline.history


@pytest.mark.asyncio
async def test_whitespace_padded_short_page_fails(config):
    fetcher = AsyncMock(return_value=page(" " * 100 + "tiny" + "\n" * 100))
    state = await make_pipeline(config, fetcher=fetcher).run(URL)

    assert state.error_kind is ErrorKind.FETCH
    assert state.message == CONTENT_TOO_SHORT_MESSAGE


@pytest.mark.asyncio
async def test_unreachable_page_fails(config):
    calls = []
    fetcher = AsyncMock(return_value=page("", success=False, error="HTTP 502"))
    pipeline = make_pipeline(config, fetcher=fetcher, calls=calls)

    state = await pipeline.run(URL)

    assert state.failed
    assert state.error_kind is ErrorKind.FETCH
    assert state.message == FETCH_FAILED_MESSAGE
    assert "cannot retrieve page content" in state.message
    assert calls == []
    fetcher.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_key_fails_before_fetch(unconfigured):
    calls = []
    fetcher = AsyncMock(return_value=page(PAGE_TEXT))
    pipeline = make_pipeline(unconfigured, fetcher=fetcher, calls=calls)

    state = await pipeline.run(URL)

    assert state.failed
    assert state.error_kind is ErrorKind.CONFIGURATION
    assert "ZHIPU_API_KEY" in state.message
    fetcher.assert_not_awaited()
    assert calls == []
    assert pipeline.history == [RunStatus.IDLE, RunStatus.INPUT_CLASSIFIED, RunStatus.FAILED]


@pytest.mark.asyncio
async def test_transport_error_fails_with_upstream_message(config):
    error = ModelHTTPError(
        status_code=429,
        model_name="glm-4-flash",
        body={"error": {"message": "Rate limit reached for requests"}},
    )
    pipeline = make_pipeline(config, model=failing_model(error))

    state = await pipeline.run(HUMAN_TEXT)

    assert state.failed
    assert state.error_kind is ErrorKind.CLASSIFICATION_TRANSPORT
    assert state.message == "Rate limit reached for requests"
    assert pipeline.history[-2:] == [RunStatus.CLASSIFYING, RunStatus.FAILED]


# === analyze() convenience ===


@pytest.mark.asyncio
async def test_analyze_returns_result(config):
    result = await make_pipeline(config).analyze(HUMAN_TEXT)
    assert result.ai_score == 82


@pytest.mark.asyncio
async def test_analyze_raises_fetch_error(config):
    pipeline = make_pipeline(config, fetcher=AsyncMock(return_value=page("short")))

    with pytest.raises(FetchError, match="extracted content too short"):
        await pipeline.analyze(URL)


@pytest.mark.asyncio
async def test_analyze_raises_transport_error(config):
    pipeline = make_pipeline(config, model=failing_model(ConnectionError("boom")))

    with pytest.raises(ClassificationTransportError, match="boom"):
        await pipeline.analyze(HUMAN_TEXT)
