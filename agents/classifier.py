"""Classifier agent for judging whether text was machine-generated.

This module implements the ClassifierAgent, which sends the resolved
content to a chat model and returns the model's raw completion.

Design Philosophy:
    - Plain-text output: the model is asked for JSON but the reply is not
      trusted; analysis.normalizer turns it into a ClassificationResult
    - Credential first: a missing API key is reported as a configuration
      error before any request is attempted
    - No retries: transport failures end the run and surface the
      upstream error message when the endpoint supplied one

The model is asked for:
    - ai_score: 0-100 likelihood of machine generation
    - structural_overuse, emotional_depth, format_pattern: qualitative labels
    - cliche_phrases, human_touch_examples, ai_signals: supporting evidence
    - analysis: a short overall judgment
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic_ai import Agent, RunContext
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from config import Config
from errors import ClassificationTransportError, ConfigurationError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Detection failed, please check the API key configuration"


# === System Prompts ===
# Bilingual prompts for Chinese (zh) and English (en) content.
# The zh prompt asks for Chinese labels; the normalizer maps both sets.

CLASSIFIER_PROMPTS = {
    "zh": """你是 AI 内容检测专家。你现在收到的是一篇文章的 Markdown 格式文本内容（不是 URL）。请从以下四个维度深度分析文本的 AI 生成特征：

**1. 结构化过度检测**
- 检查每个小标题后的段落字数是否惊人地一致
- AI 倾向于生成等长的段落，而人类写作长度变化更自然

**2. 万能废话识别**
- 检测典型的 AI 开场白："在这个飞速发展的时代"、"综上所述"、"值得注意的是"、"首先/其次/再次"
- 标记出所有疑似 AI 生成的万能过渡词

**3. 情感缺失分析**
- 判断文中有无作者个人的主观视角、独特措辞习惯（人类特征）
- 还是纯粹的客观陈述、中立语气（AI 特征）

**4. 排版逻辑判断**
- AI 偏好：标准列表（1. 2. 3.）、规整的小标题、对称的结构
- 人类偏好：散文化叙述、流畅的段落过渡、不规则的节奏

请严格返回 JSON 格式（不要有其他文字）：
{
  "ai_score": 0-100 的数值,
  "structural_overuse": "低/中/高",
  "cliche_phrases": ["检测到的万能废话"],
  "emotional_depth": "缺失/较弱/丰富",
  "format_pattern": "AI型列表/人类散文/混合",
  "analysis": "50字以内的总体分析",
  "human_touch_examples": ["发现的人类特征（如有）"],
  "ai_signals": ["发现的所有AI特征"]
}""",

    "en": """You are an expert in detecting AI-generated content. You will receive the Markdown text of an article (not a URL). Analyze its AI-generation traits along four dimensions:

**1. Structural Overuse**
- Check whether paragraphs under each heading are suspiciously equal in length
- Models tend to produce even paragraphs; human writing varies naturally

**2. Cliche Phrases**
- Detect stock openers and filler transitions: "In today's fast-paced world", "In conclusion", "It is worth noting that", "Firstly/Secondly/Finally"
- List every transition phrase that looks machine-generated

**3. Emotional Depth**
- Does the author show a personal viewpoint and idiosyncratic wording (human traits)?
- Or is it purely objective statements in a neutral tone (AI traits)?

**4. Format Pattern**
- AI preference: standard numbered lists, tidy headings, symmetric structure
- Human preference: narrative prose, flowing transitions, irregular rhythm

Return strictly JSON (no other text):
{
  "ai_score": number from 0 to 100,
  "structural_overuse": "low/medium/high",
  "cliche_phrases": ["detected stock phrases"],
  "emotional_depth": "missing/weak/rich",
  "format_pattern": "ai_list/human_prose/mixed",
  "analysis": "overall analysis in under 50 words",
  "human_touch_examples": ["human traits found, if any"],
  "ai_signals": ["all AI traits found"]
}""",
}


@dataclass
class ClassifierContext:
    """Runtime context passed to the classifier agent.

    Attributes:
        language: Prompt language ('zh' or 'en')
    """
    language: str = "zh"


def _parse_openai_compatible(model_str: str) -> tuple[str, str] | None:
    """Parse 'openai:{model}@{base_url}' into (model_name, base_url), else None."""
    if model_str.startswith("openai:") and "@" in model_str:
        rest = model_str[7:]  # Remove "openai:" prefix
        model_name, base_url = rest.split("@", 1)
        return model_name, base_url
    return None


def _create_model(model_str: str, api_key: str) -> Model | str:
    """Create the model for a model string.

    Supports:
    - OpenAI-compatible endpoints: 'openai:glm-4-flash@https://open.bigmodel.cn/api/paas/v4'
    - Any other PydanticAI model string, passed through unchanged

    Args:
        model_str: Model identifier string
        api_key: Credential for OpenAI-compatible endpoints

    Returns:
        PydanticAI model instance or model string
    """
    parsed = _parse_openai_compatible(model_str)
    if parsed:
        model_name, base_url = parsed
        logger.info("Using OpenAI-compatible model | model=%s base_url=%s", model_name, base_url)
        return OpenAIChatModel(
            model_name,
            provider=OpenAIProvider(base_url=base_url, api_key=api_key),
        )
    return model_str


def _create_agent(model: Model | str, config: Config) -> Agent[ClassifierContext, str]:
    """Create the underlying PydanticAI agent for classification.

    The agent uses:
    - Plain string output (parsed later by the normalizer)
    - Dynamic system prompt: selected by language context
    - Low temperature for consistent judgments

    Args:
        model: PydanticAI model instance or model string
        config: Application configuration with sampling settings

    Returns:
        Configured PydanticAI Agent
    """
    agent = Agent(
        model,
        deps_type=ClassifierContext,
        output_type=str,
        model_settings=ModelSettings(
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        ),
    )

    @agent.system_prompt
    def dynamic_prompt(ctx: RunContext[ClassifierContext]) -> str:
        """Select system prompt based on language setting."""
        return CLASSIFIER_PROMPTS.get(ctx.deps.language, CLASSIFIER_PROMPTS["en"])

    return agent


def _upstream_message(body: Any) -> str | None:
    """Pull the error message out of an OpenAI-style error body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error", body)
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def _log_usage(result: Any, chars: int) -> None:
    """Log token usage for a finished run; never raises."""
    try:
        usage = result.usage()
        logger.debug(
            "Classified | chars=%d requests=%d tokens=%d/%d",
            chars,
            usage.requests,
            usage.input_tokens or 0,
            usage.output_tokens or 0,
        )
    except Exception as e:
        logger.debug("Usage unavailable | error=%s", e)


class ClassifierAgent:
    """Asks a chat model whether content was machine-generated.

    Returns the model's completion text untouched; it is the normalizer's
    job to make sense of it.

    Error Handling:
        A missing API key raises ConfigurationError before any request.
        Any failure of the request itself raises ClassificationTransportError
        carrying the upstream message when one is available.

    Example:
        >>> classifier = ClassifierAgent(config)
        >>> completion = await classifier.complete(text)
        >>> result = normalize(completion)
    """

    def __init__(self, config: Config, model: Model | str | None = None):
        """Initialize the classifier agent.

        The agent is built lazily so that a missing credential surfaces as
        a ConfigurationError on first use rather than at construction.

        Args:
            config: Application configuration with model, key and language
            model: Optional model override (e.g. a test model)
        """
        self.config = config
        self._context = ClassifierContext(language=config.language)
        self._model_override = model
        self._agent: Agent[ClassifierContext, str] | None = None

    @property
    def model_name(self) -> str:
        parsed = _parse_openai_compatible(self.config.classifier_model)
        return parsed[0] if parsed else self.config.classifier_model

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the API key is missing."""
        if not self.config.api_key:
            raise ConfigurationError(
                "API key is not configured, set ZHIPU_API_KEY in the environment"
            )

    def _get_agent(self) -> Agent[ClassifierContext, str]:
        if self._agent is None:
            model = self._model_override
            if model is None:
                model = _create_model(self.config.classifier_model, self.config.api_key)
            self._agent = _create_agent(model, self.config)
        return self._agent

    async def complete(self, content: str) -> str:
        """Send content to the model and return the raw completion text.

        Args:
            content: Resolved document text

        Returns:
            Completion text, expected (not guaranteed) to contain JSON

        Raises:
            ConfigurationError: If the API key is missing
            ClassificationTransportError: If the request fails
        """
        self.ensure_configured()
        agent = self._get_agent()

        try:
            result = await agent.run(content, deps=self._context)
        except ModelHTTPError as e:
            message = _upstream_message(e.body) or f"{GENERIC_FAILURE_MESSAGE} (HTTP {e.status_code})"
            logger.error(
                "Classification request rejected | model=%s status=%d message=%s",
                self.model_name, e.status_code, message,
            )
            raise ClassificationTransportError(message) from e
        except Exception as e:
            logger.error(
                "Classification request failed | model=%s error=%s type=%s",
                self.model_name, e, type(e).__name__, exc_info=True,
            )
            raise ClassificationTransportError(str(e) or GENERIC_FAILURE_MESSAGE) from e

        _log_usage(result, len(content))
        return result.output
