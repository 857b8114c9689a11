"""Configuration management for the Sniffer AI-content detector.

This module provides centralized configuration for all detector components.
All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Required:
        ZHIPU_API_KEY: API key for the classification model endpoint

    Model (PydanticAI format, or openai:{model}@{base_url} for
    OpenAI-compatible endpoints):
        CLASSIFIER_MODEL: Model used for AI-content classification
        TEMPERATURE: Sampling temperature for the classifier
        MAX_TOKENS: Completion token limit for the classifier

    Output:
        LANGUAGE: Prompt and label language ('zh' for Chinese, 'en' for English)
        LOG_DIR: Directory for log files

    Content Extraction:
        READER_BASE_URL: Reader service prefix (empty = fetch pages directly)
        FETCH_TIMEOUT_SECONDS: Page fetch timeout
        MIN_CONTENT_LENGTH: Minimum extracted characters to accept a page
        MAX_CONTENT_LENGTH: Extracted content is truncated past this length

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


# Zhipu's OpenAI-compatible endpoint serving the fast GLM model
DEFAULT_CLASSIFIER_MODEL = "openai:glm-4-flash@https://open.bigmodel.cn/api/paas/v4"

# Reader service that turns any URL into markdown text
DEFAULT_READER_BASE_URL = "https://r.jina.ai/"


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment. The detector never
    reads the environment itself; pass the Config instance in explicitly.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    api_key: str = ""  # ZHIPU_API_KEY - classification endpoint credential

    # === Output Settings ===
    language: str = "zh"  # LANGUAGE - 'zh' (Chinese) or 'en' (English)

    # === AI Model ===
    classifier_model: str = DEFAULT_CLASSIFIER_MODEL  # CLASSIFIER_MODEL
    temperature: float = 0.3  # TEMPERATURE - low for consistent judgments
    max_tokens: int = 2000  # MAX_TOKENS - completion budget

    # === Content Extraction ===
    reader_base_url: str = DEFAULT_READER_BASE_URL  # READER_BASE_URL
    fetch_timeout_seconds: int = 30  # FETCH_TIMEOUT_SECONDS
    min_content_length: int = 50  # MIN_CONTENT_LENGTH - reject near-empty pages
    max_content_length: int = 50000  # MAX_CONTENT_LENGTH - truncate huge pages

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            api_key=_env("ZHIPU_API_KEY"),
            language=_env("LANGUAGE", "zh"),
            classifier_model=_env("CLASSIFIER_MODEL", DEFAULT_CLASSIFIER_MODEL),
            temperature=_env_float("TEMPERATURE", 0.3),
            max_tokens=_env_int("MAX_TOKENS", 2000),
            reader_base_url=_env("READER_BASE_URL", DEFAULT_READER_BASE_URL),
            fetch_timeout_seconds=_env_int("FETCH_TIMEOUT_SECONDS", 30),
            min_content_length=_env_int("MIN_CONTENT_LENGTH", 50),
            max_content_length=_env_int("MAX_CONTENT_LENGTH", 50000),
            log_dir=Path(_env("LOG_DIR", "log")),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Checks:
            - ZHIPU_API_KEY is set
            - Language is 'zh' or 'en'
            - Numeric values are in range

        Returns:
            Error message string if invalid, None if valid.
        """
        if not self.api_key:
            return "ZHIPU_API_KEY environment variable is required"
        if self.language not in ("zh", "en"):
            return f"Invalid LANGUAGE '{self.language}' - must be 'zh' or 'en'"
        if not 0.0 <= self.temperature <= 2.0:
            return "TEMPERATURE must be between 0 and 2"
        if self.max_tokens <= 0:
            return "MAX_TOKENS must be positive"
        if self.fetch_timeout_seconds <= 0:
            return "FETCH_TIMEOUT_SECONDS must be positive"
        if self.min_content_length < 0:
            return "MIN_CONTENT_LENGTH must be non-negative"
        if self.max_content_length <= self.min_content_length:
            return "MAX_CONTENT_LENGTH must be greater than MIN_CONTENT_LENGTH"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
