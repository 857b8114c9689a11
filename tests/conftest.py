"""Shared fixtures for the detector tests.

Real model requests are disabled for the whole session; classifier tests
drive the PydanticAI agent through a FunctionModel instead
(see tests/helpers.py).
"""

import logging
from pathlib import Path

import pytest
from pydantic_ai import models as ai_models

from config import Config
from observability.logging import clear_context

ai_models.ALLOW_MODEL_REQUESTS = False


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Configured detector with English prompts and labels."""
    return Config(
        api_key="test-key",
        language="en",
        log_dir=tmp_path / "log",
    )


@pytest.fixture
def unconfigured(tmp_path: Path) -> Config:
    """Detector configuration with no API key."""
    return Config(api_key="", language="en", log_dir=tmp_path / "log")


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way it was after setup_logging tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    clear_context()
