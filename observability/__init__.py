"""Observability infrastructure: logging and optional tracing.

setup_logging:
    Console + rotating file logging, text or JSON, with run-id context.

setup_tracing / trace_operation:
    Optional Logfire spans with PydanticAI instrumentation.

Enable tracing via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional

Example:
    >>> from observability import setup_logging, trace_operation
    >>> setup_logging(config)
    >>> with trace_operation("analysis_run"):
    ...     pass
"""

from observability.logging import setup_logging, set_run_context, clear_context
from observability.tracing import setup_tracing, trace_operation, TracingContext

__all__ = [
    "setup_logging",
    "set_run_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
