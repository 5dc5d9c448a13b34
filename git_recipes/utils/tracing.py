"""
Helpers to instrument external service calls with Opik tracing.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

import opik

from git_recipes.config import OPIK_PROJECT_NAME, get_opik_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

_opik_client: Optional[opik.Opik] = None


def get_opik_client() -> opik.Opik:
    """Return the shared Opik client, creating it on first use."""
    global _opik_client
    if _opik_client is None:
        config = get_opik_config()
        _opik_client = opik.Opik(
            project_name=OPIK_PROJECT_NAME,
            workspace=config.workspace,
            api_key=config.api_key,
            host=config.url_override,
        )
    return _opik_client


def reset_opik_client_for_testing() -> None:
    global _opik_client
    _opik_client = None


def _finish_trace(client: opik.Opik, trace, operation: str, output: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    # Telemetry failures are logged, never raised.
    try:
        trace.update(output=output, metadata=metadata)
        trace.end()
        client.flush()
    except Exception:
        logger.warning("Failed to flush Opik trace for %s", operation, exc_info=True)


def track_external_operation(
    operation: str,
    execute: Callable[[], T],
    input: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
) -> T:
    """
    Run `execute` inside an Opik trace named `operation`.

    Success or failure, duration and the error type are recorded on the trace,
    which is ended and flushed before the result is returned or the original
    exception re-raised.
    """
    client = get_opik_client()
    started = time.monotonic()
    trace = client.trace(name=operation, input=input, metadata=metadata, tags=tags)

    try:
        result = execute()
    except Exception as e:
        _finish_trace(
            client,
            trace,
            operation,
            output={"success": False, "error": str(e)},
            metadata={
                **(metadata or {}),
                "duration_ms": int((time.monotonic() - started) * 1000),
                "error_type": type(e).__name__,
            },
        )
        raise

    _finish_trace(
        client,
        trace,
        operation,
        output={"success": True},
        metadata={
            **(metadata or {}),
            "duration_ms": int((time.monotonic() - started) * 1000),
        },
    )
    return result
