"""
Shared utilities for the application.
"""

import asyncio
import json
import time
from typing import Any, Awaitable, Dict, Optional, TypeVar

from starlette.requests import Request

from app.core.logging import get_logger
from app.core.exceptions import ClientDisconnectedError

logger = get_logger(__name__)

T = TypeVar('T')


def to_json_text(value: Any) -> str:
    """
    Serialize a value to compact JSON for embedding in a prompt.

    Args:
        value: Any JSON-compatible value

    Returns:
        JSON text without insignificant whitespace
    """
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not valid JSON and cannot be rendered back to the caller
    raise ValueError(f"Non-finite number {name} in response")


def load_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse model output that is expected to be a JSON object.

    Args:
        text: Raw text returned by the model

    Returns:
        Parsed object

    Raises:
        ValueError: If the text is empty, not JSON, not a JSON object, or holds NaN/Infinity
    """
    if not text or not text.strip():
        raise ValueError("Empty response text")

    obj = json.loads(text, parse_constant=_reject_constant)  # json.JSONDecodeError is a ValueError

    if not isinstance(obj, dict):
        raise ValueError(f"Expected a JSON object, got {type(obj).__name__}")
    return obj


async def run_gated(gate: asyncio.Semaphore, awaitable: Awaitable[T]) -> T:
    """Run an awaitable while holding a slot of the semaphore."""
    async with gate:
        return await awaitable


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval: float = 0.5,
) -> T:
    """
    Await a coroutine, cancelling it if the HTTP client disconnects first.

    Args:
        request: Incoming request whose connection is watched
        awaitable: Work to run on behalf of the request
        poll_interval: Seconds between disconnect checks

    Returns:
        The awaitable's result

    Raises:
        ClientDisconnectedError: If the client went away before the work finished
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                break
    except asyncio.CancelledError:
        task.cancel()
        raise

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass

    logger.info(
        f"Client disconnected, cancelled work for {request.url.path}",
        extra={"path": request.url.path, "method": request.method}
    )
    raise ClientDisconnectedError(
        "Client disconnected before the response was ready",
        error_code="CLIENT_DISCONNECTED"
    )


class Timer:
    """Context manager for timing operations."""

    def __init__(self, name: str = "operation"):
        self.name = name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()
        duration = self.end_time - self.start_time
        logger.info(f"{self.name} completed in {duration:.4f} seconds")

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None
