"""
Route Utilities
===============
Runs blocking work off the event loop with a deadline.
"""
import asyncio
import logging
from typing import Any, Callable

from fastapi.concurrency import run_in_threadpool

from healthmonitor.errors import ServiceUnavailable

logger = logging.getLogger(__name__)


async def run_with_timeout(func: Callable[..., Any], *args: Any, timeout: float,
                           description: str = "Operation") -> Any:
    """
    Run a blocking call in the threadpool, bounded by `timeout` seconds.

    The worker thread is not cancelled on timeout; the caller just stops
    waiting for it.
    """
    try:
        return await asyncio.wait_for(run_in_threadpool(func, *args), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{description} timed out after {timeout}s")
        raise ServiceUnavailable(f"{description} timed out")
