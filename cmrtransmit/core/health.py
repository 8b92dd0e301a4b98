"""Runs application health checks with a timeout so that a hung dependency reports
as unhealthy instead of blocking the caller."""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, Optional

from cmrtransmit.core.logging_setup import DEFAULT_LOGGER_NAME

DEFAULT_HEALTH_CHECK_TIMEOUT_MS = 10000

# Health checks are I/O bound and short lived
_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="cmrtransmit-health")


def health_timeout_ms(health_check_timeout_seconds: int, extra_seconds: int = 2) -> int:
    """Returns the timeout used when checking the health of a dependency. Applications
    that report the health of their own dependencies are given extra_seconds more than
    the health check timeout so that their answer can arrive first."""
    return 1000 * (health_check_timeout_seconds + extra_seconds)


def get_health(
    health_fn: Callable[[], Dict[str, Any]],
    timeout_ms: int = DEFAULT_HEALTH_CHECK_TIMEOUT_MS,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Calls health_fn and returns its result, a dictionary with an `ok?` key and either
    `dependencies` or `problem`.

    Arguments:
        health_fn: A function with no arguments returning the health.
        timeout_ms: How long to wait for health_fn.
        logger: Receives a warning when health_fn times out or raises. Defaults to the
            cmrtransmit_default logger.

    Returns:
        The health, or `{"ok?": False, "problem": ...}` when health_fn times out or
        raises.
    """
    logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
    future = _executor.submit(health_fn)
    try:
        return future.result(timeout=timeout_ms / 1000.0)
    except FutureTimeoutError:
        future.cancel()
        logger.warning("Health check timed out after [%d] ms", timeout_ms)
        return {
            "ok?": False,
            "problem": f"Health check timed out after [{timeout_ms}] ms",
        }
    except Exception as ex:
        logger.warning("Health check failed: %s", ex)
        return {
            "ok?": False,
            "problem": f"Unable to get health, caught exception: {ex}",
        }
