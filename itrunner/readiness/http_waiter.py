"""HTTP readiness probe.

Polls a URL at a fixed interval until it answers 200 OK or the timeout
elapses. Connection failures mean "not ready yet", never fatal.
"""

import time
from dataclasses import dataclass
from typing import Optional

import requests
import structlog

from ..errors import ReadinessTimeoutError

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL = 0.1
DEFAULT_REQUEST_TIMEOUT = 1.0


def is_ready(url: str, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> bool:
    """Check if ``url`` answers with status 200.

    Args:
        url: URL to GET.
        timeout: Request timeout in seconds.

    Returns:
        True only for a 200 response.
    """
    try:
        with requests.get(url, timeout=timeout) as response:
            return response.status_code == requests.codes.ok
    except requests.RequestException:
        return False


def wait_http_ready(
    url: str,
    timeout: float,
    interval: float = DEFAULT_INTERVAL,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> float:
    """Poll ``url`` until it is ready.

    Args:
        url: URL to probe.
        timeout: Maximum wait time in seconds.
        interval: Delay between probes in seconds.
        request_timeout: Upper bound for a single probe.

    Returns:
        Seconds waited.

    Raises:
        ReadinessTimeoutError: If no 200 was observed within ``timeout``.
    """
    started = time.monotonic()
    attempts = 0

    while True:
        attempts += 1
        remaining = timeout - (time.monotonic() - started)
        if is_ready(url, timeout=max(min(request_timeout, remaining), interval)):
            break

        elapsed = time.monotonic() - started
        if elapsed > timeout:
            logger.warning("readiness timed out", url=url, timeout=timeout, attempts=attempts)
            raise ReadinessTimeoutError(timeout, url)
        time.sleep(interval)

    elapsed = time.monotonic() - started
    logger.info("system ready", url=url, waited=round(elapsed, 3), attempts=attempts)
    return elapsed


@dataclass
class HttpReadiness:
    """Readiness probe bound to a URL, callable by the orchestrator."""
    url: str
    timeout: float
    interval: float = DEFAULT_INTERVAL
    request_timeout: Optional[float] = None

    def __call__(self) -> None:
        wait_http_ready(
            self.url,
            self.timeout,
            interval=self.interval,
            request_timeout=self.request_timeout or DEFAULT_REQUEST_TIMEOUT,
        )
