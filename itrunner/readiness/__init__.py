"""Readiness module - wait for the system under test to come up."""

from .http_waiter import (
    DEFAULT_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    HttpReadiness,
    is_ready,
    wait_http_ready,
)

__all__ = [
    "DEFAULT_INTERVAL",
    "DEFAULT_REQUEST_TIMEOUT",
    "HttpReadiness",
    "is_ready",
    "wait_http_ready",
]
