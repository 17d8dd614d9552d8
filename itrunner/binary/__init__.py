"""Binary module - build and process lifecycle of the program under test."""

from .handler import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_COVER_ENV_VAR,
    BinaryHandler,
    merge_env,
)

__all__ = [
    "DEFAULT_BUILD_COMMAND",
    "DEFAULT_COVER_ENV_VAR",
    "BinaryHandler",
    "merge_env",
]
