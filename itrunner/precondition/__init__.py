"""Precondition module - dependencies started before tests run."""

from .base import LogSource, PreconditionHandler
from .compose import (
    DOCKER_COMPOSE_CMD,
    ComposeHandler,
    ComposeOpt,
    with_build,
    with_env,
    with_env_file,
    with_project_name,
    with_remove_volumes,
    with_services,
)

__all__ = [
    "LogSource",
    "PreconditionHandler",
    "DOCKER_COMPOSE_CMD",
    "ComposeHandler",
    "ComposeOpt",
    "with_build",
    "with_env",
    "with_env_file",
    "with_project_name",
    "with_remove_volumes",
    "with_services",
]
