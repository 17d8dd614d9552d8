"""Docker compose stack as a test precondition.

Drives the ``docker compose`` CLI:
- up -d --wait  - start the stack
- down          - tear it down
- logs          - collect container output for diagnostics
"""

import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

import structlog

from ..binary.handler import merge_env
from ..errors import PreconditionStartError, StopError

logger = structlog.get_logger(__name__)

DOCKER_COMPOSE_CMD = ["docker", "compose"]


class ComposeHandler:
    """Starts and stops a compose-defined service stack."""

    def __init__(
        self,
        compose_file: Union[str, Path],
        *opts: "ComposeOpt",
        command: Optional[list[str]] = None,
    ):
        """Initialize compose handler.

        Args:
            compose_file: Path to the compose definition.
            *opts: ComposeOpt hooks applied in order.
            command: Compose CLI prefix. Default: ``docker compose``.
        """
        self.compose_file = Path(compose_file)
        self.command = list(command or DOCKER_COMPOSE_CMD)
        self.env: dict[str, str] = {}
        self.env_file: Optional[Path] = None
        self.services: list[str] = []
        self.project_name: Optional[str] = None
        self.build = False
        self.remove_volumes = False

        for opt in opts:
            opt(self)

    def __repr__(self) -> str:
        return f"ComposeHandler({str(self.compose_file)!r})"

    def start(self) -> None:
        """Bring the stack up and wait for its services.

        Raises:
            PreconditionStartError: If the compose backend fails.
        """
        args = ["up", "-d", "--wait"]
        if self.build:
            args.append("--build")
        args.extend(self.services)

        logger.info("compose up", file=str(self.compose_file), services=self.services or "all")
        try:
            result = self._compose(args)
        except OSError as e:
            raise PreconditionStartError(f"failed to run compose for {self.compose_file}: {e}") from e

        if result.returncode != 0:
            raise PreconditionStartError(
                f"compose up for {self.compose_file} failed with exit code "
                f"{result.returncode}: {_diagnostic(result)}"
            )

    def stop(self) -> None:
        """Tear the stack down.

        Raises:
            StopError: If the compose backend fails.
        """
        args = ["down", "--remove-orphans"]
        if self.remove_volumes:
            args.append("-v")

        logger.info("compose down", file=str(self.compose_file))
        try:
            result = self._compose(args)
        except OSError as e:
            raise StopError(f"failed to run compose for {self.compose_file}: {e}", phase="precondition stop") from e

        if result.returncode != 0:
            raise StopError(
                f"compose down for {self.compose_file} failed with exit code "
                f"{result.returncode}: {_diagnostic(result)}",
                phase="precondition stop",
            )

    def logs(self) -> str:
        """Container output of the stack, or the backend's diagnostic."""
        try:
            result = self._compose(["logs", "--no-color", *self.services])
        except OSError as e:
            return f"failed to run compose logs: {e}"
        if result.returncode != 0:
            return _diagnostic(result)
        return result.stdout

    def _compose(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = [*self.command, "-f", str(self.compose_file)]
        if self.project_name:
            cmd.extend(["-p", self.project_name])
        if self.env_file:
            cmd.extend(["--env-file", str(self.env_file)])
        cmd.extend(args)

        env = merge_env([f"{k}={v}" for k, v in self.env.items()])
        return subprocess.run(
            cmd,
            cwd=self.compose_file.parent,
            env=env,
            capture_output=True,
            text=True,
        )


ComposeOpt = Callable[[ComposeHandler], None]


def with_env(**env: str) -> ComposeOpt:
    """Set variables in the environment compose interpolates from."""
    def opt(c: ComposeHandler) -> None:
        c.env.update({k: str(v) for k, v in env.items()})
    return opt


def with_env_file(path: Union[str, Path]) -> ComposeOpt:
    """Use an alternate env file (relative to the compose file)."""
    def opt(c: ComposeHandler) -> None:
        c.env_file = c.compose_file.parent / path
    return opt


def with_services(*services: str) -> ComposeOpt:
    """Only bring up the named services."""
    def opt(c: ComposeHandler) -> None:
        c.services.extend(services)
    return opt


def with_project_name(name: str) -> ComposeOpt:
    def opt(c: ComposeHandler) -> None:
        c.project_name = name
    return opt


def with_build() -> ComposeOpt:
    """Build images before starting containers."""
    def opt(c: ComposeHandler) -> None:
        c.build = True
    return opt


def with_remove_volumes() -> ComposeOpt:
    """Remove named volumes on teardown."""
    def opt(c: ComposeHandler) -> None:
        c.remove_volumes = True
    return opt


def _diagnostic(result: subprocess.CompletedProcess) -> str:
    return (result.stderr or result.stdout or "").strip() or "no output"
