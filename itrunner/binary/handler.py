"""Build, run and stop the program under test.

The handler compiles a target into an output binary with the configured
toolchain, runs it as a subprocess and terminates it during cleanup.
"""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from ..errors import BuildError, StartError, StopError

logger = structlog.get_logger(__name__)

DEFAULT_BUILD_COMMAND = ["go", "build"]
DEFAULT_COVER_ENV_VAR = "GOCOVERDIR"
DEFAULT_STOP_TIMEOUT = 10.0


def merge_env(entries: list[str], base: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Overlay ``KEY=VALUE`` entries on a copy of ``base`` (os.environ by default)."""
    env = dict(os.environ if base is None else base)
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid environment entry '{entry}', expected KEY=VALUE")
        env[key] = value
    return env


@dataclass
class BinaryHandler:
    """Builds the target and owns the resulting process."""
    base: Path = field(default_factory=Path.cwd)
    target: Optional[str] = None
    bin: str = "bin/app"
    build_command: list[str] = field(default_factory=lambda: list(DEFAULT_BUILD_COMMAND))
    build_args: list[str] = field(default_factory=list)
    build_env: list[str] = field(default_factory=list)
    run_args: list[str] = field(default_factory=list)
    run_env: list[str] = field(default_factory=list)
    cover_dir: Optional[str] = None
    cover_env_var: str = DEFAULT_COVER_ENV_VAR
    stop_timeout: float = DEFAULT_STOP_TIMEOUT

    process: Optional[subprocess.Popen] = field(default=None, init=False, repr=False)
    _built: bool = field(default=False, init=False, repr=False)

    @property
    def bin_path(self) -> Path:
        """Absolute path of the build artifact."""
        return (self.base / self.bin).resolve()

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def build(self) -> Path:
        """Compile the target into the output binary.

        Returns:
            Path to the built binary.

        Raises:
            BuildError: If the compiler cannot be run or exits non-zero.
        """
        if not self.target:
            raise BuildError("no build target configured")

        try:
            self.bin_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildError(f"cannot create output directory {self.bin_path.parent}: {e}") from e

        cmd = [
            *self.build_command,
            *self.build_args,
            "-o",
            str(self.bin_path),
            self.target,
        ]
        logger.info("build started", target=self.target, output=str(self.bin_path))

        try:
            env = merge_env(self.build_env)
            result = subprocess.run(
                cmd,
                cwd=self.base,
                env=env,
                capture_output=True,
                text=True,
            )
        except (OSError, ValueError) as e:
            raise BuildError(f"failed to run build command {cmd[0]!r}: {e}") from e

        if result.returncode != 0:
            raise BuildError(
                f"building {self.target} failed with exit code {result.returncode}",
                output=(result.stderr or "") + (result.stdout or ""),
            )

        self._built = True
        logger.info("build finished", output=str(self.bin_path))
        return self.bin_path

    def run(self) -> subprocess.Popen:
        """Start the built binary.

        Returns:
            Handle of the running process.

        Raises:
            StartError: If the binary was not built, is already running or
                cannot be spawned.
        """
        if not self._built:
            raise StartError("binary has not been built")
        if self.is_running:
            raise StartError(f"binary is already running (pid {self.pid})")

        try:
            env = merge_env(self.run_env)
            if self.cover_dir:
                cover_path = (self.base / self.cover_dir).resolve()
                cover_path.mkdir(parents=True, exist_ok=True)
                env[self.cover_env_var] = str(cover_path)

            self.process = subprocess.Popen(
                [str(self.bin_path), *self.run_args],
                cwd=self.base,
                env=env,
            )
        except (OSError, ValueError) as e:
            raise StartError(f"failed to start {self.bin_path}: {e}") from e

        logger.info("binary started", binary=str(self.bin_path), pid=self.process.pid)
        return self.process

    def stop(self) -> Optional[int]:
        """Terminate the running process and wait for it to exit.

        Does nothing when the binary was never started or already stopped.

        Returns:
            Exit code of the process, or None if nothing was running.

        Raises:
            StopError: If the process cannot be signalled or reaped.
        """
        process = self.process
        if process is None:
            return None

        try:
            if process.poll() is None:
                process.terminate()
                try:
                    process.wait(timeout=self.stop_timeout)
                except subprocess.TimeoutExpired:
                    logger.warning(
                        "binary ignored SIGTERM, killing",
                        pid=process.pid,
                        timeout=self.stop_timeout,
                    )
                    process.kill()
                    process.wait(timeout=self.stop_timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise StopError(f"failed to stop binary (pid {process.pid}): {e}", phase="binary stop") from e

        self.process = None
        logger.info("binary stopped", pid=process.pid, returncode=process.returncode)
        return process.returncode
