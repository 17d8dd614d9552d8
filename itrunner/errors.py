"""Error taxonomy for integration test runs.

Every failure carries the phase it originated from so that an aggregated
RunError can report each contributing failure with its origin.
"""

from typing import Iterable, Optional


class HarnessError(Exception):
    """Base class for all harness failures."""

    phase = "harness"

    def __init__(self, message: str, phase: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if phase is not None:
            self.phase = phase

    def __str__(self) -> str:
        return self.message


class ConfigurationError(HarnessError):
    """A configuration option could not be applied."""
    phase = "configure"


class BuildError(HarnessError):
    """Compilation of the target failed."""
    phase = "build"

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output

    def __str__(self) -> str:
        if self.output:
            return f"{self.message}:\n{self.output.rstrip()}"
        return self.message


class PreconditionStartError(HarnessError):
    """A precondition handler failed to start."""
    phase = "precondition start"


class StartError(HarnessError):
    """The built binary could not be started."""
    phase = "binary start"


class ReadinessTimeoutError(HarnessError):
    """The system under test did not become ready in time."""
    phase = "readiness"

    def __init__(self, timeout: float, url: Optional[str] = None):
        target = f" waiting for {url}" if url else ""
        super().__init__(f"readiness deadline {timeout}s exceeded{target}")
        self.timeout = timeout
        self.url = url


class TestsFailedError(HarnessError):
    """A whole-process test entry point returned a non-zero code."""
    phase = "test"
    __test__ = False

    def __init__(self, code: int):
        super().__init__(f"tests have failed (exit code {code})")
        self.code = code


class StopError(HarnessError):
    """A binary or precondition could not be stopped cleanly."""
    phase = "stop"


class RunError(HarnessError):
    """Aggregated failure of an integration test run.

    Holds every failure recorded across phases, in the order they occurred.
    """

    phase = "run"

    def __init__(self, errors: Iterable[BaseException]):
        self.errors = list(errors)
        super().__init__(self._format())

    def has(self, kind: type) -> bool:
        """Whether any contained failure is an instance of ``kind``."""
        return any(isinstance(e, kind) for e in self.errors)

    def _format(self) -> str:
        if len(self.errors) == 1:
            return _describe(self.errors[0])
        lines = [f"{len(self.errors)} errors occurred:"]
        lines.extend(f"  * {_describe(e)}" for e in self.errors)
        return "\n".join(lines)


def _describe(error: BaseException) -> str:
    phase = getattr(error, "phase", type(error).__name__)
    return f"[{phase}] {error}"
