"""Integration test runner - orchestrates one test run.

Coordinates the full lifecycle:
1. Build the target binary
2. Start preconditions (compose stacks, custom handlers)
3. Start the binary
4. Wait for readiness
5. Run the test body
6. Stop the binary and every started precondition, whatever happened
7. Raise every recorded failure as one RunError
"""

from enum import Enum

import structlog

from ..errors import (
    BuildError,
    ConfigurationError,
    HarnessError,
    PreconditionStartError,
    StopError,
    TestsFailedError,
)
from ..precondition.base import LogSource, PreconditionHandler
from .error_collector import ErrorCollector
from .options import Opt, RunnerConfig
from .test_runner import TestMain

logger = structlog.get_logger(__name__)


class Phase(str, Enum):
    """Last phase a run has reached."""
    CONFIGURED = "configured"
    BUILT = "built"
    PRECONDITIONS_STARTED = "preconditions_started"
    BINARY_STARTED = "binary_started"
    READY = "ready"
    TEST_RAN = "test_ran"
    CLEANED_UP = "cleaned_up"
    DONE = "done"


class IntegrationTestRunner:
    """Runs a test body against a freshly built and started system.

    Cleanup is unconditional: every precondition that was started is stopped
    exactly once and the binary is terminated, even when the build of the
    environment or the tests themselves failed.
    """

    def __init__(self, *opts: Opt):
        """Apply options in order.

        Raises:
            ConfigurationError: On the first option that fails, or when no
                test runner was configured.
        """
        self.config = RunnerConfig()
        for opt in opts:
            try:
                opt(self.config)
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(f"applying option failed: {e}") from e

        if self.config.test_runner is None:
            raise ConfigurationError("no test runner configured, use opt_test_main or opt_test_func")

        self.phase = Phase.CONFIGURED
        self._started: list[PreconditionHandler] = []

    @property
    def binary(self):
        return self.config.binary

    def init_and_run(self) -> None:
        """Execute the full run.

        Raises:
            RunError: With every failure recorded across all phases.
            Exception: Whatever a TestFunc body raised, after cleanup;
                cleanup failures are attached as a note.
        """
        errors = ErrorCollector()
        self._started = []
        self.phase = Phase.CONFIGURED

        if self.binary.target:
            try:
                self.binary.build()
            except BuildError as e:
                errors.add(e)
                errors.raise_if_any()
        self.phase = Phase.BUILT

        try:
            self._prepare(errors)
            if not errors.has_errors:
                self._run_tests(errors)
        except BaseException as exc:
            self._cleanup(errors, failed=True)
            if errors.has_errors:
                exc.add_note(str(errors.combined()))
            raise

        self._cleanup(errors, failed=errors.has_errors)
        self.phase = Phase.DONE
        errors.raise_if_any()
        logger.info("run succeeded")

    def _prepare(self, errors: ErrorCollector) -> None:
        """Start preconditions, then the binary, then wait for readiness.

        Stops at the first failure; what was started is cleaned up later.
        """
        for handler in self.config.pre_handlers:
            try:
                handler.start()
            except PreconditionStartError as e:
                errors.add(e)
                return
            except Exception as e:
                wrapped = PreconditionStartError(f"starting {handler!r} failed: {e}")
                wrapped.__cause__ = e
                errors.add(wrapped)
                return
            self._started.append(handler)
            logger.info("precondition started", handler=repr(handler))
        self.phase = Phase.PRECONDITIONS_STARTED

        if self.binary.target and self.config.run_binary:
            try:
                self.binary.run()
            except HarnessError as e:
                errors.add(e)
                return
        self.phase = Phase.BINARY_STARTED

        if self.config.ready is not None:
            try:
                self.config.ready()
            except HarnessError as e:
                errors.add(e)
                return
            except Exception as e:
                wrapped = HarnessError(f"readiness probe failed: {e}", phase="readiness")
                wrapped.__cause__ = e
                errors.add(wrapped)
                return
        self.phase = Phase.READY

    def _run_tests(self, errors: ErrorCollector) -> None:
        runner = self.config.test_runner
        logger.info("running tests", runner=type(runner).__name__)
        if isinstance(runner, TestMain):
            try:
                runner.run()
            except TestsFailedError as e:
                errors.add(e)
            except Exception as e:
                wrapped = HarnessError(f"test entry point crashed: {e}", phase="test")
                wrapped.__cause__ = e
                errors.add(wrapped)
        else:
            runner.run()
        self.phase = Phase.TEST_RAN

    def _cleanup(self, errors: ErrorCollector, failed: bool) -> None:
        """Stop the binary and every started precondition, newest first.

        Used for the partial rollback after a failed precondition start as
        well as for the full teardown. Every stop is attempted.
        """
        if failed and self.config.dump_logs_on_failure:
            self._dump_logs()

        try:
            self.binary.stop()
        except StopError as e:
            errors.add(e)
        except Exception as e:
            wrapped = StopError(f"stopping binary failed: {e}", phase="binary stop")
            wrapped.__cause__ = e
            errors.add(wrapped)

        while self._started:
            handler = self._started.pop()
            try:
                handler.stop()
            except StopError as e:
                errors.add(e)
            except Exception as e:
                wrapped = StopError(f"stopping {handler!r} failed: {e}", phase="precondition stop")
                wrapped.__cause__ = e
                errors.add(wrapped)
            else:
                logger.info("precondition stopped", handler=repr(handler))

        self.phase = Phase.CLEANED_UP

    def _dump_logs(self) -> None:
        for handler in self._started:
            if not isinstance(handler, LogSource):
                continue
            try:
                output = handler.logs()
            except Exception as e:
                logger.warning("collecting precondition logs failed", handler=repr(handler), error=str(e))
                continue
            logger.info("precondition logs", handler=repr(handler), logs=output)
