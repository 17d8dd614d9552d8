"""Integration test runner.

Builds a target, starts its dependencies, waits for readiness, runs the
tests and always tears everything down.
"""

from .errors import (
    BuildError,
    ConfigurationError,
    HarnessError,
    PreconditionStartError,
    ReadinessTimeoutError,
    RunError,
    StartError,
    StopError,
    TestsFailedError,
)
from .precondition import ComposeHandler, PreconditionHandler
from .readiness import wait_http_ready
from .runner import (
    IntegrationTestRunner,
    Phase,
    opt_base,
    opt_build_args,
    opt_build_command,
    opt_build_env,
    opt_compose,
    opt_cover_dir,
    opt_cover_env_var,
    opt_dump_logs,
    opt_no_run,
    opt_output,
    opt_precondition,
    opt_ready,
    opt_run_args,
    opt_run_env,
    opt_stop_timeout,
    opt_target,
    opt_test_func,
    opt_test_main,
    opt_wait_http_ready,
)

__version__ = "0.1.0"

__all__ = [
    "BuildError",
    "ComposeHandler",
    "ConfigurationError",
    "HarnessError",
    "IntegrationTestRunner",
    "Phase",
    "PreconditionHandler",
    "PreconditionStartError",
    "ReadinessTimeoutError",
    "RunError",
    "StartError",
    "StopError",
    "TestsFailedError",
    "opt_base",
    "opt_build_args",
    "opt_build_command",
    "opt_build_env",
    "opt_compose",
    "opt_cover_dir",
    "opt_cover_env_var",
    "opt_dump_logs",
    "opt_no_run",
    "opt_output",
    "opt_precondition",
    "opt_ready",
    "opt_run_args",
    "opt_run_env",
    "opt_stop_timeout",
    "opt_target",
    "opt_test_func",
    "opt_test_main",
    "opt_wait_http_ready",
    "wait_http_ready",
]
