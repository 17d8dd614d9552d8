"""Runner module - test run orchestration."""

from .error_collector import ErrorCollector
from .options import (
    Opt,
    RunnerConfig,
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
from .orchestrator import IntegrationTestRunner, Phase
from .test_runner import TestFunc, TestMain, TestRunner

__all__ = [
    "ErrorCollector",
    "IntegrationTestRunner",
    "Opt",
    "Phase",
    "RunnerConfig",
    "TestFunc",
    "TestMain",
    "TestRunner",
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
]
