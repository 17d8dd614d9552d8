"""Configuration of an integration test run.

Each option is a function mutating a RunnerConfig. Options are applied in
order; the first one that fails aborts configuration.

Example:

    def test_app():
        itr = IntegrationTestRunner(
            opt_base(".."),
            opt_target("./cmd/app"),
            opt_compose("docker-compose.yaml"),
            opt_wait_http_ready("http://127.0.0.1:8080", timeout=10),
            opt_test_func(check_app),
        )
        itr.init_and_run()
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from ..binary.handler import BinaryHandler
from ..errors import ConfigurationError
from ..precondition.base import PreconditionHandler
from ..precondition.compose import ComposeHandler, ComposeOpt
from ..readiness.http_waiter import DEFAULT_INTERVAL, HttpReadiness
from .test_runner import TestFunc, TestMain, TestRunner


@dataclass
class RunnerConfig:
    """Everything an IntegrationTestRunner needs for one run."""
    base: Path = field(default_factory=Path.cwd)
    binary: BinaryHandler = field(default_factory=BinaryHandler)
    run_binary: bool = True
    pre_handlers: list[PreconditionHandler] = field(default_factory=list)
    ready: Optional[Callable[[], None]] = None
    test_runner: Optional[TestRunner] = None
    dump_logs_on_failure: bool = True


Opt = Callable[[RunnerConfig], None]


def opt_base(base: Union[str, Path]) -> Opt:
    """Set the directory every other path is resolved against.

    Should usually be the first option, since opt_compose resolves its file
    against the base at the time it is applied.
    """
    def opt(cfg: RunnerConfig) -> None:
        try:
            abs_base = Path(base).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(f"getting absolute path for base '{base}' failed: {e}") from e
        if not abs_base.is_dir():
            raise ConfigurationError(f"base '{base}' is not a directory")
        cfg.base = abs_base
        cfg.binary.base = abs_base
    return opt


def opt_target(target: str) -> Opt:
    """Set the compilation target, relative to the base."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.target = target
    return opt


def opt_output(output: str) -> Opt:
    """Set the output path of the compiled binary."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.bin = output
    return opt


def opt_build_command(*command: str) -> Opt:
    """Replace the compiler invocation (default ``go build``)."""
    def opt(cfg: RunnerConfig) -> None:
        if not command:
            raise ConfigurationError("build command must not be empty")
        cfg.binary.build_command = list(command)
    return opt


def opt_build_args(*args: str) -> Opt:
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.build_args.extend(args)
    return opt


def opt_run_args(*args: str) -> Opt:
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.run_args.extend(args)
    return opt


def opt_build_env(*env: str) -> Opt:
    """Add KEY=VALUE entries to the build environment."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.build_env.extend(_check_env(env))
    return opt


def opt_run_env(*env: str) -> Opt:
    """Add KEY=VALUE entries to the binary's run environment."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.run_env.extend(_check_env(env))
    return opt


def opt_cover_dir(cover_dir: str) -> Opt:
    """Direct the binary's coverage output to ``cover_dir``."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.cover_dir = cover_dir
    return opt


def opt_cover_env_var(name: str) -> Opt:
    """Environment variable carrying the coverage directory (default GOCOVERDIR)."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.binary.cover_env_var = name
    return opt


def opt_stop_timeout(seconds: float) -> Opt:
    """Grace period between SIGTERM and SIGKILL when stopping the binary."""
    def opt(cfg: RunnerConfig) -> None:
        if seconds <= 0:
            raise ConfigurationError(f"stop timeout must be positive, got {seconds}")
        cfg.binary.stop_timeout = seconds
    return opt


def opt_no_run() -> Opt:
    """Build the target but do not start it."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.run_binary = False
    return opt


def opt_test_main(main: Callable[[], Optional[int]]) -> Opt:
    """Wrap a whole-process test entry point returning a completion code.

    Example:

        itr = IntegrationTestRunner(
            opt_base(".."),
            opt_target("./cmd/app"),
            opt_test_main(lambda: pytest.main(["tests/integration"])),
        )
    """
    def opt(cfg: RunnerConfig) -> None:
        _set_test_runner(cfg, TestMain(main))
    return opt


def opt_test_func(fn: Callable, *args) -> Opt:
    """Wrap a single test function; its own failures reach the test framework."""
    def opt(cfg: RunnerConfig) -> None:
        _set_test_runner(cfg, TestFunc(fn, args))
    return opt


def opt_compose(compose_file: Union[str, Path], *opts: ComposeOpt) -> Opt:
    """Add a docker compose stack as a precondition for the tests."""
    def opt(cfg: RunnerConfig) -> None:
        path = cfg.base / compose_file
        if not path.is_file():
            raise ConfigurationError(f"failed to create new compose stack: {path} not found")
        cfg.pre_handlers.append(ComposeHandler(path, *opts))
    return opt


def opt_precondition(handler: PreconditionHandler) -> Opt:
    """Add any start/stop capable collaborator as a precondition."""
    def opt(cfg: RunnerConfig) -> None:
        if not isinstance(handler, PreconditionHandler):
            raise ConfigurationError(f"{handler!r} does not provide start() and stop()")
        cfg.pre_handlers.append(handler)
    return opt


def opt_wait_http_ready(url: str, timeout: float, interval: float = DEFAULT_INTERVAL) -> Opt:
    """Expect 200 OK from ``url`` before tests can be started."""
    def opt(cfg: RunnerConfig) -> None:
        if timeout <= 0:
            raise ConfigurationError(f"readiness timeout must be positive, got {timeout}")
        cfg.ready = HttpReadiness(url, timeout, interval=interval)
    return opt


def opt_ready(probe: Callable[[], None]) -> Opt:
    """Use a custom readiness probe; it raises when the system is not ready."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.ready = probe
    return opt


def opt_dump_logs(enabled: bool = True) -> Opt:
    """Log precondition output when the run fails."""
    def opt(cfg: RunnerConfig) -> None:
        cfg.dump_logs_on_failure = enabled
    return opt


def _set_test_runner(cfg: RunnerConfig, runner: TestRunner) -> None:
    if cfg.test_runner is not None:
        raise ConfigurationError(
            f"test runner already set to {type(cfg.test_runner).__name__}, "
            f"cannot also use {type(runner).__name__}"
        )
    cfg.test_runner = runner


def _check_env(env: tuple[str, ...]) -> tuple[str, ...]:
    for entry in env:
        key, sep, _ = entry.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"invalid environment entry '{entry}', expected KEY=VALUE")
    return env
