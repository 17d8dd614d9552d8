"""Harness file data models.

A harness file describes one integration test run in YAML so it can be
launched from the command line.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..binary.handler import merge_env
from ..precondition import compose as c
from ..runner import options as o


@dataclass
class BuildSection:
    """How the target is compiled."""
    command: list[str] = field(default_factory=lambda: ["go", "build"])
    args: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)


@dataclass
class RunSection:
    """How the built binary is started."""
    args: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)
    cover_dir: Optional[str] = None
    cover_env_var: Optional[str] = None
    stop_timeout: Optional[float] = None
    enabled: bool = True


@dataclass
class ComposeSection:
    """A compose stack started before the tests."""
    file: str
    services: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    env_file: Optional[str] = None
    project: Optional[str] = None
    build: bool = False
    remove_volumes: bool = False

    def compose_opts(self) -> list[c.ComposeOpt]:
        opts: list[c.ComposeOpt] = []
        if self.services:
            opts.append(c.with_services(*self.services))
        if self.env:
            opts.append(c.with_env(**{str(k): str(v) for k, v in self.env.items()}))
        if self.env_file:
            opts.append(c.with_env_file(self.env_file))
        if self.project:
            opts.append(c.with_project_name(self.project))
        if self.build:
            opts.append(c.with_build())
        if self.remove_volumes:
            opts.append(c.with_remove_volumes())
        return opts


@dataclass
class ReadySection:
    """HTTP readiness probe."""
    url: str
    timeout: float = 10.0
    interval: float = 0.1


@dataclass
class TestSection:
    """Test command, run once the system is ready."""
    command: list[str]
    env: list[str] = field(default_factory=list)
    __test__ = False


@dataclass
class Harness:
    """A complete harness file."""
    test: TestSection
    base: str = "."
    target: Optional[str] = None
    output: Optional[str] = None
    build: BuildSection = field(default_factory=BuildSection)
    run: RunSection = field(default_factory=RunSection)
    compose: list[ComposeSection] = field(default_factory=list)
    ready: Optional[ReadySection] = None
    source: str = "<inline>"

    def base_path(self, relative_to: Optional[Path] = None) -> Path:
        """Base directory, resolved against the harness file's directory."""
        root = relative_to or Path(self.source).parent
        return (root / self.base).resolve()

    def to_options(self, relative_to: Optional[Path] = None) -> list[o.Opt]:
        """Translate the harness into runner options, base first."""
        base = self.base_path(relative_to)
        opts: list[o.Opt] = [o.opt_base(base)]

        if self.target:
            opts.append(o.opt_target(self.target))
            opts.append(o.opt_build_command(*self.build.command))
            if self.output:
                opts.append(o.opt_output(self.output))
            if self.build.args:
                opts.append(o.opt_build_args(*self.build.args))
            if self.build.env:
                opts.append(o.opt_build_env(*self.build.env))
            if self.run.args:
                opts.append(o.opt_run_args(*self.run.args))
            if self.run.env:
                opts.append(o.opt_run_env(*self.run.env))
            if self.run.cover_dir:
                opts.append(o.opt_cover_dir(self.run.cover_dir))
            if self.run.cover_env_var:
                opts.append(o.opt_cover_env_var(self.run.cover_env_var))
            if self.run.stop_timeout is not None:
                opts.append(o.opt_stop_timeout(self.run.stop_timeout))
            if not self.run.enabled:
                opts.append(o.opt_no_run())

        for stack in self.compose:
            opts.append(o.opt_compose(stack.file, *stack.compose_opts()))

        if self.ready:
            opts.append(o.opt_wait_http_ready(self.ready.url, self.ready.timeout, self.ready.interval))

        opts.append(o.opt_test_main(CommandMain(self.test.command, base, self.test.env)))
        return opts


@dataclass
class CommandMain:
    """Runs a test command in a subprocess and returns its exit code."""
    command: list[str]
    cwd: Path
    env: list[str] = field(default_factory=list)

    def __call__(self) -> int:
        return subprocess.run(self.command, cwd=self.cwd, env=merge_env(self.env)).returncode


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of harness validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
