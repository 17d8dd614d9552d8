"""Harness validator.

Validates parsed Harness objects before anything is built or started.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from .schema import Harness, ValidationError, ValidationResult


def validate_harness(harness: Harness, relative_to: Optional[Path] = None) -> ValidationResult:
    """Validate a parsed Harness object.

    Checks:
    - Base directory and compose files exist
    - Env entries are KEY=VALUE
    - Readiness URL and timings
    - Test command is not empty

    Args:
        harness: Parsed Harness to validate.
        relative_to: Directory the base is resolved against. Defaults to
            the harness file's directory.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    base = harness.base_path(relative_to)
    if not base.is_dir():
        errors.append(ValidationError(
            path="base",
            message=f"Base directory '{base}' does not exist.",
        ))

    _validate_binary(harness, errors, warnings)
    _validate_compose(harness, base, errors)
    _validate_ready(harness, errors, warnings)

    if not harness.test.command:
        errors.append(ValidationError(
            path="test.command",
            message="'command' must not be empty.",
        ))
    _validate_env(harness.test.env, "test.env", errors)

    if not harness.target and not harness.compose:
        warnings.append(ValidationError(
            path="target",
            message="No target and no compose stack. Tests run without a managed system.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_binary(
    harness: Harness,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    if not harness.target:
        if harness.run.args or harness.run.env or harness.run.cover_dir:
            warnings.append(ValidationError(
                path="run",
                message="'run' settings are ignored without a 'target'.",
                severity="warning",
            ))
        return

    if not harness.build.command:
        errors.append(ValidationError(
            path="build.command",
            message="'command' must not be empty.",
        ))
    _validate_env(harness.build.env, "build.env", errors)
    _validate_env(harness.run.env, "run.env", errors)

    if harness.run.stop_timeout is not None and harness.run.stop_timeout <= 0:
        errors.append(ValidationError(
            path="run.stop_timeout",
            message=f"Stop timeout must be positive, got {harness.run.stop_timeout}.",
        ))


def _validate_compose(
    harness: Harness,
    base: Path,
    errors: list[ValidationError],
) -> None:
    for i, stack in enumerate(harness.compose):
        if not (base / stack.file).is_file():
            errors.append(ValidationError(
                path=f"compose[{i}].file",
                message=f"Compose file '{stack.file}' not found under {base}.",
            ))


def _validate_ready(
    harness: Harness,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    ready = harness.ready
    if ready is None:
        return

    parsed = urlparse(ready.url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors.append(ValidationError(
            path="ready.url",
            message=f"Invalid readiness URL '{ready.url}'. Expected http(s)://host[:port]/path.",
        ))

    if ready.timeout <= 0:
        errors.append(ValidationError(
            path="ready.timeout",
            message=f"Timeout must be positive, got {ready.timeout}.",
        ))
    if ready.interval <= 0:
        errors.append(ValidationError(
            path="ready.interval",
            message=f"Interval must be positive, got {ready.interval}.",
        ))
    elif ready.interval > ready.timeout:
        warnings.append(ValidationError(
            path="ready.interval",
            message="Interval is longer than the timeout; only one probe will run.",
            severity="warning",
        ))


def _validate_env(entries: list[str], path: str, errors: list[ValidationError]) -> None:
    for i, entry in enumerate(entries):
        key, sep, _ = entry.partition("=")
        if not sep or not key:
            errors.append(ValidationError(
                path=f"{path}[{i}]",
                message=f"Invalid environment entry '{entry}'. Expected KEY=VALUE.",
            ))
