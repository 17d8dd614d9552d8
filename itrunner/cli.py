"""CLI entry point for the integration test runner.

    itrunner run <harness.yaml> [options]
    itrunner validate <harness.yaml>
"""

import json
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .errors import ConfigurationError, RunError
from .harness import parse_harness, validate_harness
from .log import setup_logging
from .reporting import JsonReporter
from .runner import IntegrationTestRunner


@click.group()
@click.version_option(package_name="itrunner")
def main():
    """Integration test runner: build, start, wait, test, tear down."""


@main.command()
@click.argument("harness_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--base", type=click.Path(file_okay=False, path_type=Path), help="Override the harness base directory.")
@click.option("--timeout", type=float, help="Override the readiness timeout in seconds.")
@click.option("--save-report", is_flag=True, help="Save the JSON report to a file.")
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), help="Directory for saved reports.")
@click.option("--pretty", is_flag=True, help="Pretty print output and logs.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug events.")
def run(
    harness_file: Path,
    base: Optional[Path],
    timeout: Optional[float],
    save_report: bool,
    report_dir: Optional[Path],
    pretty: bool,
    verbose: bool,
):
    """Run the integration tests described by HARNESS_FILE."""
    logger = setup_logging(verbose=verbose, pretty=pretty)

    try:
        harness = parse_harness(harness_file)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse harness: {e}")
        sys.exit(1)

    if base is not None:
        harness.base = str(base.resolve())
    if timeout is not None and harness.ready is not None:
        harness.ready.timeout = timeout

    validation = validate_harness(harness)
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error(f"Invalid harness: {errors_str}")
        sys.exit(1)
    for warning in validation.warnings:
        logger.warning("harness warning", path=warning.path, message=warning.message)

    try:
        runner = IntegrationTestRunner(*harness.to_options())
    except ConfigurationError as e:
        output_error(f"Invalid configuration: {e}")
        sys.exit(1)

    start_time = time.time()
    errors: list[BaseException] = []
    try:
        runner.init_and_run()
    except RunError as e:
        errors = e.errors
    except KeyboardInterrupt:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Run interrupted by user", duration_ms=duration_ms)
        sys.exit(130)
    duration_ms = int((time.time() - start_time) * 1000)

    reporter = JsonReporter()
    report = reporter.generate(
        harness=harness.source,
        phase=runner.phase.value,
        errors=errors,
        duration_ms=duration_ms,
    )

    report_path = None
    if save_report:
        directory = report_dir or Path(".")
        report_path = str(reporter.save(report, directory / f"itrunner_report_{harness_file.stem}.json"))
        logger.info("report saved", path=report_path)

    flow_output = reporter.generate_flow_output(report, report_path)
    click.echo(reporter.to_json_string(flow_output, pretty=pretty))

    if not flow_output["success"]:
        sys.exit(1)


@main.command()
@click.argument("harness_file", type=click.Path(dir_okay=False, path_type=Path))
def validate(harness_file: Path):
    """Check HARNESS_FILE without building or starting anything."""
    try:
        harness = parse_harness(harness_file)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse harness: {e}", command="validate")
        sys.exit(1)

    result = validate_harness(harness)
    click.echo(json.dumps({
        "success": result.valid,
        "command": "validate",
        "data": {
            "errors": [{"path": e.path, "message": e.message} for e in result.errors],
            "warnings": [{"path": w.path, "message": w.message} for w in result.warnings],
        },
        "message": str(result),
    }, ensure_ascii=False))

    if not result.valid:
        sys.exit(1)


def output_error(message: str, command: str = "run", **extra):
    """Output error in flow JSON format."""
    click.echo(json.dumps({
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }, ensure_ascii=False))


if __name__ == "__main__":
    main()
