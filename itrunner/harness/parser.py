"""YAML harness parser.

Parses harness files into Harness dataclass objects.
"""

from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .schema import (
    BuildSection,
    ComposeSection,
    Harness,
    ReadySection,
    RunSection,
    TestSection,
)


def parse_harness(file_path: Union[str, Path]) -> Harness:
    """Parse a YAML harness file into a Harness object.

    Args:
        file_path: Path to the YAML harness file.

    Returns:
        Parsed Harness object.

    Raises:
        FileNotFoundError: If the harness file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Harness file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty harness file: {file_path}")

    return parse_harness_data(data, source=str(file_path.resolve()))


def parse_harness_data(data: Any, source: str = "<inline>") -> Harness:
    """Parse a harness from a dictionary (already loaded YAML).

    Args:
        data: Dictionary with harness data.
        source: Source identifier for error messages.

    Returns:
        Parsed Harness object.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Harness must be a YAML mapping, got {type(data).__name__}")

    if "test" not in data:
        raise ValueError(f"Missing required field 'test' in {source}")
    test_data = _mapping(data["test"], "test", source)
    _require_fields(test_data, ["command"], "test", source)
    test = TestSection(
        command=_str_list(test_data["command"], "test.command", source),
        env=_str_list(test_data.get("env", []), "test.env", source),
    )

    build_data = _mapping(data.get("build", {}), "build", source)
    build = BuildSection()
    if "command" in build_data:
        build.command = _str_list(build_data["command"], "build.command", source)
    build.args = _str_list(build_data.get("args", []), "build.args", source)
    build.env = _str_list(build_data.get("env", []), "build.env", source)

    run_data = _mapping(data.get("run", {}), "run", source)
    run = RunSection(
        args=_str_list(run_data.get("args", []), "run.args", source),
        env=_str_list(run_data.get("env", []), "run.env", source),
        cover_dir=run_data.get("cover_dir"),
        cover_env_var=run_data.get("cover_env_var"),
        stop_timeout=_number(run_data.get("stop_timeout"), "run.stop_timeout", source),
        enabled=_bool(run_data.get("enabled", True), "run.enabled", source),
    )

    compose_data = data.get("compose", [])
    if isinstance(compose_data, (str, dict)):
        compose_data = [compose_data]
    if not isinstance(compose_data, list):
        raise ValueError(f"'compose' must be a list in {source}")

    compose = []
    for i, stack in enumerate(compose_data):
        if isinstance(stack, str):
            stack = {"file": stack}
        stack = _mapping(stack, f"compose[{i}]", source)
        context = f"compose[{i}]"
        _require_fields(stack, ["file"], context, source)
        env = _mapping(stack.get("env", {}), f"{context}.env", source)
        compose.append(ComposeSection(
            file=str(stack["file"]),
            services=_str_list(stack.get("services", []), f"{context}.services", source),
            env={str(k): str(v) for k, v in env.items()},
            env_file=stack.get("env_file"),
            project=stack.get("project"),
            build=_bool(stack.get("build", False), f"{context}.build", source),
            remove_volumes=_bool(stack.get("remove_volumes", False), f"{context}.remove_volumes", source),
        ))

    ready = None
    if data.get("ready") is not None:
        ready_data = _mapping(data["ready"], "ready", source)
        _require_fields(ready_data, ["url"], "ready", source)
        ready = ReadySection(url=str(ready_data["url"]))
        if ready_data.get("timeout") is not None:
            ready.timeout = _number(ready_data["timeout"], "ready.timeout", source)
        if ready_data.get("interval") is not None:
            ready.interval = _number(ready_data["interval"], "ready.interval", source)

    return Harness(
        test=test,
        base=str(data.get("base", ".")),
        target=data.get("target"),
        output=data.get("output"),
        build=build,
        run=run,
        compose=compose,
        ready=ready,
        source=source,
    )


def _mapping(value: Any, context: str, source: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"'{context}' must be a mapping in {source}")
    return value


def _str_list(value: Any, context: str, source: str) -> list[str]:
    if isinstance(value, str):
        return value.split()
    if not isinstance(value, list):
        raise ValueError(f"'{context}' must be a list in {source}")
    return [str(v) for v in value]


def _bool(value: Any, context: str, source: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"'{context}' must be true or false in {source}, got {value!r}")
    return value


def _number(value: Any, context: str, source: str) -> Optional[float]:
    """Convert a duration in seconds; None stays None."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"'{context}' must be a number in {source}, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{context}' must be a number in {source}, got {value!r}") from e


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )
