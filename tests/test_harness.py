"""Tests for harness file parsing, validation and option translation."""

import sys
import textwrap

import pytest

from itrunner import ComposeHandler, IntegrationTestRunner
from itrunner.harness import (
    CommandMain,
    parse_harness,
    parse_harness_data,
    validate_harness,
)
from itrunner.readiness import HttpReadiness
from itrunner.runner import TestMain


FULL_HARNESS = textwrap.dedent("""\
    base: .
    target: ./cmd/app
    output: bin/app
    build:
      command: [go, build]
      args: [-cover]
      env: [CGO_ENABLED=0]
    run:
      args: [--port, "8080"]
      env: [LOG_LEVEL=debug]
      cover_dir: cover
    compose:
      - file: docker-compose.yaml
        services: [db]
        env: {POSTGRES_PASSWORD: secret}
        project: itest
        remove_volumes: true
    ready:
      url: http://127.0.0.1:8080/health
      timeout: 10
    test:
      command: [pytest, -q, tests/integration]
""")


@pytest.fixture
def harness_dir(tmp_path):
    (tmp_path / "docker-compose.yaml").write_text("services: {}\n")
    (tmp_path / "harness.yaml").write_text(FULL_HARNESS)
    return tmp_path


class TestParser:
    def test_parse_full_file(self, harness_dir):
        harness = parse_harness(harness_dir / "harness.yaml")

        assert harness.target == "./cmd/app"
        assert harness.build.args == ["-cover"]
        assert harness.build.env == ["CGO_ENABLED=0"]
        assert harness.run.args == ["--port", "8080"]
        assert harness.run.cover_dir == "cover"
        assert harness.compose[0].file == "docker-compose.yaml"
        assert harness.compose[0].services == ["db"]
        assert harness.compose[0].remove_volumes is True
        assert harness.ready.url == "http://127.0.0.1:8080/health"
        assert harness.ready.timeout == 10
        assert harness.test.command == ["pytest", "-q", "tests/integration"]
        assert harness.base_path() == harness_dir.resolve()

    def test_minimal(self):
        harness = parse_harness_data({"test": {"command": "pytest -q"}})

        assert harness.test.command == ["pytest", "-q"]
        assert harness.target is None
        assert harness.compose == []
        assert harness.ready is None

    def test_compose_shorthand(self):
        harness = parse_harness_data({
            "compose": "docker-compose.yaml",
            "test": {"command": ["pytest"]},
        })

        assert [c.file for c in harness.compose] == ["docker-compose.yaml"]

    def test_missing_test_section(self):
        with pytest.raises(ValueError, match="'test'"):
            parse_harness_data({"target": "./cmd/app"})

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            parse_harness_data(["test"])

    def test_ready_requires_url(self):
        with pytest.raises(ValueError, match="'url'"):
            parse_harness_data({"ready": {"timeout": 5}, "test": {"command": ["pytest"]}})

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "harness.json"
        path.write_text("{}")

        with pytest.raises(ValueError, match=".yaml"):
            parse_harness(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_harness(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "harness.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="Empty"):
            parse_harness(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "harness.yaml"
        path.write_text("test: [unclosed\n")

        with pytest.raises(ValueError, match="Malformed"):
            parse_harness(path)

    def test_compose_services_string_is_split(self):
        harness = parse_harness_data({
            "compose": [{"file": "c.yaml", "services": "db"}],
            "test": {"command": ["pytest"]},
        })

        assert harness.compose[0].services == ["db"]
        assert harness.compose[0].build is False

    def test_compose_env_values_become_strings(self):
        harness = parse_harness_data({
            "compose": [{"file": "c.yaml", "env": {"PG_PORT": 5432}}],
            "test": {"command": ["pytest"]},
        })

        assert harness.compose[0].env == {"PG_PORT": "5432"}

    def test_compose_env_must_be_mapping(self):
        with pytest.raises(ValueError, match=r"compose\[0\]\.env"):
            parse_harness_data({
                "compose": [{"file": "c.yaml", "env": ["PG_PORT=5432"]}],
                "test": {"command": ["pytest"]},
            })

    @pytest.mark.parametrize("key", ["build", "remove_volumes"])
    def test_compose_flags_must_be_booleans(self, key):
        with pytest.raises(ValueError, match=rf"compose\[0\]\.{key}"):
            parse_harness_data({
                "compose": [{"file": "c.yaml", key: "yes"}],
                "test": {"command": ["pytest"]},
            })

    def test_run_enabled_false(self):
        harness = parse_harness_data({"run": {"enabled": False}, "test": {"command": ["pytest"]}})

        assert harness.run.enabled is False

    def test_run_enabled_rejects_string(self):
        with pytest.raises(ValueError, match=r"run\.enabled"):
            parse_harness_data({"run": {"enabled": "false"}, "test": {"command": ["pytest"]}})

    def test_durations_become_floats(self):
        harness = parse_harness_data({
            "run": {"stop_timeout": "3"},
            "ready": {"url": "http://127.0.0.1:8080/health", "timeout": 5, "interval": "0.5"},
            "test": {"command": ["pytest"]},
        })

        assert harness.run.stop_timeout == 3.0
        assert harness.ready.timeout == 5.0
        assert harness.ready.interval == 0.5

    @pytest.mark.parametrize("data, field", [
        ({"ready": {"url": "http://127.0.0.1:8080/health", "timeout": "soon"}}, r"ready\.timeout"),
        ({"ready": {"url": "http://127.0.0.1:8080/health", "interval": [1]}}, r"ready\.interval"),
        ({"run": {"stop_timeout": True}}, r"run\.stop_timeout"),
    ])
    def test_non_numeric_duration(self, data, field):
        with pytest.raises(ValueError, match=field):
            parse_harness_data({**data, "test": {"command": ["pytest"]}})


class TestValidator:
    def test_valid_file(self, harness_dir):
        result = validate_harness(parse_harness(harness_dir / "harness.yaml"))

        assert result.valid, result.errors
        assert str(result) == "Valid"

    def test_reports_every_problem(self, tmp_path):
        harness = parse_harness_data({
            "target": "./cmd/app",
            "build": {"env": ["BROKEN"]},
            "compose": ["missing.yaml"],
            "ready": {"url": "localhost:8080", "timeout": 0},
            "test": {"command": []},
        })

        result = validate_harness(harness, relative_to=tmp_path)

        paths = {e.path for e in result.errors}
        assert paths == {
            "build.env[0]",
            "compose[0].file",
            "ready.url",
            "ready.timeout",
            "test.command",
        }
        assert not result.valid

    def test_warns_without_managed_system(self, tmp_path):
        harness = parse_harness_data({"test": {"command": ["pytest"]}})

        result = validate_harness(harness, relative_to=tmp_path)

        assert result.valid
        assert [w.path for w in result.warnings] == ["target"]


class TestToOptions:
    def test_builds_runner(self, harness_dir):
        harness = parse_harness(harness_dir / "harness.yaml")

        itr = IntegrationTestRunner(*harness.to_options())

        cfg = itr.config
        assert cfg.base == harness_dir.resolve()
        assert cfg.binary.target == "./cmd/app"
        assert cfg.binary.build_command == ["go", "build"]
        assert cfg.binary.run_env == ["LOG_LEVEL=debug"]
        assert cfg.binary.cover_dir == "cover"
        (compose,) = cfg.pre_handlers
        assert isinstance(compose, ComposeHandler)
        assert compose.project_name == "itest"
        assert compose.env == {"POSTGRES_PASSWORD": "secret"}
        assert cfg.ready == HttpReadiness("http://127.0.0.1:8080/health", 10, interval=0.1)
        assert isinstance(cfg.test_runner, TestMain)

    def test_command_main_returns_exit_code(self, tmp_path):
        main = CommandMain([sys.executable, "-c", "import sys; sys.exit(3)"], tmp_path)
        assert main() == 3

    def test_command_main_env(self, tmp_path):
        script = "import os, sys; sys.exit(0 if os.environ['TARGET_URL'] == 'http://x' else 1)"
        main = CommandMain([sys.executable, "-c", script], tmp_path, ["TARGET_URL=http://x"])
        assert main() == 0
