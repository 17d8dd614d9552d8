"""Pytest configuration and fixtures."""

import sys
import textwrap
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Optional

import pytest

from itrunner.errors import BuildError, StartError, StopError


# =============================================================================
# Fake collaborators
# =============================================================================


class FakeHandler:
    """In-memory precondition recording every call into a shared list."""

    def __init__(
        self,
        name: str,
        calls: list,
        fail_start: bool = False,
        fail_stop: bool = False,
    ):
        self.name = name
        self.calls = calls
        self.fail_start = fail_start
        self.fail_stop = fail_stop

    def __repr__(self) -> str:
        return f"FakeHandler({self.name!r})"

    def start(self) -> None:
        self.calls.append((self.name, "start"))
        if self.fail_start:
            raise RuntimeError(f"{self.name} refused to start")

    def stop(self) -> None:
        self.calls.append((self.name, "stop"))
        if self.fail_stop:
            raise RuntimeError(f"{self.name} refused to stop")


class LoggingFakeHandler(FakeHandler):
    """Fake precondition that also exposes logs()."""

    def logs(self) -> str:
        self.calls.append((self.name, "logs"))
        return f"{self.name} log output"


class FakeBinary:
    """Stands in for BinaryHandler without spawning anything."""

    def __init__(
        self,
        calls: list,
        target: Optional[str] = "./cmd/app",
        fail_build: bool = False,
        fail_run: bool = False,
        fail_stop: bool = False,
    ):
        self.calls = calls
        self.target = target
        self.fail_build = fail_build
        self.fail_run = fail_run
        self.fail_stop = fail_stop

    def build(self):
        self.calls.append(("binary", "build"))
        if self.fail_build:
            raise BuildError("building ./cmd/app failed with exit code 1", output="main.go:3: syntax error")

    def run(self):
        self.calls.append(("binary", "run"))
        if self.fail_run:
            raise StartError("failed to start bin/app: permission denied")

    def stop(self):
        self.calls.append(("binary", "stop"))
        if self.fail_stop:
            raise StopError("failed to stop binary (pid 42): no such process", phase="binary stop")


@pytest.fixture
def calls() -> list:
    return []


# =============================================================================
# Fake toolchain: a "compiler" that turns a Python script into an executable
# =============================================================================


FAKE_COMPILER = textwrap.dedent("""\
    import os
    import sys

    args = sys.argv[1:]
    if "--fail" in args:
        print("app.py:1: syntax error: unexpected '}'", file=sys.stderr)
        sys.exit(2)
    out = args[args.index("-o") + 1]
    target = args[-1]
    with open(target) as f:
        source = f.read()
    with open(out, "w") as f:
        f.write("#!" + sys.executable + "\\n" + source)
    os.chmod(out, 0o755)
""")

FAKE_APP = textwrap.dedent("""\
    import json
    import os
    import sys
    import time

    marker = os.environ.get("APP_MARKER")
    if marker:
        with open(marker + ".tmp", "w") as f:
            json.dump({"args": sys.argv[1:], "cover": os.environ.get("GOCOVERDIR")}, f)
        os.replace(marker + ".tmp", marker)
    time.sleep(60)
""")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A base directory holding the fake compiler and the app target."""
    (tmp_path / "compiler.py").write_text(FAKE_COMPILER)
    (tmp_path / "app.py").write_text(FAKE_APP)
    return tmp_path


@pytest.fixture
def compiler(project: Path) -> list[str]:
    return [sys.executable, str(project / "compiler.py")]


def wait_for_file(path: Path, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists():
            return True
        time.sleep(0.02)
    return False


# =============================================================================
# Local HTTP server for readiness probes
# =============================================================================


class _StatusHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        status = self.server.status_for()
        self.server.hits += 1
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def http_server():
    """Start servers whose GET status is decided by a callback."""
    servers = []

    def start(status_for: Callable[[], int]) -> str:
        server = ThreadingHTTPServer(("127.0.0.1", 0), _StatusHandler)
        server.status_for = status_for
        server.hits = 0
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        host, port = server.server_address[:2]
        return f"http://{host}:{port}/health"

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()
