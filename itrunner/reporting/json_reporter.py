"""JSON report generator for integration test runs."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class JsonReporter:
    """Generates JSON reports from run outcomes."""

    def generate(
        self,
        harness: str,
        phase: str,
        errors: Optional[list[BaseException]] = None,
        duration_ms: int = 0,
    ) -> dict[str, Any]:
        """Generate a JSON report from a finished run.

        Args:
            harness: Name or path of the harness that was run.
            phase: Last phase the run reached.
            errors: Failures recorded during the run.
            duration_ms: Run duration in milliseconds.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        errors = errors or []
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "harness": harness,
            "status": "failed" if errors else "passed",
            "phase": phase,
            "duration_ms": duration_ms,
            "errors": [
                {
                    "phase": getattr(e, "phase", type(e).__name__),
                    "type": type(e).__name__,
                    "message": str(e),
                }
                for e in errors
            ],
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate flow CLI compatible JSON output.

        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }
        """
        passed = report["status"] == "passed"
        data: dict[str, Any] = {
            "harness": report["harness"],
            "phase": report["phase"],
            "duration_ms": report["duration_ms"],
            "errors": report["errors"],
        }
        if report_path:
            data["report_path"] = report_path

        if passed:
            message = "All tests passed"
        elif len(report["errors"]) == 1:
            e = report["errors"][0]
            message = f"Run failed: [{e['phase']}] {e['message']}"
        else:
            message = f"Run failed with {len(report['errors'])} errors"

        return {
            "success": passed,
            "command": "run",
            "data": data,
            "message": message,
        }
