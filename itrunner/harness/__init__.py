"""Harness module - YAML description of a test run."""

from .schema import (
    BuildSection,
    CommandMain,
    ComposeSection,
    Harness,
    ReadySection,
    RunSection,
    TestSection,
    ValidationError,
    ValidationResult,
)
from .parser import parse_harness, parse_harness_data
from .validator import validate_harness

__all__ = [
    "BuildSection",
    "CommandMain",
    "ComposeSection",
    "Harness",
    "ReadySection",
    "RunSection",
    "TestSection",
    "ValidationError",
    "ValidationResult",
    "parse_harness",
    "parse_harness_data",
    "validate_harness",
]
