"""Reporting module - JSON output of runs."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
