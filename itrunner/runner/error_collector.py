"""Collects failures across the phases of a run."""

from dataclasses import dataclass, field

import structlog

from ..errors import RunError

logger = structlog.get_logger(__name__)


@dataclass
class ErrorCollector:
    """Ordered collection of failures; empty means success."""
    errors: list[BaseException] = field(default_factory=list)

    def add(self, error: BaseException) -> None:
        """Record a failure."""
        logger.error(
            "phase failed",
            phase=getattr(error, "phase", type(error).__name__),
            error=str(error),
        )
        self.errors.append(error)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def combined(self) -> RunError:
        """All recorded failures as one aggregated error."""
        return RunError(self.errors)

    def raise_if_any(self) -> None:
        """Raise the aggregated error when anything was recorded."""
        if self.has_errors:
            raise self.combined()
