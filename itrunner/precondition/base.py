"""Capabilities every precondition handler provides."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class PreconditionHandler(Protocol):
    """Something that must be running before the tests and stopped after."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


@runtime_checkable
class LogSource(Protocol):
    """Optional capability: diagnostic output collected from a precondition."""

    def logs(self) -> str: ...
