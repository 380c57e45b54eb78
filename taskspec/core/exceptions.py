"""Exceptions raised by taskspec."""


class TaskSpecError(Exception):
    """Base exception for taskspec errors."""

    pass


class SpecReadError(TaskSpecError):
    """A spec file could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read spec file: {path} ({reason})")


class CircularDependencyError(TaskSpecError):
    """Task dependencies form a cycle and cannot be ordered."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")
