"""
Errors raised by the dependency-resolution core.
"""
from typing import Any, List

__all__ = [
    "DeplanError",
    "MalformedInput",
    "CycleDetected",
    "UnknownService",
    "UnknownRoot",
    "InconsistentPlan",
]


class DeplanError(Exception):
    """Base class for every error raised by deplan."""

    pass


class MalformedInput(DeplanError):
    """Raised when a manifest, artifact or override document has the wrong shape."""

    pass


class CycleDetected(DeplanError):
    """Raised when the dependency graph has no valid topological order."""

    def __init__(self, node: str):
        self.node = node
        super().__init__(f"cycle detected at service: {node}")


class UnknownService(DeplanError):
    """Raised when a referenced service has no entry in the master plan."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"service '{name}' not found in master list")


class UnknownRoot(DeplanError):
    """Raised when a service in the deployment order has no equivalence root."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"service '{name}' has no entry in the union mapping")


class InconsistentPlan(DeplanError):
    """Raised in strict mode when a plan still references skipped services."""

    def __init__(self, warnings: List[Any]):
        self.warnings = list(warnings)
        details = "; ".join(str(w) for w in self.warnings)
        super().__init__(f"deployment plan is inconsistent: {details}")
