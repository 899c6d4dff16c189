"""
Result types for best-effort operations.

Tree rendering, per-file reads, workspace release and temp sweeps are allowed
to fail without failing the request. Instead of swallowing those exceptions
they return an Outcome that is either ok (carries a value) or degraded
(carries a Diagnostic), so callers and tests can see which path was taken.

Sample input:
    Outcome.ok("├── README.md\\n")
    Outcome.degraded(Diagnostic("TreeRenderError", "permission denied"))

Expected output:
    outcome.is_degraded -> False / True
    outcome.value_or("") -> the tree string / ""
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Diagnostic:
    """A recorded, non-fatal problem."""

    kind: str
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.kind}: {self.path}: {self.message}"
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    diagnostic: Optional[Diagnostic] = None

    @classmethod
    def ok(cls, value: T = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, diagnostic: Diagnostic) -> "Outcome[T]":
        return cls(diagnostic=diagnostic)

    @property
    def is_degraded(self) -> bool:
        return self.diagnostic is not None

    def value_or(self, default: T) -> T:
        if self.is_degraded:
            return default
        return self.value


@dataclass
class SweepReport:
    """Paths removed by a temp-storage sweep and the entries that could not be."""

    removed: List[Path] = field(default_factory=list)
    failures: List[Diagnostic] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed)
