"""Diagnostics and exceptions raised while compiling a schema."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Location:
    """1-based position of a token in a schema source."""

    line: int
    column: int
    source: str = "<schema>"

    def __str__(self) -> str:
        return f"{self.source}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found in a schema, anchored at a source location."""

    code: str  # e.g., "DUPLICATE_PROPERTY", "DANGLING_CHILD"
    message: str
    location: Optional[Location] = None
    details: dict = field(default_factory=dict, compare=False, hash=False)

    def __str__(self) -> str:
        if self.location is None:
            return f"error[{self.code}]: {self.message}"
        return f"{self.location}: error[{self.code}]: {self.message}"


class CrudScaffoldError(Exception):
    """Base class for every error raised by crudscaffold itself."""


class SchemaError(CrudScaffoldError):
    """A schema failed to parse, build, or validate.

    Carries every diagnostic collected before the failing stage gave up, so
    callers can report them together.
    """

    def __init__(self, diagnostics: Iterable[Diagnostic]):
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        super().__init__("\n".join(str(d) for d in self.diagnostics))

    @classmethod
    def at(cls, location: Optional[Location], code: str, message: str) -> "SchemaError":
        """Build an error holding one diagnostic."""
        return cls([Diagnostic(code=code, message=message, location=location)])
