"""
Evaluation models — what the script engine hands back.

The script engine turns one input file into an EvaluationResult: an
ordered list of diagnostics and an ordered list of output descriptors.
Everything downstream (diagnostics policy, reconciliation, the output
log) consumes these types and nothing else from the engine.
"""

from __future__ import annotations

import os
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ── Build actions ───────────────────────────────────────────────
#
# Build actions are an open, host-defined enumeration; any string is
# passed through to the item tree unchanged. Only GenerateOnly is special.

COMPILE = "Compile"
GENERATE_ONLY = "GenerateOnly"


def canonical_path(path: str | os.PathLike[str]) -> str:
    """Return the canonical form used to identify a file.

    Absolute, normalized, with symlinks resolved (the same form as
    ``Path.resolve()``). Two paths refer to the same project item if
    and only if their canonical forms are equal as strings.
    """
    return os.path.realpath(os.fspath(path))


class Severity(StrEnum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class InputIdentity(BaseModel):
    """The file being generated from, and who owns it.

    ``project`` and ``solution`` are opaque to the core; they are
    passed through to the script engine unmodified.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    project: str = ""
    solution: str = ""


class Diagnostic(BaseModel):
    """A message produced while evaluating a script."""

    severity: Severity = Severity.ERROR
    message: str
    line: int = 0
    column: int = 0

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @classmethod
    def error(cls, message: str, line: int = 0, column: int = 0) -> Diagnostic:
        return cls(severity=Severity.ERROR, message=message, line=line, column=column)

    @classmethod
    def warning(cls, message: str, line: int = 0, column: int = 0) -> Diagnostic:
        return cls(severity=Severity.WARNING, message=message, line=line, column=column)


class OutputDescriptor(BaseModel):
    """One file the script produced, with its target build action."""

    path: str
    build_action: str = COMPILE

    @property
    def canonical(self) -> str:
        return canonical_path(self.path)

    @property
    def generate_only(self) -> bool:
        """Written to disk but never registered as a project item."""
        return self.build_action == GENERATE_ONLY


class EvaluationResult(BaseModel):
    """Everything a single script evaluation produced.

    Both lists keep emission order; output files are not sorted.
    """

    messages: list[Diagnostic] = Field(default_factory=list)
    output_files: list[OutputDescriptor] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(m.is_error for m in self.messages)
