"""
Console reporter — show diagnostics in the terminal.

Messages use the compiler-style location prefix IDEs and CI log parsers
already understand:

    Foo.csx(3,5): error: syntax error
"""

from __future__ import annotations

import click

from scripty.adapters.base import HostReporter
from scripty.core.models.evaluation import Severity

_COLORS = {Severity.ERROR: "red", Severity.WARNING: "yellow"}


class ConsoleReporter(HostReporter):
    """Print diagnostics for one input file to stderr."""

    def __init__(self, input_path: str, color: bool | None = None):
        self._input_path = input_path
        self._color = color
        self.count = 0

    def report(self, severity: Severity, message: str, line: int, column: int) -> None:
        self.count += 1
        click.secho(
            format_diagnostic(self._input_path, severity, message, line, column),
            fg=_COLORS.get(severity),
            err=True,
            color=self._color,
        )


def format_diagnostic(
    input_path: str,
    severity: Severity,
    message: str,
    line: int,
    column: int,
) -> str:
    return f"{input_path}({line},{column}): {severity.value}: {message}"
