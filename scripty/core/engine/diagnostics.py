"""
Diagnostics policy — decide whether a run may proceed, and tell the host.

Fail-fast: a single error diagnostic invalidates the whole output set of
the run. Warnings are advisory. Every diagnostic, error or warning, is
forwarded to the host in input order with its original position.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from scripty.adapters.base import HostReporter
from scripty.core.models.evaluation import Diagnostic

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Result of classifying a run's diagnostics."""

    abort: bool = False
    forwarded: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for d in self.forwarded if d.is_error)

    @property
    def warnings(self) -> int:
        return sum(1 for d in self.forwarded if not d.is_error)


def classify(diagnostics: Iterable[Diagnostic]) -> Classification:
    """Split diagnostics into the abort decision and the forward list."""
    forwarded = list(diagnostics)
    return Classification(
        abort=any(d.is_error for d in forwarded),
        forwarded=forwarded,
    )


def forward(classification: Classification, reporter: HostReporter) -> None:
    """Send every classified diagnostic to the host, in order."""
    for diagnostic in classification.forwarded:
        logger.debug(
            "%s at (%d,%d): %s",
            diagnostic.severity.value,
            diagnostic.line,
            diagnostic.column,
            diagnostic.message,
        )
        reporter.report(
            diagnostic.severity,
            diagnostic.message,
            diagnostic.line,
            diagnostic.column,
        )


def classify_and_forward(
    diagnostics: Iterable[Diagnostic],
    reporter: HostReporter,
) -> Classification:
    """Classify diagnostics and forward them to the host in one step."""
    classification = classify(diagnostics)
    forward(classification, reporter)
    if classification.abort:
        logger.info(
            "Evaluation produced %d error(s) — aborting run",
            classification.errors,
        )
    return classification
