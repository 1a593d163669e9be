"""
Tests for the diagnostics policy — abort decision and forwarding.
"""

from scripty.adapters.mock import RecordingReporter
from scripty.core.engine.diagnostics import classify, classify_and_forward, forward
from scripty.core.models import Diagnostic, Severity


class TestClassify:
    def test_empty_does_not_abort(self):
        c = classify([])
        assert c.abort is False
        assert c.forwarded == []

    def test_warnings_only_do_not_abort(self):
        c = classify([Diagnostic.warning("unused"), Diagnostic.warning("deprecated")])
        assert c.abort is False
        assert c.warnings == 2

    def test_single_error_aborts(self):
        c = classify([Diagnostic.warning("w"), Diagnostic.error("e")])
        assert c.abort is True
        assert c.errors == 1
        assert c.warnings == 1

    def test_forward_list_keeps_input_order(self):
        diagnostics = [
            Diagnostic.error("first", 1, 2),
            Diagnostic.warning("second", 3, 4),
            Diagnostic.error("third", 5, 6),
        ]
        c = classify(diagnostics)
        assert [d.message for d in c.forwarded] == ["first", "second", "third"]


class TestForward:
    def test_all_severities_forwarded_with_positions(self):
        reporter = RecordingReporter()
        forward(
            classify([Diagnostic.warning("w", 1, 1), Diagnostic.error("syntax error", 3, 5)]),
            reporter,
        )
        assert reporter.reported == [
            Diagnostic(severity=Severity.WARNING, message="w", line=1, column=1),
            Diagnostic(severity=Severity.ERROR, message="syntax error", line=3, column=5),
        ]

    def test_classify_and_forward(self):
        reporter = RecordingReporter()
        c = classify_and_forward([Diagnostic.error("boom", 2, 7)], reporter)
        assert c.abort
        assert len(reporter.errors) == 1
        assert reporter.errors[0].line == 2
        assert reporter.errors[0].column == 7

    def test_nothing_forwarded_for_clean_run(self):
        reporter = RecordingReporter()
        classify_and_forward([], reporter)
        assert reporter.reported == []
