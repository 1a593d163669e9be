"""
Tests for persistence — output log sidecar, atomic writes and run history.
"""

from pathlib import Path

import pytest

from scripty.core.persistence.atomic import atomic_write_text
from scripty.core.persistence.audit import AuditWriter, GenerationAuditEntry
from scripty.core.persistence.output_log import (
    OutputLogError,
    load_output_log,
    output_log_path,
    parse_output_log,
    persist_output_log,
    render_output_log,
)


class TestOutputLogPath:
    def test_extension_replaced(self, tmp_path: Path):
        assert output_log_path(tmp_path / "Models.csx") == tmp_path / "Models.log"

    def test_extension_added_when_missing(self, tmp_path: Path):
        assert output_log_path(tmp_path / "Makefile") == tmp_path / "Makefile.log"

    def test_custom_extension_without_dot(self, tmp_path: Path):
        assert output_log_path(tmp_path / "a.csx", "outputs") == tmp_path / "a.outputs"

    def test_input_with_log_extension_rejected(self, tmp_path: Path):
        with pytest.raises(OutputLogError):
            output_log_path(tmp_path / "weird.log")


class TestOutputLog:
    def test_load_missing_returns_empty(self, tmp_path: Path):
        assert load_output_log(tmp_path / "Models.csx") == []

    def test_persist_and_load(self, tmp_path: Path):
        input_path = tmp_path / "Models.csx"
        paths = ["/p/B.g.cs", "/p/A.g.cs", "/p/A.g.html"]
        log_path = persist_output_log(input_path, paths)

        assert log_path == tmp_path / "Models.log"
        assert load_output_log(input_path) == paths

    def test_format_one_path_per_line(self, tmp_path: Path):
        input_path = tmp_path / "Models.csx"
        persist_output_log(input_path, ["/p/a", "/p/b"])
        assert (tmp_path / "Models.log").read_bytes() == b"/p/a\n/p/b"

    def test_persist_overwrites(self, tmp_path: Path):
        input_path = tmp_path / "Models.csx"
        persist_output_log(input_path, ["/p/a", "/p/b", "/p/c"])
        persist_output_log(input_path, ["/p/d"])
        assert load_output_log(input_path) == ["/p/d"]

    def test_persist_empty(self, tmp_path: Path):
        input_path = tmp_path / "Models.csx"
        persist_output_log(input_path, [])
        assert (tmp_path / "Models.log").read_text() == ""
        assert load_output_log(input_path) == []

    def test_utf8_paths(self, tmp_path: Path):
        input_path = tmp_path / "Models.csx"
        persist_output_log(input_path, ["/p/Modèle.g.cs"])
        assert load_output_log(input_path) == ["/p/Modèle.g.cs"]

    def test_parse_ignores_blanks_and_duplicates(self):
        text = "/p/a\r\n\r\n  /p/b  \n/p/a\n"
        assert parse_output_log(text) == ["/p/a", "/p/b"]

    def test_render_matches_parse(self):
        paths = ["/p/x", "/p/y"]
        assert parse_output_log(render_output_log(paths)) == paths

    def test_no_temp_files_left(self, tmp_path: Path):
        persist_output_log(tmp_path / "Models.csx", ["/p/a"])
        assert list(tmp_path.glob(".scripty_*.tmp")) == []


class TestAtomicWrite:
    def test_creates_parent_directories(self, tmp_path: Path):
        target = tmp_path / "deep" / "nested" / "file.txt"
        atomic_write_text(target, "hello")
        assert target.read_text() == "hello"

    def test_failed_write_leaves_original(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        target = tmp_path / "file.txt"
        target.write_text("original")

        def explode(self, other):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", explode)
        with pytest.raises(OSError):
            atomic_write_text(target, "new content")

        assert target.read_text() == "original"
        assert list(tmp_path.glob(".scripty_*.tmp")) == []


class TestAuditWriter:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        writer.write(GenerationAuditEntry(run_id="gen-1", status="done", outputs=2))

        entries = writer.read_all()
        assert len(entries) == 1
        assert entries[0].run_id == "gen-1"
        assert entries[0].outputs == 2

    def test_append_and_recent(self, tmp_path: Path):
        writer = AuditWriter(path=tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(GenerationAuditEntry(run_id=f"gen-{i}"))

        recent = writer.read_recent(2)
        assert [e.run_id for e in recent] == ["gen-3", "gen-4"]

    def test_corrupt_line_skipped(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path=path)
        writer.write(GenerationAuditEntry(run_id="gen-ok"))
        with path.open("a") as f:
            f.write("not json\n")

        assert [e.run_id for e in writer.read_all()] == ["gen-ok"]

    def test_missing_ledger_is_empty(self, tmp_path: Path):
        assert AuditWriter(path=tmp_path / "none.ndjson").read_all() == []

    def test_default_path_under_project_root(self, tmp_path: Path):
        writer = AuditWriter(project_root=tmp_path)
        assert writer.path == tmp_path / ".scripty" / "audit.ndjson"

    def test_unusable_parent_is_logged_not_raised(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        writer = AuditWriter(path=blocker / "audit.ndjson")

        writer.write(GenerationAuditEntry(run_id="gen-1"))

        assert writer.read_all() == []
        assert blocker.read_text() == "a file, not a directory"
