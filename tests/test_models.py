"""
Tests for domain models — evaluation results, item ops, path identity.
"""

import os

import pytest
from pydantic import ValidationError

from scripty.core.models import (
    GENERATE_ONLY,
    Diagnostic,
    EvaluationResult,
    InputIdentity,
    ItemOp,
    ItemOpKind,
    ItemReceipt,
    OutputDescriptor,
    Severity,
    canonical_path,
)


class TestCanonicalPath:
    def test_absolute_normalized(self):
        assert canonical_path("/p/a/../b/./c.cs") == os.path.normpath("/p/b/c.cs")

    def test_relative_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert canonical_path("gen/x.cs") == os.path.join(os.getcwd(), "gen", "x.cs")

    def test_accepts_pathlike(self, tmp_path):
        assert canonical_path(tmp_path / "x.cs") == str(tmp_path.resolve() / "x.cs")

    def test_symlinks_resolved(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        assert canonical_path(link / "gen" / "x.cs") == canonical_path(real / "gen" / "x.cs")


class TestDiagnostic:
    def test_constructors(self):
        e = Diagnostic.error("bad", 3, 5)
        w = Diagnostic.warning("meh")
        assert e.is_error and e.severity == Severity.ERROR
        assert (e.line, e.column) == (3, 5)
        assert not w.is_error and (w.line, w.column) == (0, 0)

    def test_severity_from_string(self):
        assert Diagnostic(severity="warning", message="m").severity == Severity.WARNING

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValidationError):
            Diagnostic(severity="info", message="m")


class TestOutputDescriptor:
    def test_generate_only(self):
        assert OutputDescriptor(path="/p/a", build_action=GENERATE_ONLY).generate_only
        assert not OutputDescriptor(path="/p/a", build_action="Compile").generate_only

    def test_open_build_action(self):
        d = OutputDescriptor(path="/p/a", build_action="TypeScriptCompile")
        assert d.build_action == "TypeScriptCompile"

    def test_default_compile(self):
        assert OutputDescriptor(path="/p/a").build_action == "Compile"


class TestEvaluationResult:
    def test_has_errors(self):
        assert not EvaluationResult(messages=[Diagnostic.warning("w")]).has_errors
        assert EvaluationResult(messages=[Diagnostic.error("e")]).has_errors

    def test_json_roundtrip(self):
        r = EvaluationResult(
            messages=[Diagnostic.error("e", 1, 2)],
            output_files=[OutputDescriptor(path="/p/a", build_action="Content")],
        )
        assert EvaluationResult.model_validate_json(r.model_dump_json()) == r


class TestInputIdentity:
    def test_frozen(self):
        identity = InputIdentity(path="/p/a.csx", project="p", solution="s")
        with pytest.raises(ValidationError):
            identity.path = "/other"


class TestItemOp:
    def test_constructors(self):
        assert ItemOp.add("/p/a").kind == ItemOpKind.ADD_ITEM_FROM_FILE
        assert ItemOp.set_type("/p/a", "Compile").build_action == "Compile"
        assert ItemOp.update_type("/p/a", "Content").kind == ItemOpKind.UPDATE_ITEM_TYPE
        assert ItemOp.delete("/p/a").build_action is None

    def test_str(self):
        assert str(ItemOp.update_type("/p/a", "Compile")) == "update_item_type(/p/a, Compile)"
        assert str(ItemOp.delete("/p/a")) == "delete_item(/p/a)"


class TestItemReceipt:
    def test_statuses(self):
        op = ItemOp.delete("/p/a")
        assert ItemReceipt.success(op).ok
        assert ItemReceipt.skip(op, reason="item not found").status == "skipped"
        failed = ItemReceipt.failure(op, error="locked")
        assert failed.failed and failed.detail == "locked"
