"""
Shared test fixtures and configuration.
"""

import sys
import textwrap
from pathlib import Path

import pytest

from scripty.adapters.mock import InMemoryItemTree, MockScriptEngine, RecordingReporter


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Return a temporary project directory."""
    root = tmp_path / "proj"
    root.mkdir()
    return root


@pytest.fixture
def input_file(project_dir: Path) -> Path:
    """Return a generator input file inside the project."""
    path = project_dir / "Models.csx"
    path.write_text("// generate models\n", encoding="utf-8")
    return path


@pytest.fixture
def engine() -> MockScriptEngine:
    return MockScriptEngine()


@pytest.fixture
def items() -> InMemoryItemTree:
    return InMemoryItemTree()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def fake_engine_script(tmp_path: Path) -> Path:
    """A script engine process speaking the JSON stdin/stdout protocol.

    Behaviour is driven by the input file's content:
        ERROR <msg>      → one error diagnostic at (3,5)
        WARN <msg>       → one warning diagnostic at (1,1)
        CRASH            → exit code 3 with a stderr message
        <path> <action>  → one output file, written to disk
    """
    script = tmp_path / "fake_engine.py"
    script.write_text(textwrap.dedent("""\
        import json
        import os
        import sys

        request = json.load(sys.stdin)
        base = os.path.dirname(request["input_path"])
        messages, outputs = [], []
        for line in request["content"].splitlines():
            line = line.strip()
            if not line:
                continue
            if line == "CRASH":
                sys.stderr.write("engine blew up")
                sys.exit(3)
            if line.startswith("ERROR "):
                messages.append({"severity": "Error", "message": line[6:], "line": 3, "column": 5})
                continue
            if line.startswith("WARN "):
                messages.append({"severity": "warning", "message": line[5:], "line": 1, "column": 1})
                continue
            path, action = line.split()
            with open(os.path.join(base, path), "w") as fh:
                fh.write("// generated")
            outputs.append({"path": path, "build_action": action})
        json.dump({"messages": messages, "output_files": outputs}, sys.stdout)
    """), encoding="utf-8")
    return script


@pytest.fixture
def engine_command(fake_engine_script: Path) -> list[str]:
    return [sys.executable, str(fake_engine_script)]
