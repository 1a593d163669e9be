"""
Command script engine — evaluate scripts through an external process.

The configured command is run once per evaluation. It receives a JSON
request on stdin and must print a JSON response on stdout:

    request   {"input_path": ..., "content": ..., "project": ..., "solution": ...}
    response  {"messages":     [{"severity": "error", "message": ..., "line": 3, "column": 5}],
               "output_files": [{"path": "Foo.g.cs", "build_action": "Compile"}]}

Relative output paths resolve against the input file's directory.
A non-zero exit, a timeout, or an unparseable response is an execution
fault, not a diagnostic.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scripty.adapters.base import ScriptEngine, ScriptExecutionFault
from scripty.core.models.evaluation import EvaluationResult, InputIdentity, canonical_path

logger = logging.getLogger(__name__)


class CommandScriptEngine(ScriptEngine):
    """Run a script engine process and parse its JSON response.

    Args:
        command: Argument list, or a command string.
        shell: Whether to run through the shell (string commands only).
        timeout: Seconds before the process is killed.
        cwd: Working directory (default: the input file's directory).
    """

    def __init__(
        self,
        command: list[str] | str,
        shell: bool = False,
        timeout: int = 300,
        cwd: Path | None = None,
    ):
        self._command = command
        self._shell = shell
        self._timeout = timeout
        self._cwd = cwd

    @property
    def name(self) -> str:
        return "command"

    def _argv(self) -> list[str] | str:
        if self._shell:
            return self._command if isinstance(self._command, str) else shlex.join(self._command)
        if isinstance(self._command, str):
            return shlex.split(self._command)
        return list(self._command)

    def evaluate(self, identity: InputIdentity, content: str) -> EvaluationResult:
        if not self._command:
            raise ScriptExecutionFault("No script engine command configured")

        input_dir = Path(identity.path).parent
        cwd = self._cwd or input_dir
        request = json.dumps({
            "input_path": identity.path,
            "content": content,
            "project": identity.project,
            "solution": identity.solution,
        })

        logger.debug("Executing: %s (cwd=%s)", self._command, cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                self._argv(),
                shell=self._shell,
                cwd=cwd,
                input=request,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ScriptExecutionFault(
                f"Script engine timed out after {self._timeout}s"
            ) from e
        except OSError as e:
            raise ScriptExecutionFault(f"Cannot start script engine: {e}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Script engine exited %d after %dms", result.returncode, elapsed_ms)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise ScriptExecutionFault(
                stderr or f"Script engine exited with code {result.returncode}"
            )

        return parse_response(result.stdout, input_dir)


def parse_response(stdout: str, input_dir: Path) -> EvaluationResult:
    """Parse an engine response, resolving relative output paths.

    Raises:
        ScriptExecutionFault: If the response is not a valid result.
    """
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ScriptExecutionFault(f"Script engine returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ScriptExecutionFault(
            f"Script engine response must be a JSON object, got {type(data).__name__}"
        )

    try:
        for message in data.get("messages") or []:
            if isinstance(message, dict) and isinstance(message.get("severity"), str):
                message["severity"] = message["severity"].lower()
        evaluation = EvaluationResult.model_validate({
            "messages": data.get("messages") or [],
            "output_files": [
                _resolve_output(entry, input_dir) for entry in data.get("output_files") or []
            ],
        })
    except (ValidationError, TypeError) as e:
        raise ScriptExecutionFault(f"Script engine returned a malformed result: {e}") from e

    return evaluation


def _resolve_output(entry: Any, input_dir: Path) -> Any:
    if not isinstance(entry, dict) or not isinstance(entry.get("path"), str):
        return entry
    path = Path(entry["path"])
    if not path.is_absolute():
        path = input_dir / path
    return {**entry, "path": canonical_path(path)}
