"""
Generate use case — one generation run for one input file.

This is the top-level orchestrator: evaluate the script, let the
diagnostics policy decide, reconcile the item tree, persist the output
log, and hand the artifact back to the host.

    Start → Evaluating → Aborted
                       → Reconciling → Done

An abort before Reconciling leaves the output log and the item tree
exactly as they were.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import uuid
from collections.abc import Awaitable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from scripty.adapters.base import HostReporter, ProjectItemTree, ScriptEngine
from scripty.core.config.loader import GeneratorConfig
from scripty.core.engine.diagnostics import Classification, classify_and_forward
from scripty.core.engine.reconcile import (
    ApplyReport,
    ReconciliationPlan,
    apply_plan,
    reconcile,
)
from scripty.core.models.evaluation import (
    Diagnostic,
    EvaluationResult,
    InputIdentity,
    canonical_path,
)
from scripty.core.persistence.audit import AuditWriter, GenerationAuditEntry
from scripty.core.persistence.output_log import (
    DEFAULT_LOG_EXTENSION,
    load_output_log,
    persist_output_log,
    render_output_log,
)

logger = logging.getLogger(__name__)


class RunState(StrEnum):
    START = "start"
    EVALUATING = "evaluating"
    ABORTED = "aborted"
    RECONCILING = "reconciling"
    DONE = "done"


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    run_id: str = ""
    identity: InputIdentity | None = None
    state: RunState = RunState.START
    artifact: bytes | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    evaluation: EvaluationResult | None = None
    plan: ReconciliationPlan | None = None
    report: ApplyReport | None = None
    log_path: Path | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.state == RunState.DONE

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def output_paths(self) -> list[str]:
        return self.plan.new_log if self.plan else []

    def to_dict(self) -> dict:
        result: dict = {
            "run_id": self.run_id,
            "input_path": self.identity.path if self.identity else "",
            "state": self.state.value,
            "duration_ms": self.duration_ms,
            "diagnostics": [d.model_dump(mode="json") for d in self.diagnostics],
        }
        if self.ok:
            result["outputs"] = self.output_paths
            result["log_path"] = str(self.log_path) if self.log_path else None
        if self.plan:
            result["plan"] = self.plan.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def generate_run_id() -> str:
    """Generate a unique run ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"gen-{now}-{uuid.uuid4().hex[:6]}"


class GenerationRun:
    """Drive one input file through evaluate → reconcile → persist.

    Every host capability is injected; nothing is looked up from
    ambient state. A run object is single-use.
    """

    def __init__(
        self,
        identity: InputIdentity,
        engine: ScriptEngine,
        items: ProjectItemTree,
        reporter: HostReporter,
        log_extension: str = DEFAULT_LOG_EXTENSION,
        audit_writer: AuditWriter | None = None,
    ):
        self.identity = identity.model_copy(update={"path": canonical_path(identity.path)})
        self.engine = engine
        self.items = items
        self.reporter = reporter
        self.log_extension = log_extension
        self.audit_writer = audit_writer
        self.result = GenerationResult(run_id=generate_run_id(), identity=self.identity)

    @property
    def state(self) -> RunState:
        return self.result.state

    def _transition(self, state: RunState) -> None:
        logger.debug("%s: %s → %s", self.result.run_id, self.result.state.value, state.value)
        self.result.state = state

    def _fault(self, message: str) -> None:
        """Report an execution fault as one error at (0,0) and abort."""
        diagnostic = Diagnostic.error(message)
        self.result.diagnostics.append(diagnostic)
        classify_and_forward([diagnostic], self.reporter)
        self._transition(RunState.ABORTED)

    def execute(self, content: str) -> GenerationResult:
        """Run generation and return the result.

        Never raises for script or engine failures: those end the run in
        ``RunState.ABORTED`` with the cause reported to the host.
        """
        if self.state != RunState.START:
            raise RuntimeError(f"Generation run {self.result.run_id} already executed")

        start = time.monotonic()
        input_path = Path(self.identity.path)
        logger.info("Generating %s with %s", input_path, self.engine.name)

        # ── Evaluating ──────────────────────────────────────────
        self._transition(RunState.EVALUATING)
        try:
            previous_log = load_output_log(input_path, self.log_extension)
        except Exception as e:
            logger.error("Cannot read output log for %s: %s", input_path, e)
            self._fault(f"{type(e).__name__}: {e}")
            return self._finish(start)

        try:
            evaluation = self._evaluate(content)
        except Exception as e:
            logger.info("Script engine failed for %s: %s", input_path, e)
            self._fault(f"{type(e).__name__}: {e}")
            return self._finish(start)

        self.result.evaluation = evaluation
        self.result.diagnostics.extend(evaluation.messages)
        classification: Classification = classify_and_forward(evaluation.messages, self.reporter)
        if classification.abort:
            self._transition(RunState.ABORTED)
            return self._finish(start)

        # ── Reconciling ─────────────────────────────────────────
        self._transition(RunState.RECONCILING)
        try:
            plan = reconcile(evaluation.output_files, previous_log, self.items)
            self.result.plan = plan
            self.result.report = apply_plan(plan, self.items)
            self.result.log_path = persist_output_log(
                input_path, plan.new_log, self.log_extension
            )
        except Exception as e:
            logger.error("Reconciliation failed for %s: %s", input_path, e)
            self._fault(f"{type(e).__name__}: {e}")
            return self._finish(start)

        self.result.artifact = render_output_log(plan.new_log).encode("utf-8")
        self._transition(RunState.DONE)
        logger.info(
            "Generated %s: %d output(s), %d added, %d retyped, %d pruned",
            input_path.name,
            len(plan.new_log),
            len(plan.added),
            len(plan.updated),
            len(plan.deleted),
        )
        return self._finish(start)

    def _evaluate(self, content: str) -> EvaluationResult:
        outcome = self.engine.evaluate(self.identity, content)
        if inspect.isawaitable(outcome):
            outcome = _run_awaitable(outcome)
        if not isinstance(outcome, EvaluationResult):
            raise TypeError(
                f"Script engine returned {type(outcome).__name__}, expected EvaluationResult"
            )
        return outcome

    def _finish(self, start: float) -> GenerationResult:
        self.result.duration_ms = int((time.monotonic() - start) * 1000)
        if self.audit_writer is not None:
            self.audit_writer.write(_audit_entry(self.result, self.engine.name))
        return self.result


async def _await(awaitable: Awaitable[EvaluationResult]) -> EvaluationResult:
    return await awaitable


def _run_awaitable(awaitable: Awaitable[EvaluationResult]) -> EvaluationResult:
    """Drive an async engine result to completion from synchronous code.

    Inside a running event loop (an async host) the coroutine gets its
    own loop on a worker thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(awaitable))
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, _await(awaitable)).result()


def _audit_entry(result: GenerationResult, engine: str) -> GenerationAuditEntry:
    plan = result.plan if result.ok else None
    return GenerationAuditEntry(
        run_id=result.run_id,
        input_path=result.identity.path if result.identity else "",
        engine=engine,
        status=result.state.value,
        outputs=len(plan.new_log) if plan else 0,
        added=plan.added if plan else [],
        updated=plan.updated if plan else [],
        deleted=plan.deleted if plan else [],
        item_failures=result.report.failed if result.report and result.ok else 0,
        duration_ms=result.duration_ms,
        errors=len(result.errors),
        warnings=len(result.warnings),
        messages=[d.message for d in result.errors][:10],
    )


def run_generation(
    identity: InputIdentity,
    content: str,
    engine: ScriptEngine,
    items: ProjectItemTree,
    reporter: HostReporter,
    log_extension: str = DEFAULT_LOG_EXTENSION,
    audit_writer: AuditWriter | None = None,
) -> GenerationResult:
    """Run one generation. Convenience wrapper around ``GenerationRun``."""
    run = GenerationRun(
        identity=identity,
        engine=engine,
        items=items,
        reporter=reporter,
        log_extension=log_extension,
        audit_writer=audit_writer,
    )
    return run.execute(content)


def generate_file(
    input_path: Path,
    config: GeneratorConfig,
    engine: ScriptEngine | None = None,
    items: ProjectItemTree | None = None,
    reporter: HostReporter | None = None,
) -> GenerationResult:
    """Generate one input file using configured host adapters.

    Any adapter not passed in is built from ``config``: the command
    engine, the manifest item tree and the console reporter.

    Raises:
        ConfigError: If the project manifest cannot be loaded.
        OSError: If the input file cannot be read.
    """
    input_path = Path(canonical_path(input_path))
    content = input_path.read_text(encoding="utf-8")

    solution = config.project.solution
    if items is None:
        from scripty.adapters.project.manifest import ManifestItemTree

        manifest = ManifestItemTree(config.manifest_path, delete_files=config.project.delete_files)
        solution = solution or manifest.solution
        items = manifest

    if engine is None:
        from scripty.adapters.shell.command import CommandScriptEngine

        engine = CommandScriptEngine(
            command=config.engine.command,
            shell=config.engine.shell,
            timeout=config.engine.timeout,
        )

    if reporter is None:
        from scripty.adapters.host.console import ConsoleReporter

        reporter = ConsoleReporter(str(input_path))

    identity = InputIdentity(
        path=str(input_path),
        project=str(config.manifest_path),
        solution=solution,
    )
    audit_writer = AuditWriter(config.audit_path) if config.audit.enabled else None

    return run_generation(
        identity=identity,
        content=content,
        engine=engine,
        items=items,
        reporter=reporter,
        log_extension=config.log_extension,
        audit_writer=audit_writer,
    )
