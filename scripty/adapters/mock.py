"""
Mock adapters — in-memory test doubles for every host capability.

Used by the test suite to run the full generation pipeline without a
script runtime or a project file.
"""

from __future__ import annotations

from collections.abc import Iterator

from scripty.adapters.base import (
    HostReporter,
    ProjectItem,
    ProjectItemTree,
    ScriptEngine,
    ScriptExecutionFault,
)
from scripty.core.models.evaluation import (
    Diagnostic,
    EvaluationResult,
    InputIdentity,
    Severity,
    canonical_path,
)


class MockScriptEngine(ScriptEngine):
    """Script engine returning a canned result.

    By default, returns an empty result. Can be configured with a
    custom result or a fault to raise.
    """

    def __init__(
        self,
        result: EvaluationResult | None = None,
        engine_name: str = "mock",
    ):
        self._name = engine_name
        self._result = result or EvaluationResult()
        self._fault: Exception | None = None
        self._call_log: list[tuple[InputIdentity, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[InputIdentity, str]]:
        """All (identity, content) pairs this engine has evaluated."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_result(self, result: EvaluationResult) -> None:
        self._result = result
        self._fault = None

    def set_fault(self, fault: Exception | str = "Mock engine failure") -> None:
        """Configure the next evaluations to raise."""
        self._fault = ScriptExecutionFault(fault) if isinstance(fault, str) else fault

    def evaluate(self, identity: InputIdentity, content: str) -> EvaluationResult:
        self._call_log.append((identity, content))
        if self._fault is not None:
            raise self._fault
        return self._result.model_copy(deep=True)


class InMemoryItemTree(ProjectItemTree):
    """Item tree held in a list.

    Duplicate paths are allowed so the first-match rule can be
    exercised. Individual paths can be made to fail on mutation.
    """

    def __init__(self, items: list[ProjectItem] | None = None):
        self._items: list[ProjectItem] = list(items or [])
        self._failing: set[str] = set()
        self._mutations: list[tuple[str, str]] = []

    @classmethod
    def from_types(cls, types: dict[str, str | None]) -> InMemoryItemTree:
        """Build a tree from a ``{path: item_type}`` mapping."""
        return cls([
            ProjectItem(path=canonical_path(path), item_type=item_type)
            for path, item_type in types.items()
        ])

    @property
    def mutations(self) -> list[tuple[str, str]]:
        """Every successful mutation as (operation, path), in order."""
        return self._mutations

    @property
    def paths(self) -> list[str]:
        return [item.path for item in self._items]

    def item_type(self, path: str) -> str | None:
        item = self.find_item_by_path(canonical_path(path))
        return item.item_type if item else None

    def fail_on(self, path: str) -> None:
        """Make every mutation touching ``path`` raise."""
        self._failing.add(canonical_path(path))

    def _check(self, path: str) -> None:
        if path in self._failing:
            raise RuntimeError(f"Item tree rejected change to {path}")

    def items(self) -> Iterator[ProjectItem]:
        return iter(list(self._items))

    def add_item_from_file(self, path: str) -> ProjectItem:
        self._check(path)
        item = ProjectItem(path=path)
        self._items.append(item)
        self._mutations.append(("add", path))
        return item

    def set_item_build_action(self, item: ProjectItem, build_action: str) -> None:
        self._check(item.path)
        item.item_type = build_action
        self._mutations.append(("set_type", item.path))

    def delete_item(self, path: str) -> bool:
        self._check(path)
        for index, item in enumerate(self._items):
            if item.path == path:
                del self._items[index]
                self._mutations.append(("delete", path))
                return True
        return False


class RecordingReporter(HostReporter):
    """Host reporter that remembers every diagnostic it was given."""

    def __init__(self) -> None:
        self.reported: list[Diagnostic] = []

    def report(self, severity: Severity, message: str, line: int, column: int) -> None:
        self.reported.append(
            Diagnostic(severity=severity, message=message, line=line, column=column)
        )

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.reported if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.reported if not d.is_error]
