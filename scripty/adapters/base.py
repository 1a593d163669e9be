"""
Adapter base — the capability interfaces between a generation run and its host.

A generation run never talks to the IDE, the script runtime, or the
project file directly. It talks to three narrow interfaces:

    ScriptEngine      evaluates an input file into an EvaluationResult
    ProjectItemTree   finds, adds, retypes and deletes project items
    HostReporter      surfaces diagnostics to the user

Production code supplies host-backed implementations (subprocess engine,
YAML manifest, console); tests supply the in-memory fakes in
``scripty.adapters.mock``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Iterator

from pydantic import BaseModel

from scripty.core.models.evaluation import EvaluationResult, InputIdentity, Severity


class ScriptExecutionFault(Exception):
    """Raised when the script engine itself fails (not a script diagnostic)."""


class ProjectItem(BaseModel):
    """A file registered in the host project.

    ``path`` is the item's resolved full path, canonical form.
    ``item_type`` is its build action, or None when the host has not
    assigned one.
    """

    path: str
    item_type: str | None = None


class ScriptEngine(ABC):
    """Turns an input file's content into an EvaluationResult.

    Implementations may be asynchronous: returning an awaitable is
    allowed, and the caller drives it to completion before reconciling.
    Execution failures are signalled by raising; script errors are
    returned as diagnostics.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The engine identifier (e.g., 'command', 'mock')."""

    @abstractmethod
    def evaluate(
        self,
        identity: InputIdentity,
        content: str,
    ) -> EvaluationResult | Awaitable[EvaluationResult]:
        """Evaluate the input and return its diagnostics and outputs."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ProjectItemTree(ABC):
    """The host's project item tree.

    Items are matched by exact string equality of canonical absolute
    paths. When several items share a path, ``find_item_by_path``
    returns the first in enumeration order.
    """

    @abstractmethod
    def items(self) -> Iterator[ProjectItem]:
        """Enumerate items in tree order."""

    def find_item_by_path(self, path: str) -> ProjectItem | None:
        """Return the first item whose path equals ``path``, or None."""
        for item in self.items():
            if item.path == path:
                return item
        return None

    @abstractmethod
    def add_item_from_file(self, path: str) -> ProjectItem:
        """Register an existing file as a project item and return it."""

    @abstractmethod
    def set_item_build_action(self, item: ProjectItem, build_action: str) -> None:
        """Assign the item's build action."""

    @abstractmethod
    def delete_item(self, path: str) -> bool:
        """Remove the item at ``path``. Returns False if there was none."""


class HostReporter(ABC):
    """Where diagnostics are shown to the user."""

    @abstractmethod
    def report(self, severity: Severity, message: str, line: int, column: int) -> None:
        """Surface one diagnostic against the input file."""
