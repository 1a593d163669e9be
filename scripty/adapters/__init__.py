"""Adapters — host capability bindings for generation runs.

Public re-exports for convenient access.
"""

from scripty.adapters.base import (
    HostReporter,
    ProjectItem,
    ProjectItemTree,
    ScriptEngine,
    ScriptExecutionFault,
)
from scripty.adapters.mock import InMemoryItemTree, MockScriptEngine, RecordingReporter

__all__ = [
    "HostReporter",
    "InMemoryItemTree",
    "MockScriptEngine",
    "ProjectItem",
    "ProjectItemTree",
    "RecordingReporter",
    "ScriptEngine",
    "ScriptExecutionFault",
]
