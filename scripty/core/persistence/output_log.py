"""
Output log persistence — what an input file produced on its last successful run.

The log is a sidecar file next to the input (same name, ``.log``
extension): one absolute path per line, UTF-8, nothing else. It is read
once at the start of a run and either left alone (aborted run) or
replaced whole at the end (successful run).

The same renderer produces the generation artifact returned to the
host, so the two are byte-identical.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from scripty.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_LOG_EXTENSION = ".log"


class OutputLogError(Exception):
    """Raised when an output log cannot live where it would have to."""


def output_log_path(input_path: Path, extension: str = DEFAULT_LOG_EXTENSION) -> Path:
    """Get the sidecar log path for an input file.

    Raises:
        OutputLogError: If the sidecar would be the input file itself.
    """
    if not extension.startswith("."):
        extension = f".{extension}"
    log_path = input_path.with_suffix(extension)
    if log_path == input_path:
        raise OutputLogError(
            f"Input file {input_path} already has the log extension "
            f"'{extension}'; its output log would overwrite it"
        )
    return log_path


def render_output_log(paths: Iterable[str]) -> str:
    """Render paths as log text: one per line, in the given order."""
    return "\n".join(paths)


def parse_output_log(text: str) -> list[str]:
    """Parse log text into paths, dropping blanks and duplicates."""
    seen: set[str] = set()
    paths: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if line and line not in seen:
            seen.add(line)
            paths.append(line)
    return paths


def load_output_log(input_path: Path, extension: str = DEFAULT_LOG_EXTENSION) -> list[str]:
    """Load the previous run's output paths.

    Returns:
        Paths in file order. Empty if the input has never been generated.
    """
    log_path = output_log_path(input_path, extension)
    if not log_path.is_file():
        logger.debug("No output log at %s — first run", log_path)
        return []

    paths = parse_output_log(log_path.read_text(encoding="utf-8"))
    logger.debug("Loaded %d path(s) from %s", len(paths), log_path)
    return paths


def persist_output_log(
    input_path: Path,
    paths: Iterable[str],
    extension: str = DEFAULT_LOG_EXTENSION,
) -> Path:
    """Replace the output log atomically.

    Returns:
        The path of the written log.
    """
    log_path = output_log_path(input_path, extension)
    try:
        atomic_write_text(log_path, render_output_log(paths), prefix=".scripty_log_")
    except OSError as e:
        logger.error("Failed to write output log %s: %s", log_path, e)
        raise
    return log_path
