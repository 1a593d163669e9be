"""
Run history ledger — append-only record of generation runs.

Every run, successful or aborted, writes one entry to an NDJSON
(newline-delimited JSON) file. Useful for answering "when did this file
stop being generated, and why".

The ledger is append-only: entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_DIR = ".scripty"
DEFAULT_AUDIT_FILE = "audit.ndjson"


class GenerationAuditEntry(BaseModel):
    """A single ledger entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    run_id: str = ""
    input_path: str = ""
    engine: str = ""

    # Outcome
    status: str = ""               # done, aborted
    outputs: int = 0
    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    item_failures: int = 0
    duration_ms: int = 0

    # Diagnostics
    errors: int = 0
    warnings: int = 0
    messages: list[str] = Field(default_factory=list)


class AuditWriter:
    """Append-only ledger writer.

    Each call to write() appends a single JSON line to the ledger file.
    The file is created if it doesn't exist.
    """

    def __init__(self, path: Path | None = None, project_root: Path | None = None):
        if path is not None:
            self._path = path
        elif project_root is not None:
            self._path = project_root / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE
        else:
            self._path = Path(DEFAULT_AUDIT_DIR) / DEFAULT_AUDIT_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: GenerationAuditEntry) -> None:
        """Append an entry to the ledger.

        Ledger failures are logged, never raised.
        """
        data = entry.model_dump(mode="json")
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s/%s", entry.status, entry.run_id)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[GenerationAuditEntry]:
        """Read all entries from the ledger, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(GenerationAuditEntry.model_validate_json(line))
                    except ValidationError as e:
                        logger.warning("Skipping corrupt audit entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read audit ledger: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[GenerationAuditEntry]:
        """Read the most recent N entries."""
        return self.read_all()[-n:]
