"""
Atomic text writes — readers never observe a half-written file.

Content goes to a temp file in the target's directory, then replaces the
target in one rename.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str, prefix: str = ".scripty_") -> None:
    """Write ``content`` to ``path`` atomically (UTF-8, newlines untranslated).

    Args:
        path: Target file. Parent directories are created.
        content: Full file content.
        prefix: Temp file name prefix, so leftovers are recognizable.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Wrote %s (%d chars)", path, len(content))
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
