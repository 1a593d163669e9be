"""
Configuration loader — reads scripty.yml into a typed GeneratorConfig.

The config file is looked up from the input file's directory upward, so
a single scripty.yml at the project root covers every input below it.
A missing file means defaults; a broken one is a ConfigError.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from scripty.core.models.evaluation import canonical_path

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "scripty.yml"


class ConfigError(Exception):
    """Raised when generator configuration is invalid or unreadable."""


class EngineConfig(BaseModel):
    """How to launch the external script engine."""

    command: list[str] | str = Field(default_factory=list)
    shell: bool = False
    timeout: int = 300   # seconds


class ProjectConfig(BaseModel):
    """Where the project item tree lives."""

    manifest: str = "project.items.yml"
    solution: str = ""
    delete_files: bool = True   # unlink the file when its item is pruned


class AuditConfig(BaseModel):
    enabled: bool = True
    path: str = ".scripty/audit.ndjson"


class GeneratorConfig(BaseModel):
    """Root configuration — loaded from scripty.yml."""

    log_extension: str = ".log"
    engine: EngineConfig = Field(default_factory=EngineConfig)
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)

    # Directory relative paths resolve against (not read from YAML)
    root: Path = Field(default_factory=Path.cwd, exclude=True)

    @field_validator("log_extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        value = value.strip()
        if not value or value == ".":
            raise ValueError("log_extension must not be empty")
        if "/" in value or "\\" in value:
            raise ValueError("log_extension must not contain path separators")
        return value if value.startswith(".") else f".{value}"

    def resolve(self, relative: str) -> Path:
        """Resolve a config-relative path against the config root."""
        return Path(canonical_path(self.root / relative))

    @property
    def manifest_path(self) -> Path:
        return self.resolve(self.project.manifest)

    @property
    def audit_path(self) -> Path:
        return self.resolve(self.audit.path)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for scripty.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to scripty.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, start_dir: Path | None = None) -> GeneratorConfig:
    """Load and validate generator configuration.

    Args:
        path: Explicit path to scripty.yml. If None, searches upward
            from ``start_dir``.
        start_dir: Where the upward search begins (default: cwd).

    Returns:
        Validated GeneratorConfig. Defaults (rooted at ``start_dir``)
        when no config file exists.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file(start_dir)
        if path is None:
            root = (start_dir or Path.cwd()).resolve()
            logger.debug("No %s found — using defaults rooted at %s", CONFIG_FILE, root)
            return GeneratorConfig(root=root)
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    data.pop("root", None)
    try:
        config = GeneratorConfig.model_validate({**data, "root": path.parent.resolve()})
    except ValidationError as e:
        raise ConfigError(f"Invalid generator configuration in {path}: {e}") from e

    logger.info("Loaded config from %s", path)
    return config
