"""
Config check use case — validate scripty.yml and the project manifest.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from scripty.core.config.loader import (
    ConfigError,
    GeneratorConfig,
    find_config_file,
    load_config,
)


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: GeneratorConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "log_extension": self.config.log_extension if self.config else None,
            "manifest": str(self.config.manifest_path) if self.config else None,
        }


def check_config(config_path: Path | None = None, start_dir: Path | None = None) -> ConfigCheckResult:
    """Validate generator configuration and report issues.

    Args:
        config_path: Optional explicit path to scripty.yml.
        start_dir: Where the upward search begins (default: cwd).

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file(start_dir)
        if config_path is None:
            result.warnings.append("No scripty.yml found — defaults apply")
    result.config_path = config_path

    try:
        config = load_config(config_path, start_dir=start_dir)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    # ── Engine ──────────────────────────────────────────────────
    command = config.engine.command
    if not command:
        result.errors.append("engine.command is not set — nothing can be evaluated")
    elif not config.engine.shell:
        program = command[0] if isinstance(command, list) else (command.split() or [""])[0]
        if shutil.which(program) is None and not Path(program).is_file():
            result.warnings.append(f"Script engine program not found on PATH: {program}")

    if config.engine.timeout <= 0:
        result.errors.append("engine.timeout must be positive")

    # ── Project manifest ────────────────────────────────────────
    manifest = config.manifest_path
    if not manifest.is_file():
        result.warnings.append(f"Project manifest does not exist yet: {manifest}")
    else:
        from scripty.adapters.project.manifest import ManifestItemTree

        try:
            ManifestItemTree(manifest)
        except ConfigError as e:
            result.errors.append(str(e))

    result.valid = len(result.errors) == 0
    return result
