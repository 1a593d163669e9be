"""
Scripty — CLI entrypoint.

Usage:
    scripty --help
    scripty generate Models.csx
    scripty outputs Models.csx
    scripty history
    scripty config check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from scripty import __version__
from scripty.core.observability.logging_config import resolve_level, setup_logging_from_env


@click.group()
@click.version_option(version=__version__, prog_name="scripty")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to scripty.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Scripty — run generator scripts and keep the project in sync."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _load_config(ctx: click.Context, start_dir: Path | None = None):
    """Load config or exit with a readable error."""
    from scripty.core.config.loader import ConfigError, load_config

    try:
        return load_config(ctx.obj.get("config_path"), start_dir=start_dir)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the generation artifact to this file.",
)
@click.option("--engine-cmd", default=None, help="Override engine.command from scripty.yml.")
@click.pass_context
def generate(
    ctx: click.Context,
    input_file: Path,
    as_json: bool,
    output_file: Path | None,
    engine_cmd: str | None,
) -> None:
    """Evaluate INPUT_FILE and sync its outputs into the project.

    Examples:

        scripty generate Models.csx

        scripty generate Models.csx --json

        scripty generate Models.csx --engine-cmd "python run_script.py"
    """
    from scripty.core.config.loader import ConfigError
    from scripty.core.use_cases.generate import generate_file

    config = _load_config(ctx, start_dir=input_file.resolve().parent)
    if engine_cmd:
        config.engine.command = engine_cmd

    try:
        result = generate_file(input_file, config)
    except (ConfigError, OSError, UnicodeDecodeError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)

    if result.ok and output_file is not None:
        assert result.artifact is not None
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(result.artifact)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        click.secho(
            f"❌ Generation aborted: {len(result.errors)} error(s) — project left unchanged",
            fg="red",
        )
        sys.exit(1)

    plan = result.plan
    assert plan is not None
    if not ctx.obj.get("quiet"):
        click.secho(f"\n⚡ {input_file.name}", fg="cyan", bold=True)
        click.echo(f"   Outputs: {len(plan.new_log)}")
        for path in plan.added:
            click.secho(f"   + {path}", fg="green")
        for path in plan.updated:
            click.secho(f"   ~ {path}", fg="yellow")
        for path in plan.deleted:
            click.secho(f"   - {path}", fg="red")
        if ctx.obj.get("verbose"):
            for path in plan.new_log:
                click.echo(f"     │ {path}")
        if result.report and result.report.failed:
            click.secho(
                f"   ⚠️  {result.report.failed} item change(s) rejected by the project",
                fg="yellow",
            )
        click.echo()


@cli.command()
@click.argument("input_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def outputs(ctx: click.Context, input_file: Path, as_json: bool) -> None:
    """List the files INPUT_FILE produced on its last successful run."""
    from scripty.core.persistence.output_log import (
        OutputLogError,
        load_output_log,
        output_log_path,
    )

    config = _load_config(ctx, start_dir=input_file.resolve().parent)
    input_path = input_file.resolve()

    try:
        log_path = output_log_path(input_path, config.log_extension)
        paths = load_output_log(input_path, config.log_extension)
    except (OutputLogError, OSError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps({"log_path": str(log_path), "outputs": paths}, indent=2))
        return

    if not paths:
        click.echo(f"No outputs recorded for {input_file.name}")
        return

    for path in paths:
        click.echo(path)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("-n", "count", default=20, type=int, help="Number of entries to show.")
@click.pass_context
def history(ctx: click.Context, as_json: bool, count: int) -> None:
    """Show recent generation runs."""
    from scripty.core.persistence.audit import AuditWriter

    config = _load_config(ctx)
    entries = AuditWriter(config.audit_path).read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No generation runs recorded.")
        return

    for entry in entries:
        color = "green" if entry.status == "done" else "red"
        click.secho(f"{entry.timestamp}  {entry.status:<8}", fg=color, nl=False)
        click.echo(
            f" {entry.input_path}  "
            f"(+{len(entry.added)} ~{len(entry.updated)} -{len(entry.deleted)}, "
            f"{entry.errors} error(s))"
        )


@cli.group()
def config() -> None:
    """Generator configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate scripty.yml and the project manifest."""
    from scripty.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Manifest: {result.config.manifest_path}")
        click.echo(f"   Log extension: {result.config.log_extension}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


if __name__ == "__main__":
    cli()
