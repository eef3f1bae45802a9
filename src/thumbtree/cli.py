"""Command line interface for thumbtree."""

from __future__ import annotations

import copy
import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from thumbtree.config import ConfigError, ConfigManager, ThumbtreeConfig, resolve_with_precedence
from thumbtree.generation import GenerationError, GenerationPipeline, TreeReporter
from thumbtree.manifest import MANIFEST_PREFIX, MANIFEST_SUFFIX, ManifestError, ManifestStore

console = Console()


def _configure_logging(level: str) -> None:
    """Route log records to stderr through rich so they stay out of the trace.

    Args:
        level: Logging level name such as ``WARNING``.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original
    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign ``value`` at the dotted ``path`` inside ``target``.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = child
    node[path[-1]] = value


def _generation_overrides(
    *,
    no_thumbs: bool,
    sizes: tuple[int, ...],
    qualities: tuple[int, ...],
    hidden: tuple[str, ...],
    workers: int | None,
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if no_thumbs:
        overrides["generation.generate_thumbnails"] = False
    if sizes or qualities:
        overrides["generation.thumbnail_sizes"] = list(sizes)
        overrides["generation.thumbnail_qualities"] = list(qualities)
    if hidden:
        overrides["generation.hidden_dirs"] = list(hidden)
    if workers is not None:
        overrides["generation.max_workers"] = workers
    return overrides


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="thumbtree")
def cli() -> None:
    """thumbtree keeps photo thumbnails and metadata manifests in sync with a directory tree."""


@cli.command()
@click.argument("inpath", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("outpath", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "-d", "--no-thumbs", is_flag=True, help="Extract metadata without generating thumbnails."
)
@click.option("--size", "sizes", type=int, multiple=True, help="Thumbnail long edge (repeatable).")
@click.option(
    "--quality", "qualities", type=int, multiple=True, help="JPEG quality per --size (repeatable)."
)
@click.option("--hidden", multiple=True, help="Directory name to skip (repeatable).")
@click.option("--workers", type=int, help="Number of concurrent thumbnail renders.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary instead of a tree.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages to stderr.")
@click.pass_context
def generate(
    ctx: click.Context,
    inpath: Path,
    outpath: Path,
    no_thumbs: bool,
    sizes: tuple[int, ...],
    qualities: tuple[int, ...],
    hidden: tuple[str, ...],
    workers: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Generate thumbnails and manifests for INPATH into OUTPATH.

    Images whose manifest entry is at least as recent as the file are left alone;
    everything else is regenerated.
    """
    try:
        overrides = _generation_overrides(
            no_thumbs=no_thumbs, sizes=sizes, qualities=qualities, hidden=hidden, workers=workers
        )
        config = ConfigManager().load(cli_overrides=overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    _configure_logging("DEBUG" if verbose else config.logging.level)

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default
    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        quiet_enabled = summary_only = False
    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )

    input_root = inpath.expanduser().absolute()
    output_root = outpath.expanduser().absolute()
    show_detail = not (json_output or quiet_enabled or summary_only)

    if show_detail:
        banner = ("Generate thumbnails/metadata", f"  in:  {input_root}", f"  out: {output_root}", "")
        for line in banner:
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    pipeline = GenerationPipeline(
        config.generation,
        reporter=TreeReporter(console, enabled=show_detail),
    )
    try:
        result = pipeline.run(input_root, output_root)
    except GenerationError as exc:
        _handle_cli_error(str(exc), code="generation_error", json_output=json_output, original=exc)
        return

    counts = result.counts()
    if json_output:
        console.print_json(
            data={
                "context": {
                    "input_root": input_root.as_posix(),
                    "output_root": output_root.as_posix(),
                    "generate_thumbnails": config.generation.generate_thumbnails,
                    "thumbnail_sizes": config.generation.thumbnail_sizes,
                },
                "counts": counts,
                "manifests": [path.as_posix() for path in result.manifests_written],
                "failed": result.failed,
                "inaccessible": [path.as_posix() for path in result.inaccessible],
                "errors": result.errors,
            }
        )
        return

    if result.errors:
        _emit_message(
            "[red]Errors encountered:[/red]",
            mode="error",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        for entry in result.errors:
            _emit_message(
                f"  - {entry}", mode="error", quiet=quiet_enabled, summary_only=summary_only
            )

    _emit_message(
        _format_summary_line("Generate", output_root, counts),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit manifest entries as JSON.")
def show(path: Path, json_output: bool) -> None:
    """Display the manifest at PATH, or the manifest of output directory PATH."""
    store = ManifestStore()
    manifest_path = path
    if path.is_dir():
        manifest_path = path / f"{MANIFEST_PREFIX}{path.resolve().name}{MANIFEST_SUFFIX}"

    try:
        entries = store.load(manifest_path)
    except ManifestError as exc:
        _handle_cli_error(str(exc), code="manifest_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=[entry.model_dump(mode="json") for entry in entries])
        return

    table = Table(title=f"Manifest {manifest_path}")
    table.add_column("File", overflow="fold")
    table.add_column("Modified")
    table.add_column("Thumbnails")
    table.add_column("Camera")
    table.add_column("Rating", justify="right")
    table.add_column("Labels")
    for entry in entries:
        meta = entry.metadata
        labels = [
            label.value
            for label in (meta.digikam_pick_label, meta.digikam_color_label)
            if label is not None
        ]
        table.add_row(
            entry.filename,
            entry.modified_time.isoformat(),
            ", ".join(f"{width}x{height}" for width, height in entry.thumbnail_sizes) or "-",
            meta.camera_model or "-",
            str(meta.rating) if meta.rating is not None else "-",
            ", ".join(labels) or "-",
        )
    console.print(table)


@cli.group()
def config() -> None:
    """Inspect and change the persisted thumbtree settings."""


def _validate_file_overrides(data: dict[str, Any]) -> None:
    """Fail with a click error when ``data`` would not produce a valid config."""
    try:
        resolve_with_precedence(defaults=ThumbtreeConfig(), file_overrides=data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show the file values without THUMBTREE__ overrides.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration as YAML."""
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    rendered = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML value stored at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE under the dotted KEY, e.g. ``generation.hidden_dirs``."""
    segments = [part.strip() for part in key.split(".") if part.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'generation.max_workers'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"VALUE is not valid YAML: {exc}") from exc

    manager = ConfigManager()
    manager.ensure_exists()
    previous = manager.read_text().splitlines()
    try:
        stored = manager.load_file_overrides()
        data = copy.deepcopy(stored)
        _assign_nested(data, segments, parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if data == stored:
        console.print(f"[yellow]{'.'.join(segments)} already has that value.[/yellow]")
        return
    _validate_file_overrides(data)
    manager.save(data)

    changes = list(
        difflib.unified_diff(
            previous,
            manager.read_text().splitlines(),
            fromfile=f"{manager.config_path.name} (old)",
            tofile=f"{manager.config_path.name} (new)",
            lineterm="",
            n=1,
        )
    )
    console.print(Syntax("\n".join(changes), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and validate the result."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text()
    after = click.edit(before, extension=".yaml")
    if after is None or after == before:
        console.print("[yellow]Configuration left unchanged.[/yellow]")
        return

    try:
        data = yaml.safe_load(after) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Edited file is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise click.ClickException("The configuration must be a mapping at the top level.")
    _validate_file_overrides(data)

    manager.save(data)
    console.print(f"[green]Configuration updated at {manager.config_path}.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
