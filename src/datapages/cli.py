from __future__ import annotations

from datetime import date
from pathlib import Path

import typer

from datapages.config import load_config
from datapages.errors import DataPagesError
from datapages.formats import ALLOWED_FORMATS, DataFormat, parse_format
from datapages.io.manifest import ManifestEntry, add_to_manifest
from datapages.logging import configure_logging
from datapages.report.build import build_from_config

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _parse_dataformat(value: str | None) -> DataFormat | None:
    if value is None:
        return None
    try:
        return parse_format(value)
    except DataPagesError as exc:
        raise typer.BadParameter(str(exc), param_hint="--dataformat") from exc


def _parse_extra_columns(values: list[str]) -> dict[str, str]:
    extra: dict[str, str] = {}
    for value in values:
        key, separator, item = value.partition("=")
        if not separator or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {value!r}", param_hint="--column")
        extra[key] = item
    return extra


@app.command()
def render(
    config: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path | None = typer.Option(None, resolve_path=True, help="Output HTML file."),
    dataformat: str | None = typer.Option(
        None,
        help=f"Override the data format for every page: {', '.join(ALLOWED_FORMATS)}.",
    ),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    """Render the report described by a YAML config file."""
    configure_logging(log_level)
    fmt = _parse_dataformat(dataformat)
    cfg = load_config(config)
    layout = build_from_config(cfg, output=out, dataformat=fmt)
    typer.echo(f"Report written to: {layout.html_path}")
    if layout.data_files:
        typer.echo(f"Data files: {len(layout.data_files)} in {layout.data_dir}")


@app.command("add-manifest-entry")
def add_manifest_entry(
    manifest: Path = typer.Option(..., resolve_path=True, help="Manifest CSV to update."),
    html_filename: str = typer.Option(..., help="Report HTML file name."),
    path: str = typer.Option("", help="Directory of the report relative to the index page."),
    description: str = typer.Option("", help="Short description shown in the index."),
    report_date: str | None = typer.Option(None, "--date", help="Report date (YYYY-MM-DD)."),
    column: list[str] = typer.Option([], help="Extra column as KEY=VALUE; repeatable."),
    fill_missing: bool = typer.Option(False, help="Leave unknown manifest columns empty."),
) -> None:
    """Add or replace one report entry in a manifest CSV."""
    configure_logging()
    try:
        entry_date = date.fromisoformat(report_date) if report_date else date.today()
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--date") from exc
    entry = ManifestEntry(
        path=path,
        html_filename=html_filename,
        description=description,
        date=entry_date,
        extra_columns=_parse_extra_columns(column),
    )
    try:
        add_to_manifest(manifest, entry, fill_missing=fill_missing)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--column") from exc
    typer.echo(f"Manifest updated: {manifest} ({html_filename}, {entry_date.isoformat()})")
