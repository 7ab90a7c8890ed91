from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from datapages.charts.base import RenderContext
from datapages.config import OutputOptions
from datapages.io.encode import encode_datasets
from datapages.io.manifest import ManifestEntry, add_to_manifest
from datapages.io.write import ProjectLayout, ProjectWriter
from datapages.report.assemble import assemble
from datapages.report.page import Page

LOGGER = logging.getLogger(__name__)


def generated_timestamp(options: OutputOptions) -> str | None:
    if not options.include_generated_at:
        return None
    return datetime.now(timezone.utc).isoformat()


def write_chart_assets(writer: ProjectWriter, page: Page) -> None:
    for chart in page.charts:
        context = RenderContext(chart.chart_id, writer.dataformat)
        for asset in chart.assets(context):
            writer.write_asset(
                asset.relative_path,
                asset.content,
                preserve_existing=asset.preserve_existing,
            )


def record_in_manifest(
    manifest_path: Path | None,
    manifest_entry: ManifestEntry | None,
    *,
    fill_missing: bool = False,
) -> None:
    if manifest_path is None or manifest_entry is None:
        return
    add_to_manifest(manifest_path, manifest_entry, fill_missing=fill_missing)


def render_page(
    page: Page,
    outfile: Path,
    options: OutputOptions | None = None,
    *,
    manifest_path: Path | None = None,
    manifest_entry: ManifestEntry | None = None,
    fill_missing: bool = False,
) -> ProjectLayout:
    """Render one page to disk.

    Embedded formats produce the single file ``outfile``. External formats
    produce ``<outfile stem>/`` holding the page, its ``data/`` files, the
    launcher scripts and a README. Every dataset error is raised before the
    first file is written.
    """
    options = options or OutputOptions()
    outfile = Path(outfile)
    fmt = page.dataformat

    encoded = encode_datasets(page.resolve_datasets(), fmt)
    html = assemble(page, encoded, generated_at=generated_timestamp(options))

    writer = ProjectWriter(outfile, fmt, launcher_scripts=options.launcher_scripts)
    writer.layout(encoded)
    writer.write_html(writer.paths.html.name, html)
    write_chart_assets(writer, page)
    layout = writer.project_layout()
    LOGGER.info("Rendered %s (%s, %d dataset(s))", layout.html_path, fmt.value, len(encoded))

    record_in_manifest(manifest_path, manifest_entry, fill_missing=fill_missing)
    return layout
