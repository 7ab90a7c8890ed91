from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pandas as pd

from datapages.charts.registry import build_charts
from datapages.config import RenderConfig
from datapages.formats import DataFormat
from datapages.io.manifest import ManifestEntry
from datapages.io.read import load_table
from datapages.io.write import ProjectLayout
from datapages.report.page import Page
from datapages.report.pages import Pages, build_collection
from datapages.report.registry import DatasetRegistry
from datapages.report.render import render_page

LOGGER = logging.getLogger(__name__)


def load_datasets(config: RenderConfig) -> dict[str, pd.DataFrame]:
    tables: dict[str, pd.DataFrame] = {}
    for name, table_path in config.datasets.items():
        tables[name] = load_table(Path(table_path))
        LOGGER.info("Loaded dataset %s (%d rows) from %s", name, len(tables[name]), table_path)
    return tables


def _manifest_entry(config: RenderConfig, html_path: Path) -> ManifestEntry | None:
    if config.manifest is None:
        return None
    return ManifestEntry(
        path=config.manifest.entry_path,
        html_filename=html_path.name,
        description=config.manifest.description or config.tab_title,
        date=config.manifest.report_date or date.today(),
        extra_columns=dict(config.manifest.extra_columns),
    )


def build_from_config(
    config: RenderConfig,
    *,
    output: Path | None = None,
    dataformat: DataFormat | None = None,
) -> ProjectLayout:
    """Render the page (or cover plus pages) a config file describes.

    ``dataformat`` overrides every format named in the config.
    """
    outfile = Path(output or config.output)
    tables = load_datasets(config)
    registry = DatasetRegistry(tables)
    manifest_path = Path(config.manifest.path) if config.manifest is not None else None
    manifest_entry = _manifest_entry(config, outfile)
    fill_missing = config.manifest.fill_missing if config.manifest is not None else False

    cover = Page(
        build_charts(config.charts, tables),
        registry,
        tab_title=config.tab_title,
        page_header=config.page_header,
        notes=config.notes,
        dataformat=dataformat or config.dataformat,
    )
    if not config.pages:
        return render_page(
            cover,
            outfile,
            config.options,
            manifest_path=manifest_path,
            manifest_entry=manifest_entry,
            fill_missing=fill_missing,
        )

    pages = [
        Page(
            build_charts(page.charts, tables),
            registry,
            tab_title=page.tab_title,
            page_header=page.page_header,
            notes=page.notes,
            dataformat=page.dataformat or config.dataformat,
        )
        for page in config.pages
    ]
    return build_collection(
        Pages(cover, pages, dataformat=dataformat),
        outfile,
        config.options,
        manifest_path=manifest_path,
        manifest_entry=manifest_entry,
        fill_missing=fill_missing,
    )
