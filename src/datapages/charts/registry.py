from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from datapages.charts.base import Chart
from datapages.charts.line import LineChart
from datapages.charts.links import LinkList, LinkListEntry
from datapages.charts.report_index import ReportIndex
from datapages.charts.table import DataTable
from datapages.charts.text import Notes, TextBlock
from datapages.config import (
    ChartConfig,
    DataTableConfig,
    LineChartConfig,
    LinkConfig,
    LinkListConfig,
    NotesConfig,
    ReportIndexConfig,
    TextBlockConfig,
)
from datapages.errors import UnknownDatasetError


def _table_for(dataset: str, tables: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    if dataset not in tables:
        raise UnknownDatasetError([dataset], known=tables.keys())
    return tables[dataset]


def _entries(links: Sequence[LinkConfig]) -> list[LinkListEntry]:
    return [LinkListEntry(link.title, link.href, link.blurb) for link in links]


def build_chart(spec: ChartConfig, tables: Mapping[str, pd.DataFrame]) -> Chart:
    if isinstance(spec, TextBlockConfig):
        return TextBlock(spec.html, chart_id=spec.id)
    if isinstance(spec, NotesConfig):
        return Notes(
            template=spec.template,
            heading=spec.heading,
            textfilename=spec.textfilename,
            chart_id=spec.id,
        )
    if isinstance(spec, LinkListConfig):
        if isinstance(spec.links, dict):
            grouped = {heading: _entries(group) for heading, group in spec.links.items()}
            return LinkList(grouped, chart_id=spec.id, title=spec.title)
        return LinkList(_entries(spec.links), chart_id=spec.id, title=spec.title)
    if isinstance(spec, DataTableConfig):
        return DataTable(
            spec.id,
            _table_for(spec.dataset, tables),
            spec.dataset,
            columns=spec.columns,
            title=spec.title,
            max_rows=spec.max_rows,
        )
    if isinstance(spec, LineChartConfig):
        return LineChart(
            spec.id,
            _table_for(spec.dataset, tables),
            spec.dataset,
            x=spec.x,
            y=spec.y,
            color=spec.color,
            title=spec.title,
            height=spec.height,
        )
    if isinstance(spec, ReportIndexConfig):
        return ReportIndex(
            spec.id,
            spec.manifest,
            title=spec.title,
            group_by=spec.group_by,
            sort_by=spec.sort_by,
        )
    raise TypeError(f"Unsupported chart config: {type(spec).__name__}")


def build_charts(specs: Sequence[ChartConfig], tables: Mapping[str, pd.DataFrame]) -> list[Chart]:
    return [build_chart(spec, tables) for spec in specs]
