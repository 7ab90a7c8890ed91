from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from datapages.charts.base import (
    Chart,
    ChartFragments,
    RenderContext,
    chart_script,
    render_appearance,
    require_columns,
)
from datapages.errors import ChartConfigError


class DataTable(Chart):
    """Sortable HTML table over one dataset."""

    kind = "data_table"

    def __init__(
        self,
        chart_id: str,
        table: pd.DataFrame,
        dataset: str,
        columns: Sequence[str] | None = None,
        title: str = "",
        max_rows: int | None = None,
    ) -> None:
        selected = [str(column) for column in (columns or table.columns)]
        require_columns(table, selected, chart=f"DataTable {chart_id!r}")
        if max_rows is not None and max_rows < 1:
            raise ChartConfigError(f"DataTable {chart_id!r}: max_rows must be positive")
        self.dataset = dataset
        self.columns = selected
        self.title = title
        self.max_rows = max_rows
        super().__init__(chart_id)

    def dependencies(self) -> list[str]:
        return [self.dataset]

    def render(self, context: RenderContext) -> ChartFragments:
        appearance = render_appearance(
            "data_table.html.j2",
            chart_id=context.chart_id,
            title=self.title,
            columns=self.columns,
            max_rows=self.max_rows,
        )
        functional = chart_script(
            "data_table.js",
            {
                "chart_id": context.chart_id,
                "dataset": self.dataset,
                "columns": self.columns,
                "max_rows": self.max_rows,
            },
        )
        return ChartFragments(appearance=appearance, functional=functional)
