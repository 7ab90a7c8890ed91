from __future__ import annotations

import pandas as pd

from datapages.charts.base import (
    Chart,
    ChartFragments,
    RenderContext,
    chart_script,
    render_appearance,
    require_columns,
    require_numeric,
)
from datapages.charts.scripts import PLOTLY
from datapages.errors import ChartConfigError


class LineChart(Chart):
    """Plotly line chart with one trace per value of an optional ``color`` column."""

    kind = "line_chart"

    def __init__(
        self,
        chart_id: str,
        table: pd.DataFrame,
        dataset: str,
        x: str,
        y: str,
        color: str | None = None,
        title: str = "",
        height: int = 450,
    ) -> None:
        label = f"LineChart {chart_id!r}"
        require_columns(table, [x], chart=label)
        require_numeric(table, y, chart=label)
        if color is not None:
            require_columns(table, [color], chart=label)
        if height < 100:
            raise ChartConfigError(f"{label}: height must be at least 100 pixels")
        self.dataset = dataset
        self.x = x
        self.y = y
        self.color = color
        self.title = title
        self.height = height
        super().__init__(chart_id)

    def dependencies(self) -> list[str]:
        return [self.dataset]

    def script_dependencies(self) -> list[str]:
        return [PLOTLY]

    def render(self, context: RenderContext) -> ChartFragments:
        appearance = render_appearance(
            "line_chart.html.j2",
            chart_id=context.chart_id,
            title=self.title,
            color=self.color,
            height=self.height,
        )
        functional = chart_script(
            "line_chart.js",
            {
                "chart_id": context.chart_id,
                "dataset": self.dataset,
                "x": self.x,
                "y": self.y,
                "color": self.color,
            },
        )
        return ChartFragments(appearance=appearance, functional=functional)
