from __future__ import annotations

import logging
from pathlib import Path

from datapages.charts.base import Chart, ChartFragments, RenderContext, chart_script, render_appearance
from datapages.charts.scripts import PAPAPARSE

LOGGER = logging.getLogger(__name__)


class ReportIndex(Chart):
    """Links to every report recorded in a manifest CSV (see ``add_to_manifest``).

    ``manifest_path`` is fetched by the browser relative to the page, so it
    should point at the manifest as seen from the rendered HTML file.
    """

    kind = "report_index"

    def __init__(
        self,
        chart_id: str,
        manifest_path: str,
        title: str = "Report Archive",
        group_by: str | None = None,
        sort_by: str = "date",
    ) -> None:
        if not Path(manifest_path).exists():
            LOGGER.warning("Manifest file does not exist yet: %s", manifest_path)
        self.manifest_path = Path(manifest_path).as_posix()
        self.title = title
        self.group_by = group_by
        self.sort_by = sort_by
        super().__init__(chart_id)

    def script_dependencies(self) -> list[str]:
        return [PAPAPARSE]

    def render(self, context: RenderContext) -> ChartFragments:
        appearance = render_appearance(
            "report_index.html.j2",
            chart_id=context.chart_id,
            title=self.title,
        )
        functional = chart_script(
            "report_index.js",
            {
                "chart_id": context.chart_id,
                "manifest": self.manifest_path,
                "group_by": self.group_by or "",
                "sort_by": self.sort_by,
            },
        )
        return ChartFragments(appearance=appearance, functional=functional)
