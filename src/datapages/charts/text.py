from __future__ import annotations

from pathlib import PurePosixPath

from datapages.charts.base import (
    Chart,
    ChartAsset,
    ChartFragments,
    RenderContext,
    chart_script,
    render_appearance,
)
from datapages.errors import ChartConfigError
from datapages.formats import DataFormat
from datapages.paths import NOTES_DIR_NAME

DEFAULT_NOTES_TEMPLATE = "Add your notes here..."


class TextBlock(Chart):
    """Raw HTML placed on the page as-is."""

    kind = "text_block"

    def __init__(self, html: str, chart_id: str | None = None) -> None:
        self.html = str(html)
        super().__init__(chart_id)

    def render(self, context: RenderContext) -> ChartFragments:
        return ChartFragments(appearance=self.html, functional="")


class Notes(Chart):
    """Commentary that stays editable after the page is generated.

    Embedded pages show ``template`` as static text. External pages read
    ``notes/<textfilename>`` at view time; that file is created from
    ``template`` on the first render and never overwritten afterwards.
    """

    kind = "notes"

    def __init__(
        self,
        template: str = DEFAULT_NOTES_TEMPLATE,
        heading: str = "Notes",
        textfilename: str = "notes.txt",
        chart_id: str | None = None,
        *,
        dataformat: DataFormat | str = DataFormat.csv_embedded,
    ) -> None:
        if not textfilename or PurePosixPath(textfilename).name != textfilename:
            raise ChartConfigError(f"Notes: textfilename must be a bare file name, got {textfilename!r}")
        self.template = template
        self.heading = heading
        self.textfilename = textfilename
        super().__init__(chart_id or PurePosixPath(textfilename).stem, dataformat=dataformat)

    @property
    def src(self) -> str:
        return f"{NOTES_DIR_NAME}/{self.textfilename}"

    def render(self, context: RenderContext) -> ChartFragments:
        external = context.dataformat.is_external
        appearance = render_appearance(
            "notes.html.j2",
            chart_id=context.chart_id,
            heading=self.heading,
            template=self.template,
            src=self.src,
            external=external,
        )
        if not external:
            return ChartFragments(appearance=appearance, functional="")
        functional = chart_script(
            "notes.js",
            {"chart_id": context.chart_id, "src": self.src, "template": self.template},
        )
        return ChartFragments(appearance=appearance, functional=functional)

    def assets(self, context: RenderContext) -> list[ChartAsset]:
        if not context.dataformat.is_external:
            return []
        return [ChartAsset(self.src, self.template, preserve_existing=True)]
