from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from datapages.formats import DataFormat


class LinkConfig(BaseModel):
    title: str
    href: str
    blurb: str = ""


class TextBlockConfig(BaseModel):
    type: Literal["text_block"]
    id: str | None = None
    html: str


class NotesConfig(BaseModel):
    type: Literal["notes"]
    id: str | None = None
    template: str = "Add your notes here..."
    heading: str = "Notes"
    textfilename: str = "notes.txt"


class LinkListConfig(BaseModel):
    type: Literal["link_list"]
    id: str | None = None
    title: str = ""
    links: list[LinkConfig] | dict[str, list[LinkConfig]] = Field(default_factory=list)


class DataTableConfig(BaseModel):
    type: Literal["data_table"]
    id: str
    dataset: str
    columns: list[str] | None = None
    title: str = ""
    max_rows: int | None = Field(default=None, ge=1)


class LineChartConfig(BaseModel):
    type: Literal["line_chart"]
    id: str
    dataset: str
    x: str
    y: str
    color: str | None = None
    title: str = ""
    height: int = Field(default=450, ge=100)


class ReportIndexConfig(BaseModel):
    type: Literal["report_index"]
    id: str
    manifest: str
    title: str = "Report Archive"
    group_by: str | None = None
    sort_by: str = "date"


ChartConfig = Annotated[
    Union[
        TextBlockConfig,
        NotesConfig,
        LinkListConfig,
        DataTableConfig,
        LineChartConfig,
        ReportIndexConfig,
    ],
    Field(discriminator="type"),
]


class PageConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tab_title: str
    page_header: str = ""
    notes: str = ""
    dataformat: DataFormat | None = None
    charts: list[ChartConfig] = Field(default_factory=list)


class ManifestConfig(BaseModel):
    path: str
    entry_path: str = ""
    description: str = ""
    report_date: date | None = None
    fill_missing: bool = False
    extra_columns: dict[str, Any] = Field(default_factory=dict)


class OutputOptions(BaseModel):
    include_generated_at: bool = False
    launcher_scripts: bool = True


class RenderConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    output: str = "report.html"
    dataformat: DataFormat = DataFormat.csv_embedded
    tab_title: str = "Report"
    page_header: str = ""
    notes: str = ""
    datasets: dict[str, str] = Field(default_factory=dict)
    charts: list[ChartConfig] = Field(default_factory=list)
    pages: list[PageConfig] = Field(default_factory=list)
    manifest: ManifestConfig | None = None
    options: OutputOptions = Field(default_factory=OutputOptions)


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> RenderConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = RenderConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.output = _resolve_optional_path(config.output, base_dir) or config.output
    config.datasets = {
        name: _resolve_optional_path(table_path, base_dir) or table_path
        for name, table_path in config.datasets.items()
    }
    if config.manifest is not None:
        config.manifest.path = (
            _resolve_optional_path(config.manifest.path, base_dir) or config.manifest.path
        )
    return config
