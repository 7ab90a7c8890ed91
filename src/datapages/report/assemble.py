from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath

from datapages import __version__
from datapages.charts.base import Chart, RenderContext
from datapages.charts.scripts import CSV_SCRIPTS, PARQUET_SCRIPTS, PARQUET_WASM_MODULE
from datapages.errors import UnknownDatasetError
from datapages.formats import DataFormat, parse_format
from datapages.io.encode import EncodedDataset
from datapages.report.common import escape_script_text, js_literal, read_template_source, template_env
from datapages.report.page import Page
from datapages.sanitize import IdAllocator

_CSV_FORMATS = (DataFormat.csv_embedded, DataFormat.csv_external)


@dataclass(frozen=True)
class AssembledChart:
    chart_id: str
    appearance: str
    functional: str
    dependencies: tuple[str, ...]
    attribution: str

    @property
    def dependencies_js(self) -> str:
        return js_literal(list(self.dependencies))


def collect_script_dependencies(charts: Iterable[Chart], dataformat: DataFormat) -> list[str]:
    """Library URLs for a page, first-seen order, each URL once."""
    urls: list[str] = []
    for chart in charts:
        urls.extend(chart.script_dependencies())
    if dataformat in _CSV_FORMATS:
        urls.extend(CSV_SCRIPTS)
    elif dataformat == DataFormat.parquet:
        urls.extend(PARQUET_SCRIPTS)
    return list(dict.fromkeys(urls))


def _attribution(names: Iterable[str], encoded: Mapping[str, EncodedDataset]) -> str:
    labels = []
    for name in names:
        path = encoded[name].relative_path
        labels.append(PurePosixPath(path).name if path else name)
    return f"Data: {', '.join(labels)}" if labels else ""


def assemble(
    page: Page,
    encoded: Mapping[str, EncodedDataset],
    *,
    dataformat: DataFormat | str | None = None,
    allocator: IdAllocator | None = None,
    generated_at: str | None = None,
) -> str:
    """Build the complete HTML document for ``page``.

    ``encoded`` must hold every dataset the page's charts depend on; entries
    no chart reads are left out of the document. Nothing is written to disk.
    """
    fmt = parse_format(dataformat) if dataformat is not None else page.dataformat
    allocator = allocator or IdAllocator()

    needed = page.dependencies()
    missing = needed - set(encoded)
    if missing:
        raise UnknownDatasetError(missing, known=encoded.keys())
    datasets = [dataset for name, dataset in encoded.items() if name in needed]
    mismatched = sorted(dataset.name for dataset in datasets if dataset.dataformat != fmt)
    if mismatched:
        raise ValueError(f"Datasets {mismatched} were not encoded as {fmt.value}")

    charts: list[AssembledChart] = []
    for chart in page.charts:
        chart_id = allocator.allocate(chart.chart_id)
        fragments = chart.fragments_for(RenderContext(chart_id, fmt))
        dependencies = tuple(dict.fromkeys(chart.dependencies()))
        charts.append(
            AssembledChart(
                chart_id=chart_id,
                appearance=fragments.appearance,
                functional=escape_script_text(fragments.functional.strip()),
                dependencies=dependencies,
                attribution=_attribution(dependencies, encoded),
            )
        )

    urls = collect_script_dependencies(page.charts, fmt)
    template = template_env().get_template("page.html.j2")
    return template.render(
        tab_title=page.tab_title,
        page_header=page.page_header,
        notes=page.notes,
        stylesheets=[url for url in urls if url.endswith(".css")],
        scripts=[url for url in urls if not url.endswith(".css")],
        parquet_module=PARQUET_WASM_MODULE if fmt == DataFormat.parquet else None,
        runtime=read_template_source("runtime.js"),
        charts=charts,
        datasets=datasets,
        generated_at=generated_at,
        version=__version__,
    )
