from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from datapages.charts.base import Chart
from datapages.formats import DataFormat, parse_format
from datapages.report.registry import DatasetRegistry


class Page:
    """Charts, the datasets they read and the page's presentation settings.

    The data format is checked here so an unknown value fails before anything
    is rendered or written.
    """

    def __init__(
        self,
        charts: Sequence[Chart] = (),
        datasets: DatasetRegistry | Mapping[str, pd.DataFrame] | None = None,
        *,
        tab_title: str = "Report",
        page_header: str = "",
        notes: str = "",
        dataformat: DataFormat | str = DataFormat.csv_embedded,
    ) -> None:
        self.dataformat = parse_format(dataformat)
        for chart in charts:
            if not isinstance(chart, Chart):
                raise TypeError(f"Page charts must be Chart instances, got {type(chart).__name__}")
        self.charts: tuple[Chart, ...] = tuple(charts)
        if isinstance(datasets, DatasetRegistry):
            self.registry = datasets
        else:
            self.registry = DatasetRegistry(datasets)
        self.tab_title = tab_title
        self.page_header = page_header
        self.notes = notes

    def dependencies(self) -> set[str]:
        return DatasetRegistry.dependencies_of(self.charts)

    def resolve_datasets(self) -> dict[str, pd.DataFrame]:
        """Tables read by at least one chart, in registration order."""
        return self.registry.resolve(self.dependencies())

    def with_format(self, dataformat: DataFormat | str) -> Page:
        return Page(
            self.charts,
            self.registry,
            tab_title=self.tab_title,
            page_header=self.page_header,
            notes=self.notes,
            dataformat=dataformat,
        )

    def __repr__(self) -> str:
        return (
            f"Page(tab_title={self.tab_title!r}, charts={len(self.charts)}, "
            f"dataformat={self.dataformat.value!r})"
        )
