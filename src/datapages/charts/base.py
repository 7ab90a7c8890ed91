from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

import pandas as pd
from pandas.api import types as ptypes

from datapages.errors import ChartConfigError
from datapages.formats import DataFormat, parse_format
from datapages.report.common import js_literal, read_template_source, template_env
from datapages.sanitize import sanitize


@dataclass(frozen=True, slots=True)
class ChartFragments:
    appearance: str
    functional: str


@dataclass(frozen=True, slots=True)
class RenderContext:
    chart_id: str
    dataformat: DataFormat = DataFormat.csv_embedded


@dataclass(frozen=True, slots=True)
class ChartAsset:
    relative_path: str
    content: str
    preserve_existing: bool = True


class Chart(ABC):
    """A visualization that contributes HTML controls and a data-bound script to a page.

    Subclasses validate their inputs and set their attributes before calling
    ``super().__init__``; both fragments are rendered there, so a bad
    configuration fails at construction rather than in the browser.
    """

    kind: ClassVar[str] = "chart"

    def __init__(
        self,
        chart_id: str | None = None,
        *,
        dataformat: DataFormat | str = DataFormat.csv_embedded,
    ) -> None:
        self.chart_id = sanitize(chart_id or self.kind)
        self._context = RenderContext(self.chart_id, parse_format(dataformat))
        self._fragments = self.render(self._context)

    @abstractmethod
    def render(self, context: RenderContext) -> ChartFragments:
        raise NotImplementedError

    def dependencies(self) -> list[str]:
        return []

    def script_dependencies(self) -> list[str]:
        return []

    def assets(self, context: RenderContext) -> list[ChartAsset]:
        return []

    def appearance_fragment(self) -> str:
        return self._fragments.appearance

    def functional_fragment(self) -> str:
        return self._fragments.functional

    def fragments_for(self, context: RenderContext) -> ChartFragments:
        if context == self._context:
            return self._fragments
        return self.render(context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(chart_id={self.chart_id!r})"


def render_appearance(template_name: str, **context: object) -> str:
    return template_env().get_template(f"charts/{template_name}").render(**context)


def chart_script(script_name: str, config: dict[str, object]) -> str:
    """Prefix a chart's static script with its JSON config object."""
    return f"var config = {js_literal(config)};\n" + read_template_source(f"charts/{script_name}")


def require_columns(table: pd.DataFrame, columns: Iterable[str], *, chart: str) -> None:
    missing = [column for column in columns if column not in table.columns]
    if missing:
        available = ", ".join(str(column) for column in table.columns)
        raise ChartConfigError(
            f"{chart}: column(s) {', '.join(missing)} not found; available columns: {available}"
        )


def require_numeric(table: pd.DataFrame, column: str, *, chart: str) -> None:
    require_columns(table, [column], chart=chart)
    series = table[column]
    if ptypes.is_bool_dtype(series) or not ptypes.is_numeric_dtype(series):
        raise ChartConfigError(f"{chart}: column {column!r} must be numeric, got {series.dtype}")
