from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

import pandas as pd

from datapages.errors import DuplicateNameError, UnknownDatasetError

if TYPE_CHECKING:
    from datapages.charts.base import Chart


def _same_table(left: pd.DataFrame, right: pd.DataFrame) -> bool:
    if left is right:
        return True
    return list(left.columns) == list(right.columns) and left.equals(right)


class DatasetRegistry:
    """Ordered mapping of dataset name to table for one page or collection."""

    def __init__(self, datasets: Mapping[str, pd.DataFrame] | None = None) -> None:
        self._tables: dict[str, pd.DataFrame] = {}
        for name, table in (datasets or {}).items():
            self.register(name, table)

    def register(self, name: str, table: pd.DataFrame) -> None:
        if not isinstance(table, pd.DataFrame):
            raise TypeError(f"Dataset {name!r} must be a pandas DataFrame, got {type(table)!r}")
        existing = self._tables.get(name)
        if existing is not None:
            if not _same_table(existing, table):
                raise DuplicateNameError(name)
            return
        self._tables[name] = table

    def resolve(self, names: Iterable[str]) -> dict[str, pd.DataFrame]:
        requested = set(names)
        unknown = requested - self._tables.keys()
        if unknown:
            raise UnknownDatasetError(unknown, known=self._tables.keys())
        return {name: table for name, table in self._tables.items() if name in requested}

    @staticmethod
    def dependencies_of(charts: Iterable[Chart]) -> set[str]:
        names: set[str] = set()
        for chart in charts:
            names.update(chart.dependencies())
        return names

    @classmethod
    def merged(cls, registries: Iterable[DatasetRegistry]) -> DatasetRegistry:
        combined = cls()
        for registry in registries:
            for name, table in registry.items():
                combined.register(name, table)
        return combined

    def get(self, name: str) -> pd.DataFrame | None:
        return self._tables.get(name)

    def names(self) -> list[str]:
        return list(self._tables)

    def items(self) -> Iterator[tuple[str, pd.DataFrame]]:
        return iter(self._tables.items())

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)
