from __future__ import annotations

from enum import Enum

from datapages.errors import UnsupportedFormatError


class DataFormat(str, Enum):
    csv_embedded = "csv_embedded"
    json_embedded = "json_embedded"
    csv_external = "csv_external"
    json_external = "json_external"
    parquet = "parquet"

    @property
    def is_external(self) -> bool:
        return self in _EXTERNAL_FORMATS

    @property
    def file_extension(self) -> str | None:
        return _FILE_EXTENSIONS.get(self)

    def __str__(self) -> str:
        return self.value


_EXTERNAL_FORMATS = frozenset(
    {DataFormat.csv_external, DataFormat.json_external, DataFormat.parquet}
)
_FILE_EXTENSIONS = {
    DataFormat.csv_external: "csv",
    DataFormat.json_external: "json",
    DataFormat.parquet: "parquet",
}

ALLOWED_FORMATS: tuple[str, ...] = tuple(fmt.value for fmt in DataFormat)


def parse_format(value: DataFormat | str) -> DataFormat:
    if isinstance(value, DataFormat):
        return value
    try:
        return DataFormat(str(value))
    except ValueError:
        raise UnsupportedFormatError(value, ALLOWED_FORMATS) from None
