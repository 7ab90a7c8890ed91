from __future__ import annotations

import csv
import io
import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from html import escape
from typing import Any

import numpy as np
import pandas as pd
from pandas.api import types as ptypes

from datapages.formats import DataFormat, parse_format
from datapages.paths import DATA_DIR_NAME
from datapages.report.common import escape_script_text, js_literal
from datapages.sanitize import IdAllocator, sanitize


@dataclass(frozen=True)
class EncodedDataset:
    name: str
    dataformat: DataFormat
    payload: str | bytes
    slug: str = ""

    def __post_init__(self) -> None:
        if not self.slug:
            object.__setattr__(self, "slug", sanitize(self.name))

    @property
    def file_extension(self) -> str | None:
        return self.dataformat.file_extension

    @property
    def element_id(self) -> str:
        return f"data_{self.slug}"

    @property
    def relative_path(self) -> str | None:
        if self.file_extension is None:
            return None
        return f"{DATA_DIR_NAME}/{self.slug}.{self.file_extension}"

    def container_html(self) -> str:
        body = ""
        if not self.dataformat.is_external:
            body = "\n" + escape_script_text(str(self.payload)) + "\n"
        return (
            f'<script type="text/plain" id="{self.element_id}"'
            f' data-name="{escape(self.name)}"'
            f' data-format="{self.dataformat.value}"'
            f' data-src="{escape(self.relative_path or "")}">{body}</script>'
        )

    def loader_script(self) -> str:
        return (
            f"registerDataset({js_literal(self.name)}, {js_literal(self.dataformat.value)}, "
            f"{js_literal(self.element_id)}, {js_literal(self.relative_path)});"
        )


def _serialize_value(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, pd.Timedelta):
        return str(value)
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _iso_datetimes(series: pd.Series) -> pd.Series:
    if getattr(series.dt, "tz", None) is not None:
        series = series.dt.tz_convert("UTC")
    return series.map(lambda value: None if pd.isna(value) else value.isoformat()).astype(object)


def _bool_text(series: pd.Series) -> pd.Series:
    return series.astype(object).map(
        lambda value: None if pd.isna(value) else ("true" if value else "false")
    )


def _text_frame(table: pd.DataFrame, *, booleans_as_text: bool) -> pd.DataFrame:
    frame = table.reset_index(drop=True).copy()
    frame.columns = [str(column) for column in frame.columns]
    for column in frame.columns:
        series = frame[column]
        if ptypes.is_datetime64_any_dtype(series):
            frame[column] = _iso_datetimes(series)
        elif ptypes.is_timedelta64_dtype(series):
            frame[column] = series.map(lambda value: None if pd.isna(value) else str(value))
        elif booleans_as_text and ptypes.is_bool_dtype(series):
            frame[column] = _bool_text(series)
    return frame


def to_csv_text(table: pd.DataFrame) -> str:
    frame = _text_frame(table, booleans_as_text=True)
    buffer = io.StringIO()
    frame.to_csv(
        buffer,
        index=False,
        na_rep="",
        lineterminator="\n",
        quoting=csv.QUOTE_MINIMAL,
    )
    return buffer.getvalue()


def to_json_text(table: pd.DataFrame) -> str:
    frame = _text_frame(table, booleans_as_text=False)
    rows = [
        {str(column): _serialize_value(value) for column, value in row.items()}
        for row in frame.to_dict(orient="records")
    ]
    return json.dumps(rows, indent=2, ensure_ascii=False, allow_nan=False)


def to_parquet_bytes(table: pd.DataFrame) -> bytes:
    frame = table.reset_index(drop=True)
    frame.columns = [str(column) for column in frame.columns]
    buffer = io.BytesIO()
    frame.to_parquet(buffer, engine="pyarrow", index=False)
    return buffer.getvalue()


def encode(
    name: str,
    table: pd.DataFrame,
    dataformat: DataFormat | str,
    *,
    slug: str = "",
) -> EncodedDataset:
    fmt = parse_format(dataformat)
    if fmt in (DataFormat.csv_embedded, DataFormat.csv_external):
        payload: str | bytes = to_csv_text(table)
    elif fmt in (DataFormat.json_embedded, DataFormat.json_external):
        payload = to_json_text(table)
    else:
        payload = to_parquet_bytes(table)
    return EncodedDataset(name=name, dataformat=fmt, payload=payload, slug=slug)


def encode_datasets(
    tables: Mapping[str, pd.DataFrame],
    dataformat: DataFormat | str,
) -> dict[str, EncodedDataset]:
    """Encode every table, giving each a file/element slug unique within the batch."""
    fmt = parse_format(dataformat)
    allocator = IdAllocator()
    return {
        name: encode(name, table, fmt, slug=allocator.allocate(name))
        for name, table in tables.items()
    }


def _coerce_column(series: pd.Series, dtype: Any) -> pd.Series:
    if series.dtype == dtype:
        return series
    if ptypes.is_datetime64_any_dtype(dtype):
        tz = getattr(dtype, "tz", None)
        parsed = pd.to_datetime(series, format="ISO8601", utc=tz is not None)
        if tz is not None:
            parsed = parsed.dt.tz_convert(tz)
        return parsed.astype(dtype)
    if ptypes.is_bool_dtype(dtype):
        mapped = series.map(
            lambda value: value
            if isinstance(value, bool) or value is None or pd.isna(value)
            else str(value).lower() == "true"
        )
        return mapped.astype(dtype)
    if ptypes.is_integer_dtype(dtype) or ptypes.is_float_dtype(dtype):
        return pd.to_numeric(series).astype(dtype)
    if ptypes.is_object_dtype(dtype) or ptypes.is_string_dtype(dtype):
        values = series.astype(object)
        return values.where(values.notna(), None).astype(dtype)
    return series.astype(dtype)


def decode(
    encoded: EncodedDataset,
    schema: Mapping[str, Any] | pd.Series | None = None,
) -> pd.DataFrame:
    """Parse an encoded payload back into a DataFrame.

    With ``schema`` (for example ``table.dtypes``) each column is coerced back
    to its source dtype; CSV fields are then read as text so that only empty
    fields become nulls.

    CSV has one spelling for an empty string and a null, so empty strings
    come back as nulls from both CSV formats. JSON and Parquet keep them.
    """
    dtypes = dict(schema.items()) if schema is not None else None
    fmt = encoded.dataformat
    if fmt == DataFormat.parquet:
        frame = pd.read_parquet(io.BytesIO(bytes(encoded.payload)), engine="pyarrow")
    elif fmt in (DataFormat.csv_embedded, DataFormat.csv_external):
        frame = pd.read_csv(
            io.StringIO(str(encoded.payload)),
            dtype=str if dtypes is not None else None,
            keep_default_na=False,
            na_values=[""],
            skip_blank_lines=False,
        )
    else:
        rows = json.loads(str(encoded.payload))
        columns = [str(column) for column in dtypes] if dtypes is not None else None
        frame = pd.DataFrame.from_records(rows, columns=columns)

    if dtypes is None:
        return frame
    for column, dtype in dtypes.items():
        key = str(column)
        if key in frame.columns:
            frame[key] = _coerce_column(frame[key], dtype)
    return frame
