from __future__ import annotations

from pathlib import Path

import pandas as pd

TABLE_SUFFIXES = (".csv", ".tsv", ".json", ".parquet", ".pq")


def load_table(path: Path) -> pd.DataFrame:
    """Read a dataset file named in a render config."""
    suffix = path.suffix.lower()
    if suffix in (".parquet", ".pq"):
        return pd.read_parquet(path, engine="pyarrow")
    if suffix in (".csv", ".tsv"):
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        return pd.read_csv(path, sep="\t" if suffix == ".tsv" else ",", encoding="utf-8-sig")
    if suffix == ".json":
        return pd.read_json(path, orient="records", convert_dates=False)
    raise ValueError(
        f"Unsupported table file type {path.suffix!r} for {path}; "
        f"expected one of: {', '.join(TABLE_SUFFIXES)}"
    )
