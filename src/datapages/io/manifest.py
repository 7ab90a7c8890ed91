from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

LOGGER = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["path", "html_filename", "description", "date"]
ADDED_COLUMN = "added_to_manifest"
_TEXT_COLUMNS = {"path": str, "html_filename": str, "description": str}


@dataclass(frozen=True)
class ManifestEntry:
    path: str
    html_filename: str
    description: str
    date: date
    extra_columns: dict[str, Any] = field(default_factory=dict)

    def row(self, added: datetime) -> dict[str, Any]:
        values: dict[str, Any] = {
            "path": self.path,
            "html_filename": self.html_filename,
            "description": self.description,
            "date": self.date.isoformat(),
            ADDED_COLUMN: added.strftime("%Y-%m-%d %H:%M:%S"),
        }
        for key, value in self.extra_columns.items():
            if key in values:
                raise ValueError(f"Extra manifest column {key!r} clashes with a required column")
            values[key] = value
        return values


def manifest_columns(manifest_path: Path) -> list[str]:
    if not manifest_path.exists():
        return []
    return list(pd.read_csv(manifest_path, nrows=0).columns)


def add_to_manifest(
    manifest_path: Path,
    entry: ManifestEntry,
    *,
    fill_missing: bool = False,
    now: datetime | None = None,
) -> Path:
    """Record a rendered report in a CSV manifest read by ``ReportIndex`` pages.

    An existing row with the same ``path`` and ``html_filename`` is replaced.
    Columns already present in the manifest but absent from ``entry`` raise
    ``ValueError`` unless ``fill_missing`` is set, in which case they are left
    empty. Rows are kept sorted by ``date``, newest first.
    """
    row = entry.row(now or datetime.now())

    if manifest_path.exists():
        frame = pd.read_csv(manifest_path, dtype=_TEXT_COLUMNS, keep_default_na=False, na_values=[""])
        missing = [
            column
            for column in frame.columns
            if column not in row and column != ADDED_COLUMN
        ]
        if missing and not fill_missing:
            raise ValueError(
                f"Manifest has column(s) {', '.join(missing)} but no value was provided; "
                "pass fill_missing=True or supply them as extra columns"
            )
        same_entry = (frame["path"].astype(str) == entry.path) & (
            frame["html_filename"].astype(str) == entry.html_filename
        )
        frame = frame.loc[~same_entry]
        frame = pd.concat([frame, pd.DataFrame([row])], ignore_index=True)
    else:
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        frame = pd.DataFrame([row])

    frame["date"] = frame["date"].astype(str)
    frame = frame.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)
    frame.to_csv(manifest_path, index=False, lineterminator="\n")
    LOGGER.info("Added %s/%s to manifest %s", entry.path, entry.html_filename, manifest_path)
    return manifest_path
