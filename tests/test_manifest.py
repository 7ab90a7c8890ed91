from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

from datapages.io.manifest import ADDED_COLUMN, ManifestEntry, add_to_manifest, manifest_columns

NOW = datetime(2024, 5, 1, 12, 30, 0)


def _entry(html_filename: str, day: date, description: str = "", **extra: str) -> ManifestEntry:
    return ManifestEntry(
        path="reports",
        html_filename=html_filename,
        description=description,
        date=day,
        extra_columns=dict(extra),
    )


def test_creates_the_manifest_with_required_columns(tmp_path: Path) -> None:
    manifest = tmp_path / "nested" / "manifest.csv"

    add_to_manifest(manifest, _entry("a.html", date(2024, 1, 1), "First"), now=NOW)

    assert manifest_columns(manifest) == ["path", "html_filename", "description", "date", ADDED_COLUMN]
    assert manifest.read_text(encoding="utf-8").splitlines()[1] == (
        "reports,a.html,First,2024-01-01,2024-05-01 12:30:00"
    )


def test_rows_are_sorted_newest_first(tmp_path: Path) -> None:
    manifest = tmp_path / "manifest.csv"
    add_to_manifest(manifest, _entry("jan.html", date(2024, 1, 15)), now=NOW)
    add_to_manifest(manifest, _entry("mar.html", date(2024, 3, 15)), now=NOW)
    add_to_manifest(manifest, _entry("feb.html", date(2024, 2, 15)), now=NOW)

    frame = pd.read_csv(manifest)

    assert list(frame["html_filename"]) == ["mar.html", "feb.html", "jan.html"]


def test_same_report_is_replaced(tmp_path: Path) -> None:
    manifest = tmp_path / "manifest.csv"
    add_to_manifest(manifest, _entry("a.html", date(2024, 1, 1), "Draft"), now=NOW)
    add_to_manifest(manifest, _entry("a.html", date(2024, 1, 1), "Final"), now=NOW)

    frame = pd.read_csv(manifest)

    assert len(frame) == 1
    assert frame.loc[0, "description"] == "Final"


def test_missing_columns_raise_unless_filled(tmp_path: Path) -> None:
    manifest = tmp_path / "manifest.csv"
    add_to_manifest(manifest, _entry("a.html", date(2024, 1, 1), author="Sam"), now=NOW)

    with pytest.raises(ValueError, match="author"):
        add_to_manifest(manifest, _entry("b.html", date(2024, 2, 1)), now=NOW)
    assert len(pd.read_csv(manifest)) == 1

    add_to_manifest(manifest, _entry("b.html", date(2024, 2, 1)), fill_missing=True, now=NOW)

    frame = pd.read_csv(manifest, keep_default_na=False)
    assert list(frame["html_filename"]) == ["b.html", "a.html"]
    assert list(frame["author"]) == ["", "Sam"]


def test_extra_columns_cannot_shadow_required_ones(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="date"):
        add_to_manifest(tmp_path / "m.csv", _entry("a.html", date(2024, 1, 1), date="x"), now=NOW)
