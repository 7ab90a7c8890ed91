from __future__ import annotations

import shutil
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

from datapages.charts.table import DataTable
from datapages.charts.text import Notes, TextBlock
from datapages.config import OutputOptions
from datapages.errors import UnknownDatasetError, UnsupportedFormatError
from datapages.io.manifest import ManifestEntry
from datapages.report.page import Page
from datapages.report.render import render_page


def _sales() -> pd.DataFrame:
    return pd.DataFrame({"x": [1, 2, 3], "y": [1.5, float("nan"), 3.25]})


def _meta() -> pd.DataFrame:
    return pd.DataFrame({"label": ["Q1 report, final"]})


def _sales_page(dataformat: str) -> Page:
    sales = _sales()
    return Page(
        [DataTable("sales", sales, "sales")],
        {"sales": sales, "meta": _meta()},
        tab_title="Sales",
        dataformat=dataformat,
    )


def _tree(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_external_csv_writes_only_datasets_charts_read(tmp_path: Path) -> None:
    layout = render_page(_sales_page("csv_external"), tmp_path / "sales.html")

    project = tmp_path / "sales"
    assert layout.project_dir == project
    assert layout.html_path == project / "sales.html"
    assert (project / "data" / "sales.csv").read_text(encoding="utf-8") == "x,y\n1,1.5\n2,\n3,3.25\n"
    assert not (project / "data" / "meta.csv").exists()

    html = layout.html_path.read_text(encoding="utf-8")
    assert 'data-src="data/sales.csv"' in html
    assert '"meta"' not in html
    assert "data_meta" not in html
    assert "Q1 report" not in html


def test_embedded_csv_is_a_single_file(tmp_path: Path) -> None:
    layout = render_page(_sales_page("csv_embedded"), tmp_path / "sales.html")

    assert list(tmp_path.iterdir()) == [tmp_path / "sales.html"]
    assert layout.data_dir is None
    assert layout.launchers == ()
    html = layout.html_path.read_text(encoding="utf-8")
    assert "\nx,y\n1,1.5\n2,\n3,3.25\n\n</script>" in html
    assert "Q1 report" not in html


@pytest.mark.parametrize("dataformat", ["csv_external", "json_external", "parquet"])
def test_external_projects_ship_launchers_and_readme(tmp_path: Path, dataformat: str) -> None:
    layout = render_page(_sales_page(dataformat), tmp_path / "sales.html")

    assert [path.name for path in layout.launchers] == ["open.sh", "open.bat"]
    assert layout.readme is not None
    readme = layout.readme.read_text(encoding="utf-8")
    assert "`sales.html`" in readme
    assert f"`data/sales.{layout.data_files[0].suffix.lstrip('.')}`" in readme
    assert len(layout.data_files) == 1


def test_launcher_scripts_can_be_switched_off(tmp_path: Path) -> None:
    layout = render_page(
        _sales_page("parquet"),
        tmp_path / "sales.html",
        OutputOptions(launcher_scripts=False),
    )

    assert layout.launchers == ()
    assert sorted(path.name for path in layout.project_dir.iterdir()) == ["data", "sales.html"]


@pytest.mark.parametrize("dataformat", ["csv_embedded", "csv_external", "json_external", "parquet"])
def test_rendering_is_byte_identical_across_runs(tmp_path: Path, dataformat: str) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"

    render_page(_sales_page(dataformat), first / "sales.html")
    render_page(_sales_page(dataformat), second / "sales.html")

    assert _tree(first) == _tree(second)


def test_generated_at_is_opt_in(tmp_path: Path) -> None:
    plain = render_page(_sales_page("csv_embedded"), tmp_path / "plain.html")
    stamped = render_page(
        _sales_page("csv_embedded"),
        tmp_path / "stamped.html",
        OutputOptions(include_generated_at=True),
    )

    assert "Generated on" not in plain.html_path.read_text(encoding="utf-8")
    assert "Generated on" in stamped.html_path.read_text(encoding="utf-8")


def test_unknown_format_fails_before_anything_is_written(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedFormatError, match="not_a_real_format"):
        render_page(Page(tab_title="Broken", dataformat="not_a_real_format"), tmp_path / "out.html")

    assert list(tmp_path.iterdir()) == []


def test_unknown_dataset_fails_before_anything_is_written(tmp_path: Path) -> None:
    page = Page([DataTable("sales", _sales(), "sales")], {}, dataformat="csv_external")

    with pytest.raises(UnknownDatasetError):
        render_page(page, tmp_path / "out.html")

    assert list(tmp_path.iterdir()) == []


def test_overwriting_an_existing_report_replaces_it(tmp_path: Path) -> None:
    outfile = tmp_path / "sales.html"
    render_page(_sales_page("csv_external"), outfile)
    stale = tmp_path / "sales" / "data" / "sales.csv"
    stale.write_text("stale", encoding="utf-8")

    render_page(_sales_page("csv_external"), outfile)

    assert stale.read_text(encoding="utf-8").startswith("x,y\n")


def test_notes_in_an_external_page_are_kept_between_runs(tmp_path: Path) -> None:
    def _page() -> Page:
        return Page([Notes(template="Edit me")], tab_title="Notes", dataformat="json_external")

    render_page(_page(), tmp_path / "notes.html")
    notes_file = tmp_path / "notes" / "notes" / "notes.txt"
    notes_file.write_text("Kept", encoding="utf-8")
    render_page(_page(), tmp_path / "notes.html")

    assert notes_file.read_text(encoding="utf-8") == "Kept"
    html = (tmp_path / "notes" / "notes.html").read_text(encoding="utf-8")
    assert "notes/notes.txt" in html


def test_embedded_notes_write_no_files(tmp_path: Path) -> None:
    render_page(Page([Notes(template="Static text")], dataformat="csv_embedded"), tmp_path / "n.html")

    assert list(tmp_path.iterdir()) == [tmp_path / "n.html"]
    assert "Static text" in (tmp_path / "n.html").read_text(encoding="utf-8")


def test_rendering_records_the_page_in_a_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "archive" / "manifest.csv"
    entry = ManifestEntry(
        path="2024/q1",
        html_filename="report.html",
        description="First quarter",
        date=date(2024, 4, 1),
    )

    render_page(
        Page([TextBlock("<p>Q1</p>")]),
        tmp_path / "report.html",
        manifest_path=manifest,
        manifest_entry=entry,
    )

    frame = pd.read_csv(manifest)
    assert frame.loc[0, "path"] == "2024/q1"
    assert frame.loc[0, "description"] == "First quarter"
    assert frame.loc[0, "date"] == "2024-04-01"
    datetime.strptime(frame.loc[0, "added_to_manifest"], "%Y-%m-%d %H:%M:%S")


def test_rendering_into_a_removed_directory_recreates_it(tmp_path: Path) -> None:
    outfile = tmp_path / "nested" / "report.html"
    render_page(_sales_page("parquet"), outfile)
    shutil.rmtree(tmp_path / "nested")

    layout = render_page(_sales_page("parquet"), outfile)

    assert layout.data_files[0].read_bytes().startswith(b"PAR1")
