from __future__ import annotations

from pathlib import Path

import pandas as pd
import yaml
from typer.testing import CliRunner

from datapages.cli import app


def _project(tmp_path: Path, **overrides: object) -> Path:
    (tmp_path / "sales.csv").write_text("month,total\n1,10.5\n2,12\n", encoding="utf-8")
    config = {
        "output": "site/report.html",
        "tab_title": "Sales",
        "datasets": {"sales": "sales.csv"},
        "charts": [
            {"type": "text_block", "html": "<p>Monthly totals</p>"},
            {"type": "line_chart", "id": "trend", "dataset": "sales", "x": "month", "y": "total"},
        ],
    }
    config.update(overrides)
    config_path = tmp_path / "report.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return config_path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "render" in result.stdout
    assert "add-manifest-entry" in result.stdout


def test_render_writes_embedded_page(tmp_path: Path) -> None:
    config_path = _project(tmp_path)

    runner = CliRunner()
    result = runner.invoke(app, ["render", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    html_path = tmp_path / "site" / "report.html"
    assert f"Report written to: {html_path}" in result.stdout
    html = html_path.read_text(encoding="utf-8")
    assert "<title>Sales</title>" in html
    assert "\nmonth,total\n1,10.5\n2,12.0\n\n</script>" in html


def test_render_dataformat_override_writes_project(tmp_path: Path) -> None:
    config_path = _project(tmp_path)
    out = tmp_path / "elsewhere" / "sales.html"

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["render", "--config", str(config_path), "--out", str(out), "--dataformat", "parquet"],
    )

    assert result.exit_code == 0, result.output
    project = tmp_path / "elsewhere" / "sales"
    assert (project / "sales.html").exists()
    assert "Data files: 1" in result.stdout
    assert pd.read_parquet(project / "data" / "sales.parquet")["total"].tolist() == [10.5, 12.0]


def test_render_collection_from_pages(tmp_path: Path) -> None:
    config_path = _project(
        tmp_path,
        charts=[{"type": "link_list", "links": [{"title": "Detail", "href": "page:Detail"}]}],
        dataformat="csv_external",
        pages=[
            {
                "tab_title": "Detail",
                "charts": [{"type": "data_table", "id": "rows", "dataset": "sales"}],
            }
        ],
    )

    runner = CliRunner()
    result = runner.invoke(app, ["render", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    project = tmp_path / "site" / "report"
    assert sorted(path.name for path in project.iterdir()) == [
        "README.md",
        "data",
        "detail.html",
        "open.bat",
        "open.sh",
        "report.html",
    ]
    assert 'href="detail.html"' in (project / "report.html").read_text(encoding="utf-8")


def test_render_rejects_unknown_dataformat(tmp_path: Path) -> None:
    config_path = _project(tmp_path)

    runner = CliRunner()
    result = runner.invoke(app, ["render", "--config", str(config_path), "--dataformat", "xml"])

    assert result.exit_code == 2
    assert not (tmp_path / "site").exists()


def test_add_manifest_entry_command(tmp_path: Path) -> None:
    manifest = tmp_path / "manifest.csv"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "add-manifest-entry",
            "--manifest",
            str(manifest),
            "--html-filename",
            "q1.html",
            "--path",
            "2024",
            "--description",
            "First quarter",
            "--date",
            "2024-04-01",
            "--column",
            "author=Sam",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Manifest updated" in result.stdout
    frame = pd.read_csv(manifest)
    assert frame.loc[0, "html_filename"] == "q1.html"
    assert frame.loc[0, "author"] == "Sam"


def test_add_manifest_entry_rejects_malformed_column(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "add-manifest-entry",
            "--manifest",
            str(tmp_path / "manifest.csv"),
            "--html-filename",
            "q1.html",
            "--column",
            "no-separator",
        ],
    )

    assert result.exit_code == 2
    assert not (tmp_path / "manifest.csv").exists()
