from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from datapages.formats import DataFormat, parse_format
from datapages.io.encode import EncodedDataset
from datapages.paths import ProjectPaths, build_project_paths
from datapages.report.common import template_env

LOGGER = logging.getLogger(__name__)

LAUNCHER_TEMPLATES = {
    "open.sh": "open.sh.j2",
    "open.bat": "open.bat.j2",
}
EXECUTABLE_MODE = 0o755


@dataclass(frozen=True)
class ProjectLayout:
    html_path: Path
    project_dir: Path
    data_dir: Path | None
    data_files: tuple[Path, ...] = ()
    launchers: tuple[Path, ...] = ()
    readme: Path | None = None
    pages: tuple[Path, ...] = ()
    assets: tuple[Path, ...] = ()


def _write_payload(path: Path, payload: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(payload, bytes):
        path.write_bytes(payload)
    else:
        path.write_text(payload, encoding="utf-8", newline="\n")


class ProjectWriter:
    """Lays out the files of one page or page collection.

    A writer remembers which dataset names it has written, so a dataset shared
    by several pages of a collection lands on disk once per build.
    """

    def __init__(
        self,
        outfile: Path,
        dataformat: DataFormat | str,
        *,
        launcher_scripts: bool = True,
        project_dir: bool | None = None,
    ) -> None:
        self.dataformat = parse_format(dataformat)
        external = self.dataformat.is_external if project_dir is None else project_dir
        self.paths: ProjectPaths = build_project_paths(Path(outfile), external=external)
        self.launcher_scripts = launcher_scripts
        self._written: set[str] = set()
        self._data_files: list[Path] = []
        self._launchers: list[Path] = []
        self._readme: Path | None = None
        self._pages: list[Path] = []
        self._assets: list[Path] = []

    @property
    def written_names(self) -> frozenset[str]:
        return frozenset(self._written)

    def write_datasets(self, datasets: Mapping[str, EncodedDataset]) -> list[Path]:
        written: list[Path] = []
        if not self.dataformat.is_external:
            return written
        for name, encoded in datasets.items():
            if name in self._written:
                LOGGER.debug("Dataset %s already written; skipping", name)
                continue
            if encoded.relative_path is None:
                raise ValueError(f"Dataset {name!r} is encoded as {encoded.dataformat}")
            path = self.paths.root / encoded.relative_path
            _write_payload(path, encoded.payload)
            LOGGER.info("Wrote dataset %s to %s", name, path)
            self._written.add(name)
            self._data_files.append(path)
            written.append(path)
        return written

    def write_support_files(self, page_files: Iterable[str] = ()) -> list[Path]:
        """Write the launcher scripts and README for an external-format project."""
        if not (self.dataformat.is_external and self.launcher_scripts):
            return []
        env = template_env()
        html_filename = self.paths.html.name
        written: list[Path] = []
        for filename, template_name in LAUNCHER_TEMPLATES.items():
            path = self.paths.root / filename
            content = env.get_template(template_name).render(html_filename=html_filename)
            _write_payload(path, content)
            if filename.endswith(".sh"):
                path.chmod(EXECUTABLE_MODE)
            written.append(path)
        self._launchers = list(written)

        pages = list(dict.fromkeys([html_filename, *page_files]))
        data_files = sorted(
            path.relative_to(self.paths.root).as_posix() for path in self._data_files
        )
        readme = self.paths.root / "README.md"
        _write_payload(
            readme,
            env.get_template("README.md.j2").render(
                html_filename=html_filename,
                pages=pages,
                data_files=data_files,
            ),
        )
        self._readme = readme
        written.append(readme)
        LOGGER.info("Wrote launcher scripts and README to %s", self.paths.root)
        return written

    def layout(
        self,
        datasets: Mapping[str, EncodedDataset],
        *,
        page_files: Iterable[str] = (),
    ) -> ProjectLayout:
        """Write dataset files and support files; embedded formats write nothing here."""
        self.write_datasets(datasets)
        self.write_support_files(page_files)
        return self.project_layout()

    def write_html(self, filename: str, html: str) -> Path:
        path = self.paths.root / filename
        _write_payload(path, html)
        LOGGER.info("Wrote page %s", path)
        if path not in self._pages:
            self._pages.append(path)
        return path

    def write_asset(
        self,
        relative_path: str,
        content: str | bytes,
        *,
        preserve_existing: bool = True,
    ) -> bool:
        """Write a chart asset; existing files are kept when ``preserve_existing`` is set."""
        path = self.paths.root / relative_path
        if path not in self._assets:
            self._assets.append(path)
        if preserve_existing and path.exists():
            LOGGER.debug("Keeping existing asset %s", path)
            return False
        _write_payload(path, content)
        LOGGER.info("Wrote asset %s", path)
        return True

    def project_layout(self) -> ProjectLayout:
        return ProjectLayout(
            html_path=self.paths.html,
            project_dir=self.paths.root,
            data_dir=self.paths.data if self.dataformat.is_external else None,
            data_files=tuple(self._data_files),
            launchers=tuple(self._launchers),
            readme=self._readme,
            pages=tuple(self._pages),
            assets=tuple(self._assets),
        )
