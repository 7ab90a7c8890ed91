from __future__ import annotations

import html as html_lib
import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

from datapages.charts.base import Chart
from datapages.charts.links import LinkList, LinkListEntry
from datapages.config import OutputOptions
from datapages.errors import DuplicateFilenameError, MixedFormatError
from datapages.formats import DataFormat, parse_format
from datapages.io.encode import encode_datasets
from datapages.io.manifest import ManifestEntry
from datapages.io.write import ProjectLayout, ProjectWriter
from datapages.report.assemble import assemble
from datapages.report.page import Page
from datapages.report.registry import DatasetRegistry
from datapages.report.render import generated_timestamp, record_in_manifest, write_chart_assets
from datapages.sanitize import sanitize_filename

LOGGER = logging.getLogger(__name__)

PAGE_LINK_PREFIX = "page:"
_PAGE_LINK = re.compile(r'href="' + re.escape(PAGE_LINK_PREFIX) + r'([^"]*)"')


def page_filename(page: Page) -> str:
    return f"{sanitize_filename(page.tab_title)}.html"


class Pages:
    """A cover page plus content pages rendered into one flat project directory."""

    def __init__(
        self,
        cover: Page,
        pages: Sequence[Page] = (),
        dataformat: DataFormat | str | None = None,
    ) -> None:
        self.cover = cover
        self.pages = tuple(pages)
        self.dataformat = parse_format(dataformat) if dataformat is not None else None

    @property
    def all_pages(self) -> tuple[Page, ...]:
        return (self.cover, *self.pages)

    @classmethod
    def from_content(
        cls,
        content: Chart | Sequence[Chart],
        pages: Sequence[Page],
        *,
        tab_title: str = "Home",
        page_header: str = "",
        notes: str = "",
        dataformat: DataFormat | str = DataFormat.parquet,
    ) -> Pages:
        """Cover page made of ``content`` followed by a link to every page."""
        links = LinkList(
            [LinkListEntry(page.tab_title, page_filename(page), page.notes) for page in pages],
            chart_id="pages",
        )
        return cls._with_cover(content, links, pages, tab_title, page_header, notes, dataformat)

    @classmethod
    def from_groups(
        cls,
        content: Chart | Sequence[Chart],
        groups: Mapping[str, Sequence[Page]],
        *,
        tab_title: str = "Home",
        page_header: str = "",
        notes: str = "",
        dataformat: DataFormat | str = DataFormat.parquet,
    ) -> Pages:
        """Like ``from_content`` with the cover's links split under group headings."""
        links = LinkList(
            {
                heading: [
                    LinkListEntry(page.tab_title, page_filename(page), page.notes)
                    for page in group
                ]
                for heading, group in groups.items()
            },
            chart_id="pages",
        )
        pages = [page for group in groups.values() for page in group]
        return cls._with_cover(content, links, pages, tab_title, page_header, notes, dataformat)

    @classmethod
    def _with_cover(
        cls,
        content: Chart | Sequence[Chart],
        links: LinkList,
        pages: Sequence[Page],
        tab_title: str,
        page_header: str,
        notes: str,
        dataformat: DataFormat | str,
    ) -> Pages:
        charts = [content] if isinstance(content, Chart) else list(content)
        cover = Page(
            [*charts, links],
            DatasetRegistry(),
            tab_title=tab_title,
            page_header=page_header,
            notes=notes,
            dataformat=dataformat,
        )
        return cls(cover, pages, dataformat=dataformat)


def resolve_collection_format(collection: Pages) -> DataFormat:
    if collection.dataformat is not None:
        return collection.dataformat
    formats = {page.tab_title: page.dataformat.value for page in collection.all_pages}
    if len(set(formats.values())) > 1:
        raise MixedFormatError(formats)
    return collection.cover.dataformat


def assign_filenames(collection: Pages, outfile: Path) -> list[str]:
    """File name per page, cover first; the cover keeps ``outfile``'s name."""
    filenames = [outfile.name, *(page_filename(page) for page in collection.pages)]
    titles_by_file: dict[str, list[str]] = {}
    for page, filename in zip(collection.all_pages, filenames):
        titles_by_file.setdefault(filename, []).append(page.tab_title)
    for filename, titles in titles_by_file.items():
        if len(titles) > 1:
            raise DuplicateFilenameError(filename, titles)
    return filenames


def rewrite_page_links(html: str, filenames_by_title: Mapping[str, str]) -> str:
    """Point ``href="page:<Title>"`` links at the file the titled page is written to."""

    def replace(match: re.Match[str]) -> str:
        title = html_lib.unescape(match.group(1))
        filename = filenames_by_title.get(title)
        if filename is None:
            LOGGER.warning("Link to unknown page %r left unchanged", title)
            return match.group(0)
        return f'href="{html_lib.escape(filename)}"'

    return _PAGE_LINK.sub(replace, html)


def build_collection(
    collection: Pages,
    outfile: Path,
    options: OutputOptions | None = None,
    *,
    manifest_path: Path | None = None,
    manifest_entry: ManifestEntry | None = None,
    fill_missing: bool = False,
) -> ProjectLayout:
    """Render a cover page and its content pages into ``<outfile stem>/``.

    Every page uses one data format and one shared ``data/`` directory; a
    dataset read by several pages is written once. Format, file name and
    dataset errors are raised before any file is written.
    """
    options = options or OutputOptions()
    outfile = Path(outfile)
    fmt = resolve_collection_format(collection)
    filenames = assign_filenames(collection, outfile)
    filenames_by_title = {
        page.tab_title: filename for page, filename in zip(collection.all_pages, filenames)
    }

    registry = DatasetRegistry.merged(page.registry for page in collection.all_pages)
    page_dependencies = [page.dependencies() for page in collection.all_pages]
    for page, names in zip(collection.all_pages, page_dependencies):
        page.registry.resolve(names)
    needed = set().union(*page_dependencies)
    encoded = encode_datasets(registry.resolve(needed), fmt)

    generated_at = generated_timestamp(options)
    documents = [
        rewrite_page_links(
            assemble(page, encoded, dataformat=fmt, generated_at=generated_at),
            filenames_by_title,
        )
        for page in collection.all_pages
    ]

    writer = ProjectWriter(
        outfile,
        fmt,
        launcher_scripts=options.launcher_scripts,
        project_dir=True,
    )
    for names in page_dependencies:
        writer.write_datasets({name: encoded[name] for name in encoded if name in names})
    writer.write_support_files(filenames)
    for page, filename, document in zip(collection.all_pages, filenames, documents):
        writer.write_html(filename, document)
        write_chart_assets(writer, page)
    layout = writer.project_layout()
    LOGGER.info(
        "Rendered %d page(s) into %s (%s, %d dataset(s))",
        len(filenames),
        layout.project_dir,
        fmt.value,
        len(encoded),
    )

    record_in_manifest(manifest_path, manifest_entry, fill_missing=fill_missing)
    return layout
