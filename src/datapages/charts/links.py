from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from datapages.charts.base import Chart, ChartFragments, RenderContext, render_appearance
from datapages.errors import ChartConfigError


@dataclass(frozen=True, slots=True)
class LinkListEntry:
    title: str
    href: str
    blurb: str = ""


class LinkList(Chart):
    """A list of links, optionally split into headed groups.

    ``href`` values of the form ``page:<Title>`` are resolved to file names
    when the list is part of a page collection.
    """

    kind = "link_list"

    def __init__(
        self,
        links: Sequence[LinkListEntry] | Mapping[str, Sequence[LinkListEntry]],
        chart_id: str | None = None,
        title: str = "",
    ) -> None:
        if isinstance(links, Mapping):
            groups = [(str(heading), list(entries)) for heading, entries in links.items()]
        else:
            groups = [("", list(links))]
        for _, entries in groups:
            for entry in entries:
                if not isinstance(entry, LinkListEntry):
                    raise ChartConfigError(f"LinkList: expected LinkListEntry, got {type(entry).__name__}")
        self.groups = groups
        self.title = title
        super().__init__(chart_id)

    @property
    def entries(self) -> list[LinkListEntry]:
        return [entry for _, group in self.groups for entry in group]

    def render(self, context: RenderContext) -> ChartFragments:
        appearance = render_appearance(
            "link_list.html.j2",
            chart_id=context.chart_id,
            title=self.title,
            groups=self.groups,
        )
        return ChartFragments(appearance=appearance, functional="")
