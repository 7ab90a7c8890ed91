from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DATA_DIR_NAME = "data"
NOTES_DIR_NAME = "notes"


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    html: Path
    data: Path | None
    notes: Path


def build_project_paths(outfile: Path, *, external: bool) -> ProjectPaths:
    """Locate the files of a rendered page without touching the filesystem.

    Embedded pages are a single HTML file at ``outfile``. External pages get a
    project directory named after the file stem, holding the HTML, a ``data``
    directory and the launcher scripts.
    """
    outfile = Path(outfile)
    if not external:
        root = outfile.parent
        return ProjectPaths(root=root, html=outfile, data=None, notes=root / NOTES_DIR_NAME)
    root = outfile.parent / outfile.stem
    return ProjectPaths(
        root=root,
        html=root / outfile.name,
        data=root / DATA_DIR_NAME,
        notes=root / NOTES_DIR_NAME,
    )
