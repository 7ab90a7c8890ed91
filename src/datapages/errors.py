from __future__ import annotations

from collections.abc import Iterable


class DataPagesError(Exception):
    """Base class for errors raised before any page is rendered or written."""


class DuplicateNameError(DataPagesError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Dataset {name!r} is already registered with different content; "
            "register it under a different name."
        )
        self.name = name


class UnknownDatasetError(DataPagesError, KeyError):
    def __init__(self, names: Iterable[str], known: Iterable[str] = ()) -> None:
        self.names = tuple(sorted(names))
        self.known = tuple(sorted(known))
        super().__init__(self.names)

    def __str__(self) -> str:
        missing = ", ".join(repr(name) for name in self.names)
        known = ", ".join(repr(name) for name in self.known) or "none"
        return f"Unknown dataset(s): {missing}. Registered datasets: {known}."


class UnsupportedFormatError(DataPagesError, ValueError):
    def __init__(self, value: object, allowed: Iterable[str]) -> None:
        super().__init__(
            f"Unsupported data format {value!r}; expected one of: {', '.join(allowed)}"
        )
        self.value = value


class DuplicateFilenameError(DataPagesError, ValueError):
    def __init__(self, filename: str, titles: Iterable[str]) -> None:
        quoted = ", ".join(repr(title) for title in titles)
        super().__init__(f"Pages {quoted} all map to the same file name {filename!r}.")
        self.filename = filename


class MixedFormatError(DataPagesError, ValueError):
    def __init__(self, formats: dict[str, str]) -> None:
        listing = ", ".join(f"{title!r}={fmt}" for title, fmt in formats.items())
        super().__init__(
            "Pages in a collection must share one data format "
            f"(or pass a collection-wide dataformat override): {listing}"
        )
        self.formats = dict(formats)


class ChartConfigError(ValueError):
    """Raised while constructing a chart whose configuration does not fit its table."""
