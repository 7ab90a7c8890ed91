from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates"

# "</script" ends a script element and "<!--" can make a later "</script>" not
# end it. Both get one backslash after the "<", as does any run of backslashes
# already sitting there, so the substitution can be undone exactly.
_SCRIPT_MARKUP = re.compile(r"<(\\*)(/script|!--)", re.IGNORECASE)
_ESCAPED_SCRIPT_MARKUP = re.compile(r"<(\\*)\\(/script|!--)", re.IGNORECASE)


def template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_PATH)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml", "html.j2")),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def read_template_source(name: str) -> str:
    return (TEMPLATES_PATH / name).read_text(encoding="utf-8")


def js_literal(value: Any) -> str:
    """JSON-encode a value for inline use inside a <script> element.

    Every ``<`` is written as ``\\u003c``, so no string value can open or
    close markup in the surrounding HTML.
    """
    return json.dumps(value, ensure_ascii=False).replace("<", "\\u003c")


def escape_script_text(text: str) -> str:
    """Neutralise ``</script`` and ``<!--`` in text placed inside a <script> element.

    The client runtime applies ``unescape_script_text``'s substitution before
    parsing embedded data.
    """
    return _SCRIPT_MARKUP.sub(r"<\1\\\2", text)


def unescape_script_text(text: str) -> str:
    return _ESCAPED_SCRIPT_MARKUP.sub(r"<\1\2", text)
