"""Type selection and result formatting for the command-line output."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

from cliscore.models import MachineInfoRecord, Payload, SearchResponse
from cliscore.tree_builder import format_file_tree

TYPE_MENU: tuple[str, ...] = (
    "login",
    "password",
    "url",
    "email_domain",
    "username",
    "ip",
    "hash",
    "phone",
    "uuid",
)
DEFAULT_TYPES: tuple[str, ...] = ("login", "password", "url")
FILE_TREE_HEADING = "📁 File Structure:"

# login is a display name; the API knows it as email
_REQUEST_TYPE_ALIASES = {"login": "email"}
_PAGINATION_FIELDS = (
    ("total", "Total available"),
    ("pageSize", "Page size"),
    ("took", "Took (ms)"),
)


def parse_type_selection(raw: str) -> list[str]:
    """Parse menu input such as ``"1,3"`` or ``"all"`` into type names.

    Unknown indices are skipped and duplicates dropped. Falls back to
    DEFAULT_TYPES when nothing valid was selected.
    """
    raw = raw.strip().lower()
    if raw == "all":
        return list(TYPE_MENU)

    selected: list[str] = []
    for part in raw.split(","):
        part = part.strip()
        if not part.isdecimal():
            continue
        index = int(part)
        if 1 <= index <= len(TYPE_MENU):
            name = TYPE_MENU[index - 1]
            if name not in selected:
                selected.append(name)

    return selected or list(DEFAULT_TYPES)


def choose_types(
    detected: Iterable[str],
    confirm: Callable[[list[str]], bool],
    select: Callable[[], str],
) -> list[str]:
    """Use the detected types if *confirm* accepts them, else ask *select*.

    *confirm* receives the detected tags sorted; *select* returns raw menu
    input for :func:`parse_type_selection`.
    """
    tags = sorted(detected)
    if tags and confirm(tags):
        return tags
    return parse_type_selection(select())


def map_request_types(types: Iterable[str]) -> list[str]:
    return [_REQUEST_TYPE_ALIASES.get(t, t) for t in types]


def to_pretty_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def render_payload(payload: Payload) -> str:
    """Render a response payload as indented JSON.

    Machine info with a file listing gets the listing drawn as a tree
    below the JSON instead of inline.
    """
    if isinstance(payload, MachineInfoRecord) and payload.file_tree:
        return "\n".join([
            to_pretty_json(payload.fields),
            "",
            FILE_TREE_HEADING,
            format_file_tree(payload.file_tree),
        ])
    return to_pretty_json(payload.to_json())


def format_number(value: Any) -> str:
    """Format a count with thousands separators."""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        if value.is_integer():
            return f"{int(value):,}"
        return f"{value:.2f}"
    if isinstance(value, str):
        try:
            return format_number(float(value))
        except ValueError:
            return value
    return str(value)


def format_pagination_info(response: SearchResponse) -> str:
    lines = [f"Total results: {format_number(response.size)}"]
    pages = ", ".join(sorted(response.pages, key=_page_sort_key))
    lines.append(f"Pages retrieved: {pages}")
    for key, label in _PAGINATION_FIELDS:
        if key in response.extra:
            lines.append(f"{label}: {format_number(response.extra[key])}")
    return "\n".join(lines) + "\n"


def _page_sort_key(page: str) -> tuple[int, str]:
    return (int(page), page) if page.isdecimal() else (1 << 30, page)
