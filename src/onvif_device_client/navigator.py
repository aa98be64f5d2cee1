"""Dot-path navigation and tolerant coercion over decoded response trees."""

from __future__ import annotations

import json
from typing import Any, List

from .errors import NotFoundError
from .tree import DynamicValue, is_list, is_mapping


def value_at(root: DynamicValue, path: str) -> DynamicValue:
    """Return the node found by walking ``path`` from ``root``.

    Each dot-separated segment is a key lookup in a mapping. Raises
    :class:`NotFoundError` the first time a segment is missing or the
    current node is not a mapping.
    """

    current: Any = root
    for segment in path.split("."):
        if not is_mapping(current) or segment not in current:
            raise NotFoundError(path, segment)
        current = current[segment]
    return current


def string_at(root: DynamicValue, path: str) -> str:
    """Return the string at ``path``, or ``""`` when absent or not a string.

    Callers that need to tell "absent" from "empty" should use :func:`value_at`.
    """

    try:
        return as_string(value_at(root, path))
    except NotFoundError:
        return ""


def list_at(root: DynamicValue, path: str) -> List[DynamicValue]:
    """Return the node at ``path`` as a list of sub-values.

    Lookup failures propagate as :class:`NotFoundError`. A single mapping is
    returned as a one-element list, since an element that occurs once is
    decoded as a mapping rather than a list. Null and scalar nodes yield an
    empty list.
    """

    value = value_at(root, path)
    if is_list(value):
        return list(value)  # type: ignore[arg-type]
    if is_mapping(value):
        return [value]
    return []


def as_string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def as_bool(value: Any) -> bool:
    """Interpret a protocol flag; only the text ``true`` (any case) is true."""

    return as_string(value).lower() == "true"


class ResponseTree:
    """Decoded reply with the navigation helpers bound to its root."""

    def __init__(self, root: DynamicValue) -> None:
        self.root = root

    def value_at(self, path: str) -> DynamicValue:
        return value_at(self.root, path)

    def string_at(self, path: str) -> str:
        return string_at(self.root, path)

    def list_at(self, path: str) -> List[DynamicValue]:
        return list_at(self.root, path)

    def json_indent(self, indent: int = 4) -> str:
        return json.dumps(self.root, indent=indent, ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"ResponseTree({self.root!r})"
