"""Untyped response tree produced by decoding a device reply."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Union

DynamicValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))
