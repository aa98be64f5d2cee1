"""Typed results of the thin device-management endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, Mapping, Type, TypeVar

from .errors import ShapeError
from .navigator import as_bool
from .tree import DynamicValue, is_scalar

T = TypeVar("T")


def _wire(name: str) -> Any:
    return field(default="", metadata={"wire": name})


@dataclass(frozen=True)
class DeviceInformation:
    """Identity reported by GetDeviceInformation."""

    manufacturer: str = _wire("Manufacturer")
    model: str = _wire("Model")
    firmware_version: str = _wire("FirmwareVersion")
    serial_number: str = _wire("SerialNumber")
    hardware_id: str = _wire("HardwareId")


@dataclass(frozen=True)
class HostnameInformation:
    """Hostname reported by GetHostname."""

    name: str = ""
    from_dhcp: bool = False
    extension: str = ""


def interface_to_struct(value: DynamicValue, cls: Type[T]) -> T:
    """Reinterpret a decoded subtree as the dataclass ``cls``.

    Fields are matched by wire name (``metadata["wire"]``, falling back to the
    field name). Missing keys keep their defaults. Raises :class:`ShapeError`
    when ``value`` is not a mapping or a field's value has the wrong shape.
    """

    if not is_dataclass(cls):
        raise TypeError(f"{cls!r} is not a dataclass")
    if not isinstance(value, Mapping):
        raise ShapeError(f"Cannot populate {cls.__name__} from {type(value).__name__}.")

    kwargs: Dict[str, Any] = {}
    for item in fields(cls):
        wire_name = item.metadata.get("wire", item.name)
        if wire_name not in value:
            continue
        raw = value[wire_name]
        if not is_scalar(raw):
            raise ShapeError(
                f"Field '{wire_name}' of {cls.__name__} expects a scalar, got {type(raw).__name__}."
            )
        if raw is None:
            continue
        if item.type in (bool, "bool"):
            kwargs[item.name] = as_bool(raw)
        elif item.type in (str, "str"):
            if not isinstance(raw, str):
                raise ShapeError(
                    f"Field '{wire_name}' of {cls.__name__} expects a string, got {type(raw).__name__}."
                )
            kwargs[item.name] = raw
        else:
            kwargs[item.name] = raw
    return cls(**kwargs)
