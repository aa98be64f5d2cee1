from dataclasses import dataclass, field

import pytest

from onvif_device_client.errors import ShapeError
from onvif_device_client.models import DeviceInformation, interface_to_struct


@dataclass(frozen=True)
class _Flags:
    name: str = ""
    enabled: bool = field(default=False, metadata={"wire": "Enabled"})


def test_interface_to_struct_matches_wire_names() -> None:
    info = interface_to_struct(
        {"Manufacturer": "Acme", "Model": "X", "Ignored": {"nested": "value"}},
        DeviceInformation,
    )

    assert info.manufacturer == "Acme"
    assert info.model == "X"
    assert info.serial_number == ""


def test_interface_to_struct_coerces_text_booleans() -> None:
    assert interface_to_struct({"name": "a", "Enabled": "True"}, _Flags) == _Flags("a", True)
    assert interface_to_struct({"Enabled": "1"}, _Flags) == _Flags("", False)


def test_interface_to_struct_skips_null_values() -> None:
    assert interface_to_struct({"Manufacturer": None}, DeviceInformation) == DeviceInformation()


@pytest.mark.parametrize("value", [None, "text", ["a", "b"]])
def test_interface_to_struct_requires_mapping(value: object) -> None:
    with pytest.raises(ShapeError):
        interface_to_struct(value, DeviceInformation)


@pytest.mark.parametrize("raw", [{"nested": "x"}, ["a"], 5])
def test_interface_to_struct_rejects_mismatched_field(raw: object) -> None:
    with pytest.raises(ShapeError, match="Model"):
        interface_to_struct({"Model": raw}, DeviceInformation)


def test_interface_to_struct_rejects_non_dataclass() -> None:
    with pytest.raises(TypeError):
        interface_to_struct({}, dict)
