"""Capability normalization for GetCapabilities replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, MutableMapping

from .errors import NotFoundError
from .navigator import as_bool, value_at
from .tree import DynamicValue

CAPABILITIES_PATH = "Envelope.Body.GetCapabilitiesResponse.Capabilities"

_ADDRESS_KEY = "xaddr"


@dataclass(frozen=True)
class NetworkCapabilities:
    """Network feature flags reported under ``Device.Network``."""

    dyn_dns: bool = False
    ip_filter: bool = False
    ip_version6: bool = False
    zero_config: bool = False
    extension: Dict[str, bool] = field(default_factory=dict)

    def as_mapping(self) -> MutableMapping[str, Any]:
        return {
            "DynDNS": self.dyn_dns,
            "IPFilter": self.ip_filter,
            "IPVersion6": self.ip_version6,
            "ZeroConfig": self.zero_config,
            "Extension": dict(self.extension),
        }


@dataclass(frozen=True)
class DeviceCapabilities:
    """Normalized capability description of a device.

    A default-constructed instance is the zero value: every flag false and
    every mapping empty.
    """

    network: NetworkCapabilities = field(default_factory=NetworkCapabilities)
    events: Dict[str, bool] = field(default_factory=dict)
    streaming: Dict[str, bool] = field(default_factory=dict)
    ptz: bool = False

    def as_mapping(self) -> MutableMapping[str, Any]:
        return {
            "Network": self.network.as_mapping(),
            "Events": dict(self.events),
            "Streaming": dict(self.streaming),
            "PTZ": self.ptz,
        }


def _is_address_key(key: str) -> bool:
    return key.lower() == _ADDRESS_KEY


def _is_decoder_key(key: str) -> bool:
    # Attributes ("-name") and mixed text ("#text") are not capability flags.
    return key.startswith(("-", "#"))


def _normalize_network(value: DynamicValue) -> NetworkCapabilities:
    if not isinstance(value, Mapping):
        return NetworkCapabilities()
    extension: Dict[str, bool] = {}
    raw_extension = value.get("Extension")
    if isinstance(raw_extension, Mapping):
        for key, flag in raw_extension.items():
            if _is_decoder_key(key):
                continue
            extension[key] = as_bool(flag)
    return NetworkCapabilities(
        dyn_dns=as_bool(value.get("DynDNS")),
        ip_filter=as_bool(value.get("IPFilter")),
        ip_version6=as_bool(value.get("IPVersion6")),
        zero_config=as_bool(value.get("ZeroConfiguration")),
        extension=extension,
    )


def _normalize_events(value: DynamicValue) -> Dict[str, bool]:
    # Keys are renamed one at a time; colliding renames keep the last value seen.
    events: Dict[str, bool] = {}
    if not isinstance(value, Mapping):
        return events
    for key, flag in value.items():
        if _is_address_key(key) or _is_decoder_key(key):
            continue
        events[key.replace("WS", "", 1)] = as_bool(flag)
    return events


def _normalize_streaming(value: DynamicValue) -> Dict[str, bool]:
    streaming: Dict[str, bool] = {}
    if not isinstance(value, Mapping):
        return streaming
    for key, flag in value.items():
        if _is_address_key(key) or _is_decoder_key(key):
            continue
        streaming[key.replace("_", " ")] = as_bool(flag)
    return streaming


def _has_branch(response: DynamicValue, path: str) -> bool:
    try:
        value_at(response, path)
    except NotFoundError:
        return False
    return True


def normalize_capabilities(response: DynamicValue) -> DeviceCapabilities:
    """Build :class:`DeviceCapabilities` from a decoded GetCapabilities reply.

    The ``Device.Network``, ``Events`` and ``Media.StreamingCapabilities``
    branches are mandatory: the first one missing raises
    :class:`NotFoundError` and nothing is returned. ``PTZ`` support is
    signalled by the presence of its branch, whatever it contains.
    """

    network = _normalize_network(value_at(response, f"{CAPABILITIES_PATH}.Device.Network"))
    events = _normalize_events(value_at(response, f"{CAPABILITIES_PATH}.Events"))
    streaming = _normalize_streaming(
        value_at(response, f"{CAPABILITIES_PATH}.Media.StreamingCapabilities")
    )
    ptz = _has_branch(response, f"{CAPABILITIES_PATH}.PTZ")
    return DeviceCapabilities(network=network, events=events, streaming=streaming, ptz=ptz)
