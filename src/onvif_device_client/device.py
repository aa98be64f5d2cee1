"""Device-management endpoints of an ONVIF device."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Union

from .capabilities import DeviceCapabilities, normalize_capabilities
from .logging import get_logger
from .models import DeviceInformation, HostnameInformation, interface_to_struct
from .navigator import ResponseTree, as_bool, as_string, list_at, string_at, value_at
from .soap import DEVICE_NAMESPACES, SoapClient
from .tree import DynamicValue, is_mapping

SendRequest = Callable[[str, Sequence[str]], Union[ResponseTree, DynamicValue]]

_BODY_PATH = "Envelope.Body"


class Device:
    """Client for the device-management service at ``xaddr``.

    ``send`` delivers a request body with its namespace declarations and
    returns the decoded reply; it defaults to a :class:`SoapClient`.
    """

    def __init__(
        self,
        xaddr: str,
        *,
        timeout: float = 5.0,
        send: Optional[SendRequest] = None,
    ) -> None:
        self.xaddr = xaddr
        self.logger = get_logger("onvif.device")
        self._soap: Optional[SoapClient] = None
        if send is None:
            self._soap = SoapClient(xaddr, timeout=timeout)
            send = self._soap.send
        self._send = send

    def _request(self, body: str) -> DynamicValue:
        reply = self._send(body, DEVICE_NAMESPACES)
        if isinstance(reply, ResponseTree):
            return reply.root
        return reply

    def get_device_information(self) -> DeviceInformation:
        """Fetch manufacturer, model and firmware details."""

        response = self._request("<tds:GetDeviceInformation/>")
        info = value_at(response, f"{_BODY_PATH}.GetDeviceInformationResponse")
        return interface_to_struct(info, DeviceInformation)

    def get_system_date_and_time(self) -> str:
        response = self._request("<tds:GetSystemDateAndTime/>")
        return string_at(response, f"{_BODY_PATH}.GetSystemDateAndTimeResponse.SystemDateAndTime")

    def get_capabilities(self) -> DeviceCapabilities:
        """Fetch and normalize the device capabilities."""

        response = self._request(
            "<tds:GetCapabilities><tds:Category>All</tds:Category></tds:GetCapabilities>"
        )
        capabilities = normalize_capabilities(response)
        self.logger.debug(
            "Capabilities normalized",
            extra={"xaddr": self.xaddr, "ptz": capabilities.ptz},
        )
        return capabilities

    def get_discovery_mode(self) -> str:
        response = self._request("<tds:GetDiscoveryMode/>")
        return string_at(response, f"{_BODY_PATH}.GetDiscoveryModeResponse.DiscoveryMode")

    def get_scopes(self) -> List[str]:
        """Fetch the scope URIs configured on the device."""

        response = self._request("<tds:GetScopes/>")
        scopes: List[str] = []
        for item in list_at(response, f"{_BODY_PATH}.GetScopesResponse.Scopes"):
            if is_mapping(item):
                scopes.append(as_string(item.get("ScopeItem")))
        return scopes

    def get_hostname(self) -> HostnameInformation:
        response = self._request("<tds:GetHostname/>")
        info = value_at(response, f"{_BODY_PATH}.GetHostnameResponse.HostnameInformation")
        if not is_mapping(info):
            return HostnameInformation()
        return HostnameInformation(
            name=as_string(info.get("Name")),
            from_dhcp=as_bool(info.get("FromDHCP")),
            extension=as_string(info.get("Extension")),
        )

    def get_dns(self) -> str:
        response = self._request("<tds:GetDNS/>")
        self._log_raw("GetDNS", response)
        return string_at(response, f"{_BODY_PATH}.GetDNSResponse.DNSInformation")

    def get_network_interfaces(self) -> List[DynamicValue]:
        response = self._request("<tds:GetNetworkInterfaces/>")
        self._log_raw("GetNetworkInterfaces", response)
        return list_at(
            response, f"{_BODY_PATH}.GetNetworkInterfacesResponse.NetworkInterfaces"
        )

    def _log_raw(self, operation: str, response: DynamicValue) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Raw %s reply:\n%s",
                operation,
                ResponseTree(response).json_indent(),
                extra={"xaddr": self.xaddr},
            )

    def close(self) -> None:
        if self._soap is not None:
            self._soap.close()

    def __enter__(self) -> "Device":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
