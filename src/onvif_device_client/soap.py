"""SOAP transport: envelope building, HTTP delivery and reply decoding."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional, Sequence, Union

import httpx

from .errors import NotFoundError, SoapFault, TransportError
from .logging import get_logger
from .navigator import ResponseTree, as_string, value_at
from .tree import DynamicValue

SOAP_ENV_NAMESPACE = "http://www.w3.org/2003/05/soap-envelope"
SOAP_CONTENT_TYPE = "application/soap+xml; charset=utf-8"

DEVICE_NAMESPACES = (
    'xmlns:tds="http://www.onvif.org/ver10/device/wsdl"',
    'xmlns:tt="http://www.onvif.org/ver10/schema"',
)

_FAULT_PATH = "Envelope.Body.Fault"


def build_envelope(body: str, namespaces: Sequence[str] = ()) -> str:
    """Wrap ``body`` in a SOAP 1.2 envelope declaring ``namespaces``."""

    declarations = " ".join([f'xmlns:s="{SOAP_ENV_NAMESPACE}"', *namespaces])
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<s:Envelope {declarations}>"
        f"<s:Body>{body}</s:Body>"
        "</s:Envelope>"
    )


def _local_name(tag: str) -> str:
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    if ":" in tag:
        tag = tag.rsplit(":", 1)[1]
    return tag


def _element_to_value(element: ET.Element) -> DynamicValue:
    text = (element.text or "").strip()
    children = list(element)
    if not children and not element.attrib:
        return text or None

    node: Dict[str, Any] = {}
    for name, attr in element.attrib.items():
        node[f"-{_local_name(name)}"] = attr
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_value(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]
    if text:
        node["#text"] = text
    return node


def decode_xml(payload: Union[str, bytes]) -> DynamicValue:
    """Decode an XML document into a nested tree keyed by local element names.

    Attributes are stored under ``-name`` keys and mixed text under
    ``#text``. Repeated sibling elements become a list in document order.
    """

    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise TransportError(f"Malformed XML reply: {exc}") from exc
    return {_local_name(root.tag): _element_to_value(root)}


def _raise_for_fault(tree: ResponseTree, status_code: Optional[int]) -> None:
    try:
        fault = value_at(tree.root, _FAULT_PATH)
    except NotFoundError:
        return
    code = _first_text(fault, "Code.Value") or _first_text(fault, "faultcode")
    reason = _first_text(fault, "Reason.Text") or _first_text(fault, "faultstring")
    raise SoapFault(code, reason, status_code=status_code)


def _first_text(node: DynamicValue, path: str) -> str:
    try:
        value = value_at(node, path)
    except NotFoundError:
        return ""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("#text")
    return as_string(value)


class SoapClient:
    """Deliver SOAP requests to a device service address."""

    def __init__(
        self,
        xaddr: str,
        *,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.xaddr = xaddr
        self.timeout = timeout
        self.logger = get_logger("onvif.soap")
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    def send(self, body: str, namespaces: Sequence[str] = ()) -> ResponseTree:
        """Send one request body and return the decoded reply."""

        envelope = build_envelope(body, namespaces)
        self.logger.debug("Sending SOAP request", extra={"xaddr": self.xaddr, "body": body})
        try:
            response = self._client.post(
                self.xaddr,
                content=envelope.encode("utf-8"),
                headers={"Content-Type": SOAP_CONTENT_TYPE},
            )
        except httpx.RequestError as exc:
            self.logger.warning(
                "SOAP request failed", extra={"xaddr": self.xaddr, "error": str(exc)}
            )
            raise TransportError(f"Request to {self.xaddr} failed: {exc}") from exc

        self.logger.debug(
            "Received SOAP reply",
            extra={"xaddr": self.xaddr, "status": response.status_code, "bytes": len(response.content)},
        )
        if not response.content:
            raise TransportError(f"Empty reply from {self.xaddr} ({response.status_code}).")
        try:
            tree = ResponseTree(decode_xml(response.content))
        except TransportError:
            if response.is_error:
                raise TransportError(
                    f"Request to {self.xaddr} failed ({response.status_code})."
                ) from None
            raise
        _raise_for_fault(tree, response.status_code)
        if response.is_error:
            raise TransportError(f"Request to {self.xaddr} failed ({response.status_code}).")
        return tree

    def __call__(self, body: str, namespaces: Sequence[str] = ()) -> ResponseTree:
        return self.send(body, namespaces)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "SoapClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
