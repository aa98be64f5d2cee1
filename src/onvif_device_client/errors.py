"""Exception hierarchy shared by the client modules."""

from __future__ import annotations

from typing import Optional


class OnvifError(Exception):
    """Base class for errors raised by the client."""


class NotFoundError(OnvifError, LookupError):
    """Raised when a path segment is absent or cannot be navigated into."""

    def __init__(self, path: str, segment: str) -> None:
        super().__init__(f"Path '{path}' not found (missing segment '{segment}').")
        self.path = path
        self.segment = segment


class ShapeError(OnvifError, TypeError):
    """Raised when a subtree cannot be reinterpreted as the requested type."""


class TransportError(OnvifError):
    """Raised when a request could not be delivered or its reply decoded."""


class SoapFault(TransportError):
    """The device answered with a SOAP fault."""

    def __init__(self, code: str, reason: str, status_code: Optional[int] = None) -> None:
        detail = reason or "no reason given"
        super().__init__(f"SOAP fault {code or 'unknown'}: {detail}")
        self.code = code
        self.reason = reason
        self.status_code = status_code
