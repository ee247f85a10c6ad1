# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exceptions for the AvaTax SDK.

Parameter errors are raised synchronously before any network I/O. Service and
transport failures are normally returned as values
(:class:`~Avalara.AvaTax.core.results.ErrorResult`,
:class:`~Avalara.AvaTax.core.results.TransportError`); the exception types
here are what those values turn into when the caller asks for raising
behavior.
"""

from __future__ import annotations

import datetime as _dt
from typing import TYPE_CHECKING, Any, Dict, Optional

from ._error_codes import http_subcode, transport_subcode

if TYPE_CHECKING:
    from .results import ErrorResult, TransportError


class AvaTaxError(Exception):
    """Base structured error for the AvaTax SDK."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ParameterError(AvaTaxError, ValueError):
    """Caller misuse detected while building a request."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        parameter: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if parameter is not None:
            d["parameter"] = parameter
        super().__init__(message, code=code, subcode=subcode, details=d, source="client")
        self.parameter = parameter


class MissingParameterError(ParameterError):
    def __init__(self, message: str, *, parameter: Optional[str] = None, subcode: Optional[str] = None):
        super().__init__(message, code="missing_parameter", parameter=parameter, subcode=subcode)


class InvalidParameterError(ParameterError):
    def __init__(
        self,
        message: str,
        *,
        parameter: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="invalid_parameter", parameter=parameter, subcode=subcode, details=details)


class AvaTaxHttpError(AvaTaxError):
    """Raised form of an :class:`~Avalara.AvaTax.core.results.ErrorResult`."""

    def __init__(self, result: "ErrorResult") -> None:
        d: Dict[str, Any] = {"error_code": result.error_code.value}
        if result.service_code is not None:
            d["service_error_code"] = result.service_code
        if result.details:
            d["details"] = [detail.to_dict() for detail in result.details]
        if result.body_excerpt is not None:
            d["body_excerpt"] = result.body_excerpt
        if result.retry_after is not None:
            d["retry_after"] = result.retry_after
        super().__init__(
            result.message,
            code="http_error",
            subcode=http_subcode(result.http_status),
            status_code=result.http_status,
            details=d,
            source="server",
            is_transient=result.is_transient,
        )
        self.result = result


class AvaTaxTransportError(AvaTaxError):
    """Raised form of a :class:`~Avalara.AvaTax.core.results.TransportError`."""

    def __init__(self, error: "TransportError") -> None:
        super().__init__(
            error.message,
            code="transport_error",
            subcode=transport_subcode(error.kind),
            details={"attempts": error.attempts},
            source="client",
            is_transient=error.is_transient,
        )
        self.error = error


__all__ = [
    "AvaTaxError",
    "ParameterError",
    "MissingParameterError",
    "InvalidParameterError",
    "AvaTaxHttpError",
    "AvaTaxTransportError",
]
