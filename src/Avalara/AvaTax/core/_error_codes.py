# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Error kinds and subcode constants shared by the decoder and the error types."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed taxonomy of service-side failures."""

    AUTHENTICATION = "Authentication"
    NOT_FOUND = "NotFound"
    VALIDATION = "Validation"
    RATE_LIMITED = "RateLimited"
    SERVER_ERROR = "ServerError"
    UNKNOWN = "Unknown"
    DECODE_ERROR = "DecodeError"


class TransportErrorKind(str, Enum):
    """Reasons a call ended without an HTTP response."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    PROTOCOL = "protocol"


# HTTP status -> error kind (5xx handled by range)
_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.AUTHENTICATION,
    404: ErrorKind.NOT_FOUND,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
}


def kind_for_status(status: int) -> ErrorKind:
    kind = _STATUS_KINDS.get(status)
    if kind is not None:
        return kind
    if 500 <= status <= 599:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


def http_subcode(status: int) -> str:
    return f"http_{status}"


# Transport subcodes
TRANSPORT_CONNECTION = "transport_connection"
TRANSPORT_TIMEOUT = "transport_timeout"
TRANSPORT_CANCELLED = "transport_cancelled"
TRANSPORT_PROTOCOL = "transport_protocol"

_TRANSPORT_SUBCODES = {
    TransportErrorKind.CONNECTION: TRANSPORT_CONNECTION,
    TransportErrorKind.TIMEOUT: TRANSPORT_TIMEOUT,
    TransportErrorKind.CANCELLED: TRANSPORT_CANCELLED,
    TransportErrorKind.PROTOCOL: TRANSPORT_PROTOCOL,
}


def transport_subcode(kind: TransportErrorKind) -> str:
    return _TRANSPORT_SUBCODES[kind]


# Parameter subcodes
PARAMETER_MISSING = "parameter_missing"
PARAMETER_EMPTY = "parameter_empty"
PARAMETER_RESERVED_SEGMENT = "parameter_reserved_segment"
PARAMETER_UNSUPPORTED_TYPE = "parameter_unsupported_type"
PARAMETER_UNENCODABLE = "parameter_unencodable"
PARAMETER_NEGATIVE = "parameter_negative"
PARAMETER_UNKNOWN_OPTION = "parameter_unknown_option"
PARAMETER_UNEXPECTED = "parameter_unexpected"
