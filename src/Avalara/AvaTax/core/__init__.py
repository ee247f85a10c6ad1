# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the AvaTax SDK.

This module contains the foundational components including authentication,
configuration, the HTTP transport, result values and error handling.
"""

from .results import (
    RawResponse,
    FetchResult,
    ErrorDetail,
    ErrorResult,
    DecodeError,
    TransportError,
    is_error,
)
from ._error_codes import ErrorKind, TransportErrorKind

__all__ = [
    "RawResponse",
    "FetchResult",
    "ErrorDetail",
    "ErrorResult",
    "DecodeError",
    "TransportError",
    "ErrorKind",
    "TransportErrorKind",
    "is_error",
]
