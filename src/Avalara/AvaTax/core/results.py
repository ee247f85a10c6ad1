# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types produced by the AvaTax dispatch core.

**Success values:**

- :class:`RawResponse`: One HTTP exchange as returned by the dispatcher.
- :class:`FetchResult`: The paginated list envelope returned by list/query endpoints.

**Error values** (returned, not raised):

- :class:`ErrorResult`: A non-success service response, classified by :class:`ErrorKind`.
- :class:`DecodeError`: A success-status response whose body did not match the expected shape.
- :class:`TransportError`: A call that ended without a usable HTTP response.

Error values are plain immutable data. Call ``raise_error()`` on one to turn it
into the matching :class:`~Avalara.AvaTax.core.errors.AvaTaxError` subclass.

Example::

    result = client.tax_rules.get_tax_rule(123, 456)
    if is_error(result):
        print(result.error_code, result.message)
    else:
        print(result["taxCode"])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterator, Mapping, NoReturn, Optional, Tuple, TypeVar, TYPE_CHECKING

from ._error_codes import ErrorKind, TransportErrorKind
from .errors import AvaTaxHttpError, AvaTaxTransportError

if TYPE_CHECKING:
    import pandas as pd

T = TypeVar("T")


@dataclass(frozen=True)
class RawResponse:
    """
    A single HTTP response as seen by the dispatcher.

    :param status_code: HTTP status code.
    :type status_code: :class:`int`
    :param headers: Response headers (case-insensitive mapping from the transport).
    :type headers: :class:`~typing.Mapping`
    :param body: Raw response body.
    :type body: :class:`bytes`
    :param url: Final request URL.
    :type url: :class:`str`
    :param attempts: Number of attempts the dispatcher made to obtain this response.
    :type attempts: :class:`int`
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """
    Paginated list envelope.

    :param items: Items in this page, in server order.
    :type items: :class:`tuple`
    :param record_count: Total matching rows on the server. May exceed ``len(items)``
        when ``top`` truncates the page.
    :type record_count: :class:`int`
    :param next_link: Opaque continuation link supplied by the service, if any.
    :type next_link: :class:`str` | None

    Iteration, ``len()`` and indexing operate on ``items``::

        page = client.tax_rules.list_tax_rules(123, top=50)
        for rule in page:
            print(rule["id"])
        print(f"{len(page)} of {page.record_count}")
    """

    items: Tuple[T, ...] = ()
    record_count: int = 0
    next_link: Optional[str] = None

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> T:
        return self.items[index]

    def to_dataframe(self) -> "pd.DataFrame":
        """
        Flatten the page into a :class:`pandas.DataFrame`.

        Requires the ``pandas`` extra.
        """
        from ..utils._pandas import fetch_result_to_dataframe

        return fetch_result_to_dataframe(self)


@dataclass(frozen=True)
class ErrorDetail:
    """Field-level sub-error from the service's ``error.details`` array."""

    code: Optional[str] = None
    message: Optional[str] = None
    description: Optional[str] = None
    refers_to: Optional[str] = None
    severity: Optional[str] = None
    number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "description": self.description,
            "refers_to": self.refers_to,
            "severity": self.severity,
            "number": self.number,
        }


@dataclass(frozen=True)
class ErrorResult:
    """
    A non-success outcome reported by the service.

    Built only by :func:`~Avalara.AvaTax.data._decoder.map_error` and
    :func:`~Avalara.AvaTax.data._decoder.decode_response`.

    :param http_status: HTTP status of the response.
    :type http_status: :class:`int`
    :param error_code: Classified kind of error.
    :type error_code: :class:`ErrorKind`
    :param message: Human-readable message, from the service when available.
    :type message: :class:`str`
    :param details: Field-level sub-errors (populated for validation failures).
    :type details: :class:`tuple` of :class:`ErrorDetail`
    :param service_code: The service's own error code, e.g. ``"EntityNotFound"``.
    :type service_code: :class:`str` | None
    :param body_excerpt: Truncated raw body for diagnostics.
    :type body_excerpt: :class:`str` | None
    :param retry_after: Server-requested delay in seconds (rate limiting).
    :type retry_after: :class:`int` | None
    """

    http_status: int
    error_code: ErrorKind
    message: str
    details: Tuple[ErrorDetail, ...] = ()
    service_code: Optional[str] = None
    body_excerpt: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_transient(self) -> bool:
        return self.error_code is ErrorKind.RATE_LIMITED or self.http_status == 503

    def raise_error(self) -> NoReturn:
        raise AvaTaxHttpError(self)


@dataclass(frozen=True)
class DecodeError(ErrorResult):
    """A success-status response whose body could not be decoded as expected."""

    reason: Optional[str] = None


@dataclass(frozen=True)
class TransportError:
    """
    A call that ended without a usable HTTP response.

    :param kind: Why the exchange failed.
    :type kind: :class:`TransportErrorKind`
    :param message: Description of the last failure.
    :type message: :class:`str`
    :param attempts: Attempts made before giving up (0 when cancelled up front).
    :type attempts: :class:`int`
    :param cause: Underlying transport exception, if any.
    :type cause: :class:`BaseException` | None
    """

    kind: TransportErrorKind
    message: str
    attempts: int = 0
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def is_transient(self) -> bool:
        return self.kind in (TransportErrorKind.CONNECTION, TransportErrorKind.TIMEOUT)

    def raise_error(self) -> NoReturn:
        raise AvaTaxTransportError(self) from self.cause


def is_error(value: Any) -> bool:
    """Return True if ``value`` is an :class:`ErrorResult` or :class:`TransportError`."""
    return isinstance(value, (ErrorResult, TransportError))


__all__ = [
    "ErrorKind",
    "TransportErrorKind",
    "RawResponse",
    "FetchResult",
    "ErrorDetail",
    "ErrorResult",
    "DecodeError",
    "TransportError",
    "is_error",
]
