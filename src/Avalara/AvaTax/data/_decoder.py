# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Response decoding and error mapping.

:func:`decode_response` turns a :class:`~Avalara.AvaTax.core.results.RawResponse`
into the value the endpoint promises (a model, a
:class:`~Avalara.AvaTax.core.results.FetchResult`, or ``None``).
:func:`map_error` turns a non-success response into exactly one
:class:`~Avalara.AvaTax.core.results.ErrorResult`. Both are total: malformed
input yields an error value, never an exception.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Union

from ..common.constants import (
    ENVELOPE_NEXT_LINK,
    ENVELOPE_NEXT_LINK_ALT,
    ENVELOPE_RECORD_COUNT,
    ENVELOPE_VALUE,
    HEADER_RETRY_AFTER,
    MAX_BODY_EXCERPT,
)
from ..core._error_codes import ErrorKind, kind_for_status
from ..core.results import DecodeError, ErrorDetail, ErrorResult, FetchResult, RawResponse
from ._query import QueryOptions

_NOT_JSON = object()


class ResultShape(str, Enum):
    """What a successful response body is expected to contain."""

    MODEL = "model"
    FETCH_RESULT = "fetch_result"
    NO_CONTENT = "no_content"


def _text(body: Union[bytes, str, None]) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def _excerpt(body: Union[bytes, str, None]) -> Optional[str]:
    text = _text(body)
    if not text:
        return None
    return text[:MAX_BODY_EXCERPT]


def _parse_json(body: Union[bytes, str, None]) -> Any:
    text = _text(body).strip()
    if not text:
        return _NOT_JSON
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _NOT_JSON


def _parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    if not headers:
        return None
    raw = headers.get(HEADER_RETRY_AFTER)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _details(items: Any) -> List[ErrorDetail]:
    out: List[ErrorDetail] = []
    if not isinstance(items, list):
        return out
    for item in items:
        if not isinstance(item, dict):
            continue
        number = item.get("number")
        out.append(
            ErrorDetail(
                code=item.get("code"),
                message=item.get("message"),
                description=item.get("description"),
                refers_to=item.get("refersTo") or item.get("target"),
                severity=item.get("severity"),
                number=number if isinstance(number, int) and not isinstance(number, bool) else None,
            )
        )
    return out


def map_error(
    status: int,
    body: Union[bytes, str, Mapping[str, Any], None],
    headers: Optional[Mapping[str, str]] = None,
) -> ErrorResult:
    """
    Convert a non-success response into an :class:`ErrorResult`.

    The error kind comes from the HTTP status alone:

    ============  ==================
    Status        Kind
    ============  ==================
    401, 403      ``Authentication``
    404           ``NotFound``
    400, 422      ``Validation``
    429           ``RateLimited``
    5xx           ``ServerError``
    other         ``Unknown``
    ============  ==================

    Message, service code and field-level details are read from the
    ``{"error": {"code", "message", "details": [...]}}`` envelope when the body
    parses; otherwise a generic message is used and the raw body is kept as an
    excerpt.

    :param status: HTTP status code.
    :param body: Raw body (bytes or str) or an already-parsed JSON object.
    :param headers: Response headers, used for ``Retry-After``.
    :rtype: :class:`ErrorResult`
    """
    kind = kind_for_status(status)
    parsed = body if isinstance(body, Mapping) else _parse_json(body)
    excerpt = None if isinstance(body, Mapping) else _excerpt(body)

    service_code: Optional[str] = None
    message: Optional[str] = None
    details: List[ErrorDetail] = []
    if isinstance(parsed, Mapping):
        envelope = parsed.get("error") if isinstance(parsed.get("error"), Mapping) else parsed
        code = envelope.get("code")
        service_code = str(code) if code is not None else None
        msg = envelope.get("message")
        message = msg if isinstance(msg, str) and msg else None
        details = _details(envelope.get("details"))

    if message is None:
        message = f"HTTP {status} ({kind.value})"

    return ErrorResult(
        http_status=status,
        error_code=kind,
        message=message,
        details=tuple(details),
        service_code=service_code,
        body_excerpt=excerpt,
        retry_after=_parse_retry_after(headers) if kind is ErrorKind.RATE_LIMITED else None,
    )


def _decode_error(raw: RawResponse, reason: str) -> DecodeError:
    return DecodeError(
        http_status=raw.status_code,
        error_code=ErrorKind.DECODE_ERROR,
        message=f"Could not decode HTTP {raw.status_code} response: {reason}",
        body_excerpt=_excerpt(raw.body),
        reason=reason,
    )


def _apply_model(value: Any, model: Optional[Callable[[Any], Any]]) -> Any:
    if model is None:
        return value
    if isinstance(value, list):
        return [model(v) if isinstance(v, dict) else v for v in value]
    if isinstance(value, dict):
        return model(value)
    return value


def decode_fetch_result(
    raw: RawResponse,
    payload: Any,
    model: Optional[Callable[[Any], Any]] = None,
    options: Optional[QueryOptions] = None,
) -> Union[FetchResult, DecodeError]:
    if not isinstance(payload, dict):
        return _decode_error(raw, "expected a JSON object list envelope")
    items = payload.get(ENVELOPE_VALUE)
    if not isinstance(items, list):
        return _decode_error(raw, f"list envelope is missing a '{ENVELOPE_VALUE}' array")

    record_count = payload.get(ENVELOPE_RECORD_COUNT, len(items))
    if isinstance(record_count, bool) or not isinstance(record_count, int):
        return _decode_error(raw, f"'{ENVELOPE_RECORD_COUNT}' is not an integer")
    if record_count < len(items):
        return _decode_error(raw, f"'{ENVELOPE_RECORD_COUNT}' ({record_count}) is less than the {len(items)} items returned")
    if options is not None and options.top and len(items) > options.top:
        return _decode_error(raw, f"{len(items)} items returned for top={options.top}")

    next_link = payload.get(ENVELOPE_NEXT_LINK) or payload.get(ENVELOPE_NEXT_LINK_ALT)
    if next_link is not None and not isinstance(next_link, str):
        return _decode_error(raw, "next link is not a string")

    try:
        decoded = tuple(_apply_model(items, model))
    except (TypeError, ValueError, KeyError) as exc:
        return _decode_error(raw, f"item does not match model: {exc}")
    return FetchResult(items=decoded, record_count=record_count, next_link=next_link)


def decode_response(
    raw: RawResponse,
    shape: ResultShape = ResultShape.MODEL,
    model: Optional[Callable[[Any], Any]] = None,
    options: Optional[QueryOptions] = None,
) -> Any:
    """
    Decode a response against the expected result shape.

    - Non-2xx: delegated to :func:`map_error`.
    - ``NO_CONTENT``: returns ``None``; any body is ignored.
    - ``MODEL``: returns the parsed JSON; objects (or each object of an array)
      are passed through ``model`` when given.
    - ``FETCH_RESULT``: returns a :class:`FetchResult` after checking
      ``record_count >= len(items)`` and, when ``options.top`` is non-zero,
      ``len(items) <= top``.

    Malformed or mismatching success bodies yield a :class:`DecodeError`.

    :param raw: Response from the dispatcher.
    :param shape: Expected shape of a successful body.
    :param model: Optional callable converting each JSON object to a typed value.
        ``TypeError``, ``ValueError`` and ``KeyError`` from it become a :class:`DecodeError`.
    :param options: Query options the call was made with (list envelopes only).
    :return: The decoded value, or an :class:`ErrorResult`.
    """
    if not raw.ok:
        return map_error(raw.status_code, raw.body, raw.headers)

    shape = ResultShape(shape)
    if shape is ResultShape.NO_CONTENT:
        return None

    payload = _parse_json(raw.body)
    if payload is _NOT_JSON:
        return _decode_error(raw, "body is empty or not valid JSON")

    if shape is ResultShape.FETCH_RESULT:
        return decode_fetch_result(raw, payload, model, options)

    try:
        return _apply_model(payload, model)
    except (TypeError, ValueError, KeyError) as exc:
        return _decode_error(raw, f"body does not match model: {exc}")
