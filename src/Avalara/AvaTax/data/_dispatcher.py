# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request dispatch with retry, backoff, deadline and cancellation handling.

:class:`Dispatcher` executes one logical call described by a
:class:`~Avalara.AvaTax.data._request.Request`: it builds the URL, attaches the
auth and standard headers, sends the request through the transport
collaborator and retries transient failures according to a
:class:`RetryPolicy`. It returns either the final
:class:`~Avalara.AvaTax.core.results.RawResponse` or a
:class:`~Avalara.AvaTax.core.results.TransportError`; it never raises for
network conditions.
"""

from __future__ import annotations

import json
import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Optional, Union

import requests

from .. import __version__
from ..common.constants import HEADER_AUTHORIZATION, HEADER_CLIENT_ID, HEADER_RETRY_AFTER
from ..core._auth import CredentialProvider
from ..core._error_codes import PARAMETER_UNSUPPORTED_TYPE, TransportErrorKind
from ..core._http import _HttpClient
from ..core.config import AvaTaxConfig
from ..core.errors import InvalidParameterError
from ..core.results import RawResponse, TransportError
from ..core.telemetry import NoOpTelemetryManager
from ._request import Request

_LOGGER = logging.getLogger(__name__)

DispatchOutcome = Union[RawResponse, TransportError]


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and in-flight calls.

    The dispatcher checks the token before every attempt and wakes up from
    backoff waits as soon as it is cancelled. An attempt already on the wire
    runs to completion (bounded by its timeout).
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry and timeout settings for one dispatcher.

    :param max_attempts: Maximum attempts per call, first attempt included.
    :param backoff: Base delay in seconds; attempt ``n`` waits ``backoff * 2**n``.
    :param max_backoff: Cap on any single delay, ``Retry-After`` included.
    :param jitter: Add +/-25% random variation to computed delays.
    :param retry_transient_errors: Retry HTTP statuses in ``transient_status_codes``.
    :param timeout: Per-attempt timeout in seconds.
    :param total_timeout: Upper bound in seconds on a whole call.
    :param min_attempt_timeout: Shortest window worth starting a retry in; a retry
        whose clamped timeout would fall below it is not attempted.
    """

    max_attempts: int = 5
    backoff: float = 0.5
    max_backoff: float = 60.0
    jitter: bool = True
    retry_transient_errors: bool = True
    timeout: float = 30.0
    total_timeout: float = 120.0
    min_attempt_timeout: float = 1.0
    transient_status_codes: FrozenSet[int] = frozenset({429, 503})

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            object.__setattr__(self, "max_attempts", 1)

    @classmethod
    def from_config(cls, config: AvaTaxConfig) -> "RetryPolicy":
        defaults = cls()
        return cls(
            max_attempts=config.http_retries if config.http_retries is not None else defaults.max_attempts,
            backoff=config.http_backoff if config.http_backoff is not None else defaults.backoff,
            max_backoff=config.http_max_backoff if config.http_max_backoff is not None else defaults.max_backoff,
            jitter=config.http_jitter if config.http_jitter is not None else defaults.jitter,
            retry_transient_errors=(
                config.http_retry_transient_errors
                if config.http_retry_transient_errors is not None
                else defaults.retry_transient_errors
            ),
            timeout=config.http_timeout if config.http_timeout is not None else defaults.timeout,
            total_timeout=(
                config.http_total_timeout if config.http_total_timeout is not None else defaults.total_timeout
            ),
        )

    def delay(self, attempt: int, retry_after: Optional[str] = None) -> float:
        """
        Delay in seconds before retrying after the zero-based ``attempt``.

        The delay calculation follows this priority order:

        1. **Retry-After header**: an integer number of seconds, capped at ``max_backoff``.
        2. **Exponential backoff**: ``backoff * 2**attempt``, capped at ``max_backoff``.
        3. **Jitter**: if enabled, +/-25% of the computed delay, never below zero.

        Non-integer ``Retry-After`` values (HTTP dates included) fall back to backoff.
        """
        if retry_after is not None:
            try:
                return min(int(retry_after), self.max_backoff)
            except (ValueError, TypeError):
                pass

        delay = min(self.backoff * (2**attempt), self.max_backoff)
        if self.jitter:
            jitter_range = delay * 0.25
            delay = max(0, delay + random.uniform(-jitter_range, jitter_range))
        return delay


class Dispatcher:
    """
    Executes request descriptors against the AvaTax service.

    Holds no per-call state: concurrent calls from several threads only share
    the read of the credential snapshot.

    :param base_url: Service root, e.g. ``https://sandbox-rest.avatax.com``.
    :type base_url: :class:`str`
    :param credentials: Source of the ``Authorization`` header.
    :type credentials: ~Avalara.AvaTax.core._auth.CredentialProvider
    :param http: Transport collaborator performing single HTTP exchanges.
    :type http: ~Avalara.AvaTax.core._http._HttpClient
    :param policy: Retry and timeout settings.
    :type policy: RetryPolicy or None
    :param client_id: Value of the ``X-Avalara-Client`` identification header.
    :type client_id: :class:`str`
    :param telemetry: Telemetry manager; defaults to a no-op manager.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        http: _HttpClient,
        policy: Optional[RetryPolicy] = None,
        *,
        client_id: str = "",
        telemetry=None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        self._credentials = credentials
        self._http = http
        self.policy = policy or RetryPolicy()
        self._client_id = client_id
        self._telemetry = telemetry or NoOpTelemetryManager()

    def _headers(self) -> Dict[str, str]:
        """Build standard headers with the current auth snapshot."""
        headers = {
            HEADER_AUTHORIZATION: self._credentials.current_auth_header(),
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"avatax-python/{__version__}",
        }
        if self._client_id:
            headers[HEADER_CLIENT_ID] = self._client_id
        headers.update(self._telemetry.get_additional_headers())
        return headers

    @staticmethod
    def _serialize(body) -> Optional[bytes]:
        if body is None:
            return None
        try:
            return json.dumps(body).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise InvalidParameterError(
                f"Request body is not JSON serializable: {exc}", parameter="body", subcode=PARAMETER_UNSUPPORTED_TYPE
            ) from exc

    def execute(
        self,
        request: Request,
        *,
        cancel: Optional[CancellationToken] = None,
        deadline: Optional[float] = None,
    ) -> DispatchOutcome:
        """
        Perform one logical call, retrying transient failures.

        Retries happen only on connection failures, timeouts and (when enabled)
        the policy's transient statuses (429 and 503). Any other response is
        returned after one attempt. If retries are exhausted on a transient
        status, the last response is returned.

        :param request: The call to perform.
        :type request: ~Avalara.AvaTax.data._request.Request
        :param cancel: Optional token checked before each attempt and during backoff.
        :type cancel: CancellationToken or None
        :param deadline: Seconds allowed for the whole call; overrides ``policy.total_timeout``.
        :type deadline: :class:`float` or None
        :return: The final response, or a transport error.
        :rtype: ~Avalara.AvaTax.core.results.RawResponse | ~Avalara.AvaTax.core.results.TransportError
        :raises MissingParameterError: If a route parameter is missing (before any I/O).
        :raises InvalidParameterError: If a parameter or the body is invalid (before any I/O).
        """
        url = self.base_url + request.target()
        data = self._serialize(request.body)
        # Captured once: retries of this call keep the header even if credentials rotate
        headers = self._headers()
        total = self.policy.total_timeout if deadline is None else deadline

        with self._telemetry.trace_request(request.verb, url, str(uuid.uuid4()), request.endpoint) as ctx:
            outcome = self._run(request.verb, url, headers, data, total, cancel)
            if isinstance(outcome, RawResponse):
                self._telemetry.record_response(ctx, outcome.status_code, attempts=outcome.attempts)
            else:
                self._telemetry.record_response(ctx, 0, attempts=outcome.attempts, error=outcome.kind.value)
        return outcome

    def _run(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes],
        total: float,
        cancel: Optional[CancellationToken],
    ) -> DispatchOutcome:
        policy = self.policy
        end = time.monotonic() + total
        attempt = 0
        while True:
            if cancel is not None and cancel.cancelled:
                return TransportError(TransportErrorKind.CANCELLED, "Call cancelled", attempts=attempt)
            remaining = end - time.monotonic()
            if remaining <= 0:
                return TransportError(
                    TransportErrorKind.TIMEOUT, f"Deadline of {total}s exceeded", attempts=attempt
                )
            attempt += 1
            retry_after: Optional[str] = None
            try:
                raw = self._http.send(
                    method, url, headers=headers, data=data, timeout=min(policy.timeout, remaining)
                )
            except requests.exceptions.Timeout as exc:
                failure: DispatchOutcome = TransportError(
                    TransportErrorKind.TIMEOUT, f"Request timed out: {exc}", attempts=attempt, cause=exc
                )
            except requests.exceptions.ConnectionError as exc:
                failure = TransportError(
                    TransportErrorKind.CONNECTION, f"Connection failed: {exc}", attempts=attempt, cause=exc
                )
            except requests.exceptions.RequestException as exc:
                return TransportError(
                    TransportErrorKind.PROTOCOL, f"Request failed: {exc}", attempts=attempt, cause=exc
                )
            else:
                raw = replace(raw, attempts=attempt)
                if not (policy.retry_transient_errors and raw.status_code in policy.transient_status_codes):
                    return raw
                failure = raw
                retry_after = raw.headers.get(HEADER_RETRY_AFTER)

            if attempt >= policy.max_attempts:
                return failure
            delay = policy.delay(attempt - 1, retry_after)
            window = min(policy.timeout, end - (time.monotonic() + delay))
            if window < min(policy.min_attempt_timeout, policy.timeout):
                _LOGGER.debug("%s %s: no time left for attempt %d, giving up", method, url, attempt + 1)
                return failure
            _LOGGER.debug(
                "%s %s: attempt %d failed (%s), retrying in %.2fs",
                method,
                url,
                attempt,
                failure.status_code if isinstance(failure, RawResponse) else failure.kind.value,
                delay,
            )
            if self._wait(delay, cancel):
                return TransportError(TransportErrorKind.CANCELLED, "Call cancelled during backoff", attempts=attempt)

    @staticmethod
    def _wait(delay: float, cancel: Optional[CancellationToken]) -> bool:
        if cancel is None:
            time.sleep(delay)
            return False
        return cancel.wait(delay)
