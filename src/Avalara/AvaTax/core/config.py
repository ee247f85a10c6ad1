# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from ..common.constants import API_VERSION, SDK_NAME
from .telemetry import TelemetryConfig

_T = TypeVar("_T")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(env: Mapping[str, str], name: str, convert: Callable[[str], _T]) -> Optional[_T]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Environment variable {name}={raw!r} is not valid: {exc}") from exc


def _to_bool(value: str) -> bool:
    return value.lower() in _TRUE_VALUES


@dataclass(frozen=True)
class AvaTaxConfig:
    """
    Configuration settings for AvaTax client operations.

    :param http_retries: Maximum number of attempts per call, first attempt included (default: 5).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_max_backoff: Maximum delay between retry attempts in seconds (default: 60.0).
    :type http_max_backoff: float or None
    :param http_timeout: Per-attempt timeout in seconds (default: 30.0).
    :type http_timeout: float or None
    :param http_total_timeout: Upper bound in seconds on a whole call, retries included (default: 120.0).
    :type http_total_timeout: float or None
    :param http_jitter: Whether to add jitter to retry delays to prevent thundering herd (default: True).
    :type http_jitter: bool or None
    :param http_retry_transient_errors: Whether to retry HTTP 429 and 503 responses (default: True).
    :type http_retry_transient_errors: bool or None
    :param app_name: Application name sent in the client identification header.
    :type app_name: str
    :param app_version: Application version sent in the client identification header.
    :type app_version: str
    :param machine_name: Machine name sent in the client identification header (default: this host).
    :type machine_name: str or None
    :param raise_on_error: Raise error values as exceptions instead of returning them (default: False).
    :type raise_on_error: bool
    :param telemetry: Optional telemetry settings; ``None`` disables telemetry.
    :type telemetry: ~Avalara.AvaTax.core.telemetry.TelemetryConfig or None
    """

    # HTTP retry and resilience configuration
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_max_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    http_total_timeout: Optional[float] = None
    http_jitter: Optional[bool] = None
    http_retry_transient_errors: Optional[bool] = None

    # Client identification
    app_name: str = "AvaTaxClient"
    app_version: str = "1.0"
    machine_name: Optional[str] = None

    raise_on_error: bool = False
    telemetry: Optional[TelemetryConfig] = None

    @property
    def client_id_header(self) -> str:
        """Value of the ``X-Avalara-Client`` identification header."""
        machine = self.machine_name or platform.node() or "unknown"
        return f"{self.app_name}; {self.app_version}; {SDK_NAME}; {API_VERSION}; {machine}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AvaTaxConfig":
        """
        Create a configuration instance from ``AVATAX_*`` environment variables.

        Unset variables leave the corresponding setting at its default.

        :param environ: Mapping to read instead of :data:`os.environ`.
        :type environ: ~typing.Mapping or None
        :return: Configuration instance.
        :rtype: ~Avalara.AvaTax.core.config.AvaTaxConfig
        :raises ValueError: If a variable is set to an unparsable value.
        """
        env = os.environ if environ is None else environ
        return cls(
            http_retries=_env(env, "AVATAX_HTTP_RETRIES", int),
            http_backoff=_env(env, "AVATAX_HTTP_BACKOFF", float),
            http_max_backoff=_env(env, "AVATAX_HTTP_MAX_BACKOFF", float),
            http_timeout=_env(env, "AVATAX_HTTP_TIMEOUT", float),
            http_total_timeout=_env(env, "AVATAX_HTTP_TOTAL_TIMEOUT", float),
            http_jitter=_env(env, "AVATAX_HTTP_JITTER", _to_bool),
            http_retry_transient_errors=_env(env, "AVATAX_HTTP_RETRY_TRANSIENT_ERRORS", _to_bool),
            app_name=env.get("AVATAX_APP_NAME") or "AvaTaxClient",
            app_version=env.get("AVATAX_APP_VERSION") or "1.0",
            machine_name=env.get("AVATAX_MACHINE_NAME") or None,
            raise_on_error=_env(env, "AVATAX_RAISE_ON_ERROR", _to_bool) or False,
        )
