# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Telemetry infrastructure for the AvaTax SDK.

Provides OpenTelemetry-based tracing and metrics, stdlib logging, and an
extensible hook system for custom telemetry providers. One telemetry scope is
opened per logical call; retries happen inside it.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from ..common.constants import (
    OTEL_ATTR_AVATAX_ATTEMPTS,
    OTEL_ATTR_AVATAX_ENDPOINT,
    OTEL_ATTR_AVATAX_REQUEST_ID,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_HTTP_URL,
)

# Optional OpenTelemetry imports
try:
    from opentelemetry import trace, metrics
    from opentelemetry.trace import Status, StatusCode

    _OTEL_AVAILABLE = True
except ImportError:
    _OTEL_AVAILABLE = False
    trace = None  # type: ignore
    metrics = None  # type: ignore
    Status = None  # type: ignore
    StatusCode = None  # type: ignore

_LOGGER = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration for SDK telemetry and observability.

    Telemetry is opt-in. When enabled, the SDK produces OpenTelemetry-compatible
    traces and metrics, and logs one line per call.

    Example:
        Log every call at DEBUG and failures at WARNING::

            config = AvaTaxConfig(
                telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG")
            )

        Custom hook::

            config = AvaTaxConfig(
                telemetry=TelemetryConfig(hooks=[MyCustomTelemetryHook()])
            )
    """

    # Signal toggles
    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    # Logging configuration
    log_level: str = "WARNING"
    logger_name: str = "Avalara.AvaTax"

    # Custom hooks
    hooks: List["TelemetryHook"] = field(default_factory=list)


# ============================================================================
# Context Objects
# ============================================================================


@dataclass
class RequestContext:
    """Context passed to telemetry hooks for each logical call."""

    client_request_id: str
    method: str
    url: str
    endpoint: Optional[str] = None

    start_time: float = field(default_factory=time.perf_counter)

    # Custom data bag for hooks to share state
    custom_data: Dict[str, Any] = field(default_factory=dict)

    _span: Any = field(default=None, repr=False)


@dataclass
class ResponseContext:
    """Outcome information passed to telemetry hooks."""

    status_code: int
    duration_ms: float
    attempts: int = 1
    error: Optional[str] = None

    @property
    def retry_count(self) -> int:
        return max(0, self.attempts - 1)


# ============================================================================
# Hook Protocol
# ============================================================================


@runtime_checkable
class TelemetryHook(Protocol):
    """Protocol for custom telemetry hooks.

    All methods are optional - implement only what you need.

    Example:
        class StatsdHook:
            def __init__(self, statsd):
                self.statsd = statsd

            def on_request_end(self, request: RequestContext, response: ResponseContext):
                self.statsd.timing(f"avatax.{request.endpoint}.duration", response.duration_ms)
    """

    def on_request_start(self, context: RequestContext) -> None:
        """Called before the first attempt of a call."""
        ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None:
        """Called after a call completes (success, error value or transport failure)."""
        ...

    def get_additional_headers(self) -> Dict[str, str]:
        """Return additional headers to include in requests."""
        ...


# ============================================================================
# Telemetry Manager
# ============================================================================


class TelemetryManager:
    """Manages telemetry instrumentation for the AvaTax SDK.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._tracer: Optional[Any] = None
        self._meter: Optional[Any] = None
        self._logger: Optional[logging.Logger] = None
        self._hooks = list(self._config.hooks)

        self._request_duration: Optional[Any] = None
        self._request_count: Optional[Any] = None
        self._error_count: Optional[Any] = None
        self._retry_count: Optional[Any] = None

        self._initialize()

    @property
    def is_tracing_enabled(self) -> bool:
        return self._config.enable_tracing and _OTEL_AVAILABLE

    @property
    def is_metrics_enabled(self) -> bool:
        return self._config.enable_metrics and _OTEL_AVAILABLE

    def _initialize(self) -> None:
        if self.is_tracing_enabled:
            self._tracer = trace.get_tracer("Avalara.AvaTax")

        if self.is_metrics_enabled:
            self._meter = metrics.get_meter("Avalara.AvaTax")
            self._setup_metrics()

        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    def _setup_metrics(self) -> None:
        """Create metric instruments."""
        if not self._meter:
            return

        self._request_duration = self._meter.create_histogram(
            name="avatax.client.request.duration",
            description="Duration of AvaTax API calls, retries included",
            unit="ms",
        )
        self._request_count = self._meter.create_counter(
            name="avatax.client.request.count",
            description="Number of AvaTax API calls",
            unit="1",
        )
        self._error_count = self._meter.create_counter(
            name="avatax.client.error.count",
            description="Number of AvaTax API calls ending in an error",
            unit="1",
        )
        self._retry_count = self._meter.create_counter(
            name="avatax.client.retry.count",
            description="Number of retried attempts",
            unit="1",
        )

    @contextmanager
    def trace_request(
        self,
        method: str,
        url: str,
        client_request_id: str,
        endpoint: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        """Create a traced call context.

        Usage:
            with telemetry.trace_request("GET", url, req_id, "get_account") as ctx:
                raw = transport.send(...)
                telemetry.record_response(ctx, raw.status_code, attempts=raw.attempts)
        """
        ctx = RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            endpoint=endpoint,
        )
        self._dispatch("on_request_start", ctx)

        span = None
        if self._tracer:
            span = self._tracer.start_span(
                f"AvaTax {endpoint or method}",
                kind=trace.SpanKind.CLIENT,
                attributes={
                    OTEL_ATTR_HTTP_METHOD: method,
                    OTEL_ATTR_HTTP_URL: url,
                    OTEL_ATTR_AVATAX_REQUEST_ID: client_request_id,
                    **({OTEL_ATTR_AVATAX_ENDPOINT: endpoint} if endpoint else {}),
                },
            )
            ctx._span = span

        try:
            yield ctx
        except Exception as e:
            if span:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
            raise
        finally:
            if span:
                span.end()

    def record_response(
        self,
        ctx: RequestContext,
        status_code: int,
        attempts: int = 1,
        error: Optional[str] = None,
    ) -> None:
        """Record call metrics, log the outcome and dispatch to hooks.

        ``status_code`` is 0 when the call ended without an HTTP response.
        """
        duration_ms = (time.perf_counter() - ctx.start_time) * 1000
        response = ResponseContext(
            status_code=status_code,
            duration_ms=duration_ms,
            attempts=attempts,
            error=error,
        )
        failed = error is not None or status_code >= 400

        if ctx._span:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)
            ctx._span.set_attribute(OTEL_ATTR_AVATAX_ATTEMPTS, attempts)
            if failed and Status is not None:
                ctx._span.set_status(Status(StatusCode.ERROR, error or str(status_code)))

        if self._request_duration:
            attributes: Dict[str, Any] = {"method": ctx.method, "status_code": status_code}
            if ctx.endpoint:
                attributes["endpoint"] = ctx.endpoint
            self._request_duration.record(duration_ms, attributes)
            self._request_count.add(1, attributes)
            if failed:
                self._error_count.add(1, attributes)
            if response.retry_count > 0:
                self._retry_count.add(response.retry_count, attributes)

        if self._logger:
            level = logging.WARNING if failed else logging.DEBUG
            self._logger.log(
                level,
                "%s %s %s %.1fms attempts=%d%s",
                ctx.endpoint or "-",
                ctx.method,
                status_code,
                duration_ms,
                attempts,
                f" error={error}" if error else "",
                extra={"client_request_id": ctx.client_request_id},
            )

        self._dispatch("on_request_end", ctx, response)

    def _dispatch(self, name: str, *args: Any) -> None:
        for hook in self._hooks:
            callback = getattr(hook, name, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                # Hooks should not break requests
                _LOGGER.debug("Telemetry hook %r failed in %s", hook, name, exc_info=True)

    def get_additional_headers(self) -> Dict[str, str]:
        """Collect additional headers from all hooks."""
        headers: Dict[str, str] = {}
        for hook in self._hooks:
            if not hasattr(hook, "get_additional_headers"):
                continue
            try:
                hook_headers = hook.get_additional_headers()
            except Exception:
                _LOGGER.debug("Telemetry hook %r failed to supply headers", hook, exc_info=True)
                continue
            if hook_headers:
                headers.update(hook_headers)
        return headers


# ============================================================================
# No-op Manager for when telemetry is disabled
# ============================================================================


class NoOpTelemetryManager:
    """No-op telemetry manager when telemetry is disabled."""

    @contextmanager
    def trace_request(
        self,
        method: str,
        url: str,
        client_request_id: str,
        endpoint: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        yield RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            endpoint=endpoint,
        )

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass

    def get_additional_headers(self) -> Dict[str, str]:
        return {}


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Factory to create appropriate telemetry manager."""
    if config is None:
        return NoOpTelemetryManager()

    has_any_enabled = config.enable_tracing or config.enable_metrics or config.enable_logging or config.hooks
    if not has_any_enabled:
        return NoOpTelemetryManager()

    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]
