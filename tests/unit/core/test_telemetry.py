# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for telemetry infrastructure."""

import logging

import pytest
from unittest.mock import MagicMock, patch

from Avalara.AvaTax.core.telemetry import (
    TelemetryConfig,
    TelemetryManager,
    NoOpTelemetryManager,
    RequestContext,
    ResponseContext,
    create_telemetry_manager,
)


class TestTelemetryConfig:
    """Tests for TelemetryConfig dataclass."""

    def test_default_values(self):
        config = TelemetryConfig()
        assert config.enable_tracing is False
        assert config.enable_metrics is False
        assert config.enable_logging is False
        assert config.log_level == "WARNING"
        assert config.logger_name == "Avalara.AvaTax"
        assert config.hooks == []

    def test_immutability(self):
        config = TelemetryConfig(enable_tracing=True)
        with pytest.raises(AttributeError):
            config.enable_tracing = False


class TestTelemetryManagerFactory:
    """Tests for create_telemetry_manager factory."""

    def test_returns_noop_when_config_none(self):
        assert isinstance(create_telemetry_manager(None), NoOpTelemetryManager)

    def test_returns_noop_when_all_disabled(self):
        assert isinstance(create_telemetry_manager(TelemetryConfig()), NoOpTelemetryManager)

    @pytest.mark.parametrize("flag", ["enable_tracing", "enable_metrics", "enable_logging"])
    def test_returns_manager_when_signal_enabled(self, flag):
        manager = create_telemetry_manager(TelemetryConfig(**{flag: True}))
        assert isinstance(manager, TelemetryManager)

    def test_returns_manager_when_hooks_provided(self):
        manager = create_telemetry_manager(TelemetryConfig(hooks=[MagicMock()]))
        assert isinstance(manager, TelemetryManager)


class TestTelemetryManager:
    """Tests for TelemetryManager."""

    def test_trace_request_creates_context(self):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True))

        with manager.trace_request(
            "GET",
            "https://sandbox-rest.avatax.com/api/v2/accounts/1",
            "req-123",
            endpoint="get_account",
        ) as ctx:
            assert ctx.method == "GET"
            assert ctx.endpoint == "get_account"
            assert ctx.client_request_id == "req-123"

    def test_hooks_dispatched_on_request_start_and_end(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_request("GET", "https://test.com", "123") as ctx:
            manager.record_response(ctx, status_code=200)

        hook.on_request_start.assert_called_once()
        hook.on_request_end.assert_called_once()

    def test_hook_errors_do_not_break_request(self):
        hook = MagicMock()
        hook.on_request_start.side_effect = Exception("Hook error")
        hook.on_request_end.side_effect = Exception("Hook error")
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_request("GET", "https://test.com", "123") as ctx:
            manager.record_response(ctx, status_code=200)

    def test_hook_without_optional_methods(self):
        class StartOnly:
            def __init__(self):
                self.seen = []

            def on_request_start(self, context):
                self.seen.append(context.method)

        hook = StartOnly()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))
        with manager.trace_request("POST", "https://test.com", "1") as ctx:
            manager.record_response(ctx, 201)
        assert hook.seen == ["POST"]
        assert manager.get_additional_headers() == {}

    def test_get_additional_headers_collects_from_hooks(self):
        hook1 = MagicMock()
        hook1.get_additional_headers.return_value = {"X-Custom-1": "value1"}
        hook2 = MagicMock()
        hook2.get_additional_headers.return_value = {"X-Custom-2": "value2"}

        manager = TelemetryManager(TelemetryConfig(hooks=[hook1, hook2]))

        assert manager.get_additional_headers() == {"X-Custom-1": "value1", "X-Custom-2": "value2"}

    def test_get_additional_headers_handles_hook_errors(self):
        hook = MagicMock()
        hook.get_additional_headers.side_effect = Exception("Hook error")
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        assert manager.get_additional_headers() == {}

    def test_record_response_dispatches_to_hooks(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))
        ctx = RequestContext(client_request_id="req-123", method="POST", url="https://test.com", endpoint="create_tax_rules")

        manager.record_response(ctx, status_code=201, attempts=3)

        request, response = hook.on_request_end.call_args[0]
        assert request is ctx
        assert isinstance(response, ResponseContext)
        assert response.status_code == 201
        assert response.attempts == 3
        assert response.retry_count == 2
        assert response.duration_ms >= 0

    def test_logging_failure_at_warning(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True, logger_name="avatax.test"))
        ctx = RequestContext(client_request_id="r", method="GET", url="https://test.com", endpoint="get_tax_rule")

        with caplog.at_level(logging.DEBUG, logger="avatax.test"):
            manager.record_response(ctx, status_code=404)
            manager.record_response(ctx, status_code=0, error="timeout")
            manager.record_response(ctx, status_code=200)

        levels = [r.levelno for r in caplog.records if r.name == "avatax.test"]
        assert levels == [logging.WARNING, logging.WARNING, logging.DEBUG]
        assert "get_tax_rule GET 404" in caplog.records[0].getMessage()
        assert "error=timeout" in caplog.records[1].getMessage()


class TestNoOpTelemetryManager:
    """Tests for NoOpTelemetryManager."""

    def test_trace_request_returns_context(self):
        manager = NoOpTelemetryManager()
        with manager.trace_request("GET", "https://test.com", "123", endpoint="get_user") as ctx:
            assert ctx.method == "GET"
            assert ctx.endpoint == "get_user"

    def test_record_response_is_noop(self):
        NoOpTelemetryManager().record_response(None, 200)

    def test_get_additional_headers_returns_empty(self):
        assert NoOpTelemetryManager().get_additional_headers() == {}


class TestContexts:
    def test_default_start_time(self):
        ctx = RequestContext(client_request_id="req-1", method="GET", url="https://test.com")
        assert ctx.start_time > 0
        ctx.custom_data["my_key"] = "my_value"
        assert ctx.custom_data["my_key"] == "my_value"

    def test_retry_count_never_negative(self):
        assert ResponseContext(status_code=0, duration_ms=1.0, attempts=0).retry_count == 0


class TestOpenTelemetryIntegration:
    """Tests for OpenTelemetry integration when the API is available."""

    @pytest.fixture
    def mock_otel(self):
        """Mock OpenTelemetry API."""
        with patch("Avalara.AvaTax.core.telemetry._OTEL_AVAILABLE", True), patch(
            "Avalara.AvaTax.core.telemetry.trace"
        ) as mock_trace, patch("Avalara.AvaTax.core.telemetry.metrics") as mock_metrics, patch(
            "Avalara.AvaTax.core.telemetry.Status"
        ) as mock_status, patch(
            "Avalara.AvaTax.core.telemetry.StatusCode"
        ) as mock_status_code:
            mock_tracer = MagicMock()
            mock_trace.get_tracer.return_value = mock_tracer
            mock_trace.SpanKind.CLIENT = "CLIENT"

            mock_span = MagicMock()
            mock_tracer.start_span.return_value = mock_span

            mock_meter = MagicMock()
            mock_metrics.get_meter.return_value = mock_meter

            mock_status_code.ERROR = "ERROR"

            yield {
                "trace": mock_trace,
                "metrics": mock_metrics,
                "tracer": mock_tracer,
                "meter": mock_meter,
                "span": mock_span,
                "status": mock_status,
            }

    def test_span_created_and_ended(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))

        with manager.trace_request("GET", "https://test.com", "req-123", endpoint="get_tax_rule") as ctx:
            manager.record_response(ctx, 200, attempts=2)

        mock_otel["trace"].get_tracer.assert_called_once_with("Avalara.AvaTax")
        name = mock_otel["tracer"].start_span.call_args[0][0]
        assert name == "AvaTax get_tax_rule"
        mock_otel["span"].set_attribute.assert_any_call("http.response.status_code", 200)
        mock_otel["span"].set_attribute.assert_any_call("avatax.attempts", 2)
        mock_otel["span"].end.assert_called_once()
        mock_otel["span"].set_status.assert_not_called()

    def test_failed_response_sets_error_status(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))

        with manager.trace_request("GET", "https://test.com", "req-1") as ctx:
            manager.record_response(ctx, 500)

        mock_otel["span"].set_status.assert_called_once()

    def test_span_records_exception_on_error(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))

        with pytest.raises(ValueError):
            with manager.trace_request("GET", "https://test.com", "123"):
                raise ValueError("Test error")

        mock_otel["span"].record_exception.assert_called_once()
        mock_otel["span"].end.assert_called_once()

    def test_metrics_recorded(self, mock_otel):
        manager = TelemetryManager(TelemetryConfig(enable_metrics=True))
        meter = mock_otel["meter"]
        assert meter.create_histogram.called
        assert meter.create_counter.call_count == 3

        ctx = RequestContext(client_request_id="r", method="GET", url="https://test.com", endpoint="query_users")
        manager.record_response(ctx, 429, attempts=3)

        histogram = meter.create_histogram.return_value
        counter = meter.create_counter.return_value
        histogram.record.assert_called_once()
        # request, error and retry counters share the mocked instrument
        assert counter.add.call_count == 3
        counter.add.assert_any_call(2, {"method": "GET", "status_code": 429, "endpoint": "query_users"})
