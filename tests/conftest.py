# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for AvaTax SDK tests.

This module provides a scripted transport, a fake clock for the dispatcher
and common credentials that can be used across all test modules.
"""

import json

import pytest

from Avalara.AvaTax.core._auth import BasicCredential, CredentialProvider
from Avalara.AvaTax.core.config import AvaTaxConfig
from Avalara.AvaTax.core.results import RawResponse


def make_response(status=200, body=None, headers=None):
    """Build a RawResponse; dict/list bodies are JSON-encoded."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        body = body.encode("utf-8")
    return RawResponse(status_code=status, headers=dict(headers or {}), body=body or b"")


class FakeTransport:
    """Stands in for _HttpClient; replays scripted responses or raises scripted exceptions."""

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def queue(self, *outcomes):
        self._outcomes.extend(outcomes)

    def send(self, method, url, *, headers, data=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": dict(headers), "data": data, "timeout": timeout})
        if not self._outcomes:
            raise AssertionError("No more responses")
        outcome = self._outcomes.pop(0)
        if callable(outcome) and not isinstance(outcome, RawResponse):
            outcome = outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


class FakeClock:
    """Replacement for the ``time`` module inside the dispatcher."""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def basic_credential():
    return BasicCredential("1100012345", "license-key")


@pytest.fixture
def credentials(basic_credential):
    return CredentialProvider(basic_credential)


@pytest.fixture
def sample_base_url():
    """Standard test base URL."""
    return "https://sandbox-rest.avatax.com"


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return AvaTaxConfig(
        http_retries=3,
        http_backoff=0.1,
        http_jitter=False,
        app_name="UnitTests",
        app_version="0.0",
        machine_name="test-host",
    )


@pytest.fixture
def fake_clock(monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr("Avalara.AvaTax.data._dispatcher.time", clock)
    return clock


@pytest.fixture
def respond():
    """Factory for RawResponse objects: ``respond(404, {"error": ...}, {"Retry-After": "2"})``."""
    return make_response


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sample_data():
    """Namespace with the sample envelopes and error bodies from fixtures/test_data.py."""
    import fixtures.test_data as data

    return data
