# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for AvaTaxClient context manager support."""

import unittest
from unittest.mock import MagicMock

import requests

from Avalara.AvaTax.client import AvaTaxClient
from Avalara.AvaTax.core._auth import BasicCredential
from Avalara.AvaTax.core._http import _HttpClient
from Avalara.AvaTax.core.config import AvaTaxConfig


class TestContextManager(unittest.TestCase):
    """Test context manager support on AvaTaxClient."""

    def setUp(self):
        """Set up test fixtures."""
        self.credential = BasicCredential("1100012345", "license-key")
        self.config = AvaTaxConfig(machine_name="test-host")

    def test_enter_creates_session(self):
        """Test that __enter__ creates a session."""
        client = AvaTaxClient(self.credential, config=self.config)
        self.assertIsNone(client._session)

        result = client.__enter__()

        self.assertIsInstance(client._session, requests.Session)
        self.assertTrue(client._owns_session)
        self.assertIs(result, client)
        client.close()

    def test_exit_closes_session(self):
        """Test that __exit__ closes the session."""
        client = AvaTaxClient(self.credential, config=self.config)
        client.__enter__()

        mock_session = MagicMock(spec=requests.Session)
        client._session = mock_session
        client._owns_session = True

        client.__exit__(None, None, None)

        mock_session.close.assert_called_once()
        self.assertIsNone(client._session)
        self.assertFalse(client._owns_session)

    def test_context_manager_protocol(self):
        """Test full context manager protocol."""
        with AvaTaxClient(self.credential, config=self.config) as client:
            self.assertIsInstance(client, AvaTaxClient)
            self.assertIsInstance(client._session, requests.Session)

        self.assertIsNone(client._session)

    def test_dispatcher_shares_session(self):
        """Test that the dispatcher's transport uses the context-manager session."""
        with AvaTaxClient(self.credential, config=self.config) as client:
            dispatcher = client._get_dispatcher()
            self.assertIsInstance(dispatcher._http, _HttpClient)
            self.assertIs(dispatcher._http._session, client._session)

    def test_dispatcher_rebuilt_on_enter(self):
        """Test that a dispatcher created before __enter__ is replaced."""
        client = AvaTaxClient(self.credential, config=self.config)
        before = client._get_dispatcher()
        self.assertIsNone(before._http._session)

        with client:
            after = client._get_dispatcher()
            self.assertIsNot(before, after)
            self.assertIs(after._http._session, client._session)

    def test_close_method(self):
        """Test that close() is idempotent."""
        client = AvaTaxClient(self.credential, config=self.config)
        client.__enter__()
        client.close()
        client.close()
        self.assertIsNone(client._session)
        self.assertIsNone(client._dispatcher)

    def test_close_without_enter(self):
        """Test that close() on a client without a session is safe."""
        client = AvaTaxClient(self.credential, config=self.config)
        client.close()
        self.assertIsNone(client._session)

    def test_dispatcher_settings_from_config(self):
        """Test that the dispatcher picks up retry settings and the identification header."""
        config = AvaTaxConfig(http_retries=2, http_timeout=9.0, app_name="Svc", app_version="3", machine_name="m1")
        client = AvaTaxClient(self.credential, config=config)
        dispatcher = client._get_dispatcher()
        self.assertEqual(dispatcher.policy.max_attempts, 2)
        self.assertEqual(dispatcher.policy.timeout, 9.0)
        self.assertEqual(dispatcher._client_id, "Svc; 3; PythonSdk; v2; m1")
        self.assertEqual(dispatcher.base_url, client.base_url)
