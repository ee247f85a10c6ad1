# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Transport collaborator for the dispatch core.

This module provides :class:`~Avalara.AvaTax.core._http._HttpClient`, a thin
wrapper around the requests library that performs exactly one HTTP exchange
and returns it as a :class:`~Avalara.AvaTax.core.results.RawResponse`. Retry,
backoff and deadline handling live in
:class:`~Avalara.AvaTax.data._dispatcher.Dispatcher`; connection pooling is
available through an optional session.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .results import RawResponse


class _HttpClient:
    """
    Single-attempt HTTP client with optional session support.

    :param session: Optional requests.Session for connection pooling. If provided,
        all requests use this session for efficient connection reuse.
    :type session: :class:`requests.Session` | None
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> RawResponse:
        """
        Execute one HTTP request.

        :param method: HTTP method (GET, POST, PUT, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request, query string included.
        :type url: :class:`str`
        :param headers: Request headers.
        :type headers: :class:`~typing.Mapping`
        :param data: Serialized request body.
        :type data: :class:`bytes` | None
        :param timeout: Timeout in seconds for connecting and for reading.
        :type timeout: :class:`float` | None
        :return: The response, body fully read.
        :rtype: :class:`~Avalara.AvaTax.core.results.RawResponse`
        :raises requests.exceptions.RequestException: On any transport failure.
        """
        kwargs = {"headers": dict(headers), "data": data, "timeout": timeout}
        if self._session is not None:
            r = self._session.request(method, url, **kwargs)
        else:
            r = requests.request(method, url, **kwargs)
        return RawResponse(
            status_code=r.status_code,
            headers=r.headers,
            body=r.content or b"",
            url=url,
        )

    def close(self) -> None:
        """
        Close the HTTP client and release resources.

        If a session was provided, this method closes it. Safe to call multiple times.
        After closing, the client should not be used for further requests.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
