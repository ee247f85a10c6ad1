# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Mapping, Optional, Union
from urllib.parse import urlsplit

import requests

from .common.constants import ENVIRONMENTS
from .core._auth import CredentialLike, CredentialProvider
from .core._http import _HttpClient
from .core.config import AvaTaxConfig
from .core.results import FetchResult, TransportError, is_error
from .core.telemetry import create_telemetry_manager
from .data._decoder import ResultShape, decode_response
from .data._dispatcher import CancellationToken, Dispatcher, RetryPolicy
from .data._paginator import Paginator
from .data._query import QueryOptions
from .data._request import Request
from .operations._endpoints import Endpoint
from .operations.accounts import AccountOperations
from .operations.tax_rules import TaxRuleOperations
from .operations.users import UserOperations

if TYPE_CHECKING:
    import pandas as pd


class AvaTaxClient:
    """
    High-level client for the AvaTax REST v2 service.

    Endpoint methods are organized under namespaces built from declarative
    endpoint tables:

    - ``client.accounts``: account endpoints
    - ``client.tax_rules``: tax rule endpoints
    - ``client.users``: user endpoints

    Every call returns either the decoded value (a ``dict``/``list`` model, a
    :class:`~Avalara.AvaTax.core.results.FetchResult`, or ``None``) or an error
    value (:class:`~Avalara.AvaTax.core.results.ErrorResult`,
    :class:`~Avalara.AvaTax.core.results.TransportError`). Set
    ``AvaTaxConfig(raise_on_error=True)`` to have error values raised instead.
    Parameter mistakes always raise before any network call.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager enables connection pooling and
        releases it on exit::

            with AvaTaxClient(BasicCredential("user", "pass")) as client:
                rule = client.tax_rules.get_tax_rule(123, 456)

    :param credential: Basic or bearer credential (azure-core key credentials are also accepted).
    :type credential: ~Avalara.AvaTax.core._auth.BasicCredential or ~Avalara.AvaTax.core._auth.BearerCredential
    :param environment: ``"sandbox"`` or ``"production"``; ignored when ``base_url`` is given.
    :type environment: :class:`str`
    :param config: Optional configuration for retries, timeouts and client identification.
        If not provided, defaults are loaded from :meth:`~Avalara.AvaTax.core.config.AvaTaxConfig.from_env`.
    :type config: ~Avalara.AvaTax.core.config.AvaTaxConfig or None
    :param base_url: Explicit service root, e.g. for a proxy or a test server.
    :type base_url: :class:`str` or None

    :raises ValueError: If ``environment`` is unknown.
    :raises TypeError: If ``credential`` is not a supported type.

    Example::

        from Avalara.AvaTax.client import AvaTaxClient
        from Avalara.AvaTax.core._auth import BasicCredential
        from Avalara.AvaTax.core.results import is_error

        client = AvaTaxClient(BasicCredential("1100012345", "license-key"), environment="sandbox")
        try:
            for page in client.iter_pages("list_tax_rules", 123, top=100):
                if is_error(page):
                    print(page.error_code, page.message)
                    break
                for rule in page:
                    print(rule["id"])
        finally:
            client.close()
    """

    def __init__(
        self,
        credential: CredentialLike,
        environment: str = "sandbox",
        config: Optional[AvaTaxConfig] = None,
        *,
        base_url: Optional[str] = None,
    ) -> None:
        self._credentials = CredentialProvider(credential)
        if base_url is None:
            try:
                base_url = ENVIRONMENTS[environment]
            except KeyError:
                raise ValueError(
                    f"Unknown environment '{environment}'; expected one of {sorted(ENVIRONMENTS)} or pass base_url."
                ) from None
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValueError("base_url is required.")
        self._config = config or AvaTaxConfig.from_env()
        self._telemetry = create_telemetry_manager(self._config.telemetry)
        self._dispatcher: Optional[Dispatcher] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

        self.accounts = AccountOperations(self)
        self.tax_rules = TaxRuleOperations(self)
        self.users = UserOperations(self)

        self._endpoints: Dict[str, Endpoint] = {}
        for namespace in (self.accounts, self.tax_rules, self.users):
            self._endpoints.update(type(namespace).endpoints)

    def __enter__(self) -> "AvaTaxClient":
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            if self._dispatcher is not None:
                self._dispatcher._http.close()
                self._dispatcher = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Explicitly close the client and release resources.

        Safe to call multiple times. This method is called automatically when
        using the context manager.
        """
        self._dispatcher = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def credentials(self) -> CredentialProvider:
        return self._credentials

    def rotate_credential(self, credential: CredentialLike) -> None:
        """
        Replace the active credential without disrupting in-flight calls.

        Calls already in progress complete with the header they captured.
        """
        self._credentials.rotate(credential)

    def _get_dispatcher(self) -> Dispatcher:
        """Get or create the dispatcher, sharing the context-manager session when present."""
        if self._dispatcher is None:
            self._dispatcher = Dispatcher(
                self._base_url,
                self._credentials,
                _HttpClient(session=self._session),
                RetryPolicy.from_config(self._config),
                client_id=self._config.client_id_header,
                telemetry=self._telemetry,
            )
        return self._dispatcher

    def _resolve(self, endpoint: Union[str, Endpoint]) -> Endpoint:
        if isinstance(endpoint, Endpoint):
            return endpoint
        try:
            return self._endpoints[endpoint]
        except KeyError:
            raise ValueError(f"Unknown endpoint '{endpoint}'") from None

    def _execute(
        self,
        request: Request,
        shape: ResultShape,
        model: Optional[Callable[[Any], Any]],
        cancel: Optional[CancellationToken],
        deadline: Optional[float],
    ) -> Any:
        outcome = self._get_dispatcher().execute(request, cancel=cancel, deadline=deadline)
        if isinstance(outcome, TransportError):
            result: Any = outcome
        else:
            result = decode_response(outcome, shape, model, request.options)
        if self._config.raise_on_error and is_error(result):
            result.raise_error()
        return result

    # ------------------------------ Invocation ------------------------------

    def invoke(
        self,
        endpoint: Union[str, Endpoint],
        *args: Any,
        cancel: Optional[CancellationToken] = None,
        deadline: Optional[float] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Call one endpoint from the endpoint tables.

        :param endpoint: Endpoint name (e.g. ``"get_tax_rule"``) or :class:`Endpoint`.
        :param args: Route parameters in the endpoint's order, then ``model``.
        :param cancel: Token that stops retries when cancelled.
        :type cancel: ~Avalara.AvaTax.data._dispatcher.CancellationToken or None
        :param deadline: Seconds allowed for the whole call, retries included.
        :type deadline: :class:`float` or None
        :param kwargs: Route parameters by name, ``model``, or query options
            (``filter``, ``include``, ``top``, ``skip``, ``order_by``) the endpoint accepts.
        :return: The decoded value, or an error value.
        :raises ValueError: If the endpoint name is unknown.
        :raises MissingParameterError: If a route parameter or the body is missing.
        :raises InvalidParameterError: If an argument is invalid or not accepted.
        """
        ep = self._resolve(endpoint)
        route, body, options = ep.bind(args, kwargs)
        request = Request(ep.verb, ep.path, route, options, body, endpoint=ep.name)
        return self._execute(request, ep.shape, ep.model, cancel, deadline)

    def call(
        self,
        verb: str,
        path: str,
        route_params: Optional[Mapping[str, Any]] = None,
        options: Union[QueryOptions, Mapping[str, Any], None] = None,
        body: Any = None,
        *,
        shape: ResultShape = ResultShape.MODEL,
        model: Optional[Callable[[Any], Any]] = None,
        cancel: Optional[CancellationToken] = None,
        deadline: Optional[float] = None,
    ) -> Any:
        """
        Call an arbitrary path through the dispatch core.

        Useful for endpoints not present in the endpoint tables::

            client.call("GET", "/api/v2/companies/{companyId}/items", {"companyId": 123},
                        {"top": 10}, shape=ResultShape.FETCH_RESULT)
        """
        request = Request(verb, path, route_params or {}, QueryOptions.from_mapping(options), body)
        return self._execute(request, ResultShape(shape), model, cancel, deadline)

    def _link_target(self, link: str) -> str:
        parts = urlsplit(link)
        return f"{parts.path}?{parts.query}" if parts.query else parts.path

    def iter_pages(
        self,
        endpoint: Union[str, Endpoint],
        *args: Any,
        cancel: Optional[CancellationToken] = None,
        deadline: Optional[float] = None,
        **kwargs: Any,
    ) -> Iterator[Any]:
        """
        Iterate over every page of a list endpoint.

        Follows the service's continuation link when one is supplied; otherwise
        advances ``skip`` with :class:`~Avalara.AvaTax.data._paginator.Paginator`.
        Each page is a :class:`FetchResult`. If a call fails, its error value is
        yielded (or raised with ``raise_on_error``) and iteration stops.

        :raises ValueError: If the endpoint does not return a list envelope.
        """
        ep = self._resolve(endpoint)
        if ep.shape is not ResultShape.FETCH_RESULT:
            raise ValueError(f"Endpoint '{ep.name}' does not return a list envelope")
        route, body, options = ep.bind(args, kwargs)
        link: Optional[str] = None
        while True:
            if link is None:
                request = Request(ep.verb, ep.path, route, options, body, endpoint=ep.name)
            else:
                request = Request(ep.verb, self._link_target(link), endpoint=ep.name, literal=True)
            page = self._execute(request, ep.shape, ep.model, cancel, deadline)
            yield page
            if is_error(page) or not page.items:
                return
            if page.next_link:
                link = page.next_link
                continue
            if link is not None:
                return
            options = Paginator(page, options).next_page_options()
            if options is None:
                return

    def iter_items(self, endpoint: Union[str, Endpoint], *args: Any, **kwargs: Any) -> Iterator[Any]:
        """
        Iterate over the items of every page of a list endpoint.

        Error values are raised (see ``raise_error()`` on the error types)
        since they cannot be yielded as items.
        """
        for page in self.iter_pages(endpoint, *args, **kwargs):
            if is_error(page):
                page.raise_error()
            yield from page

    def get_dataframe(self, endpoint: Union[str, Endpoint], *args: Any, **kwargs: Any) -> "pd.DataFrame":
        """
        Fetch every page of a list endpoint into one :class:`pandas.DataFrame`.

        Requires the ``pandas`` extra. Error values are raised.
        """
        from .utils._pandas import pages_to_dataframe

        pages = []
        for page in self.iter_pages(endpoint, *args, **kwargs):
            if is_error(page):
                page.raise_error()
            pages.append(page)
        return pages_to_dataframe(pages)


__all__ = ["AvaTaxClient", "CancellationToken", "FetchResult"]
