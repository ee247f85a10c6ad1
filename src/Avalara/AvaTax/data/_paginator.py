# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Next-page arithmetic for list envelopes. Performs no I/O."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..core.results import FetchResult
from ._query import QueryOptions


class Paginator:
    """
    Compute the options for the page following ``result``.

    :param result: Page returned by a call made with ``options``.
    :type result: ~Avalara.AvaTax.core.results.FetchResult
    :param options: Query options of that call (``top=T``, ``skip=S``).
    :type options: QueryOptions or mapping or None

    The listing is exhausted when the page is short (``len(items) < T`` with
    ``T`` set and non-zero), when ``record_count <= S + len(items)``, or when
    the page is empty. An empty page ends the listing even when ``top`` is
    unset and ``record_count`` reports rows beyond ``skip``.

    Example::

        opts = QueryOptions(top=100)
        page = client.tax_rules.list_tax_rules(123, top=100)
        while not is_error(page):
            handle(page)
            opts = Paginator(page, opts).next_page_options()
            if opts is None:
                break
            page = client.tax_rules.list_tax_rules(123, **opts.to_dict())
    """

    def __init__(
        self,
        result: FetchResult,
        options: Union[QueryOptions, Mapping[str, Any], None] = None,
    ) -> None:
        self.result = result
        self.options = options if isinstance(options, QueryOptions) else QueryOptions.from_mapping(options)

    @property
    def consumed(self) -> int:
        """Rows covered so far: ``skip + len(items)``."""
        return (self.options.skip or 0) + len(self.result.items)

    @property
    def exhausted(self) -> bool:
        count = len(self.result.items)
        if count == 0:
            return True
        top = self.options.top
        if top and count < top:
            return True
        return self.result.record_count <= self.consumed

    @property
    def has_more(self) -> bool:
        return not self.exhausted

    @property
    def next_link(self) -> Optional[str]:
        return self.result.next_link

    def next_page_options(self) -> Optional[QueryOptions]:
        """Return options for the next page, or ``None`` when exhausted."""
        if self.exhausted:
            return None
        return self.options.replace(skip=self.consumed)
