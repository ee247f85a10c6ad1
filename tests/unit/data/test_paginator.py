# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from Avalara.AvaTax.core.results import FetchResult
from Avalara.AvaTax.data._paginator import Paginator
from Avalara.AvaTax.data._query import QueryOptions


def _page(n, record_count, next_link=None):
    return FetchResult(items=tuple({"id": i} for i in range(n)), record_count=record_count, next_link=next_link)


class TestPaginator:
    def test_full_page_advances_skip(self):
        nxt = Paginator(_page(10, 35), QueryOptions(top=10, skip=20)).next_page_options()
        assert nxt == QueryOptions(top=10, skip=30)

    def test_other_options_preserved(self):
        opts = QueryOptions(filter="isActive eq true", include="Users", top=2, order_by="id ASC")
        nxt = Paginator(_page(2, 10), opts).next_page_options()
        assert nxt == opts.replace(skip=2)

    def test_short_page_is_exhausted(self):
        p = Paginator(_page(5, 35), QueryOptions(top=10, skip=30))
        assert p.exhausted
        assert p.next_page_options() is None

    def test_record_count_reached_is_exhausted(self):
        p = Paginator(_page(10, 30), QueryOptions(top=10, skip=20))
        assert p.consumed == 30
        assert p.exhausted

    def test_empty_page_is_exhausted(self):
        assert Paginator(_page(0, 100), QueryOptions(top=10, skip=0)).exhausted

    def test_without_top_uses_record_count(self):
        p = Paginator(_page(1000, 2500), None)
        assert p.has_more
        assert p.next_page_options() == QueryOptions(skip=1000)

    def test_top_zero_treated_as_unset(self):
        p = Paginator(_page(3, 6), {"top": 0, "skip": 0})
        assert p.next_page_options() == QueryOptions(top=0, skip=3)

    def test_mapping_options_accepted(self):
        nxt = Paginator(_page(2, 3), {"$top": 2}).next_page_options()
        assert nxt == QueryOptions(top=2, skip=2)

    def test_next_link_exposed(self):
        assert Paginator(_page(2, 4, "/api/v2/accounts?skip=2")).next_link == "/api/v2/accounts?skip=2"

    def test_sequence_covers_every_row_once(self):
        total, top = 23, 5
        opts = QueryOptions(top=top)
        seen = []
        while opts is not None:
            skip = opts.skip or 0
            rows = list(range(skip, min(skip + top, total)))
            page = FetchResult(items=tuple(rows), record_count=total)
            seen.extend(page)
            opts = Paginator(page, opts).next_page_options()
        assert seen == list(range(total))
