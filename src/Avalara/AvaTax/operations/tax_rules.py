# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tax rule endpoints namespace."""

from __future__ import annotations

from ..data._decoder import ResultShape
from ._endpoints import LIST_OPTIONS, Endpoint, EndpointOperations, endpoint_table


class TaxRuleOperations(EndpointOperations):
    """
    Tax rule endpoints, accessed via ``client.tax_rules``.

    A tax rule is a custom taxability rule for a product or service sold by a
    company.

    Example::

        rules = client.tax_rules.list_tax_rules(123, filter="taxCode eq 'P0000000'", top=50)
        rule = client.tax_rules.get_tax_rule(123, 456)
        client.tax_rules.update_tax_rule(123, 456, {**rule, "isActive": False})
    """

    endpoints = endpoint_table(
        Endpoint(
            "create_tax_rules",
            "POST",
            "/api/v2/companies/{companyId}/taxrules",
            summary="Create one or more new tax rules attached to this company.",
            body=True,
        ),
        Endpoint(
            "delete_tax_rule",
            "DELETE",
            "/api/v2/companies/{companyId}/taxrules/{id}",
            summary="Mark a single tax rule as deleted.",
        ),
        Endpoint(
            "get_tax_rule",
            "GET",
            "/api/v2/companies/{companyId}/taxrules/{id}",
            summary="Retrieve a single tax rule.",
        ),
        Endpoint(
            "list_tax_rules",
            "GET",
            "/api/v2/companies/{companyId}/taxrules",
            summary="Retrieve tax rules for this company.",
            shape=ResultShape.FETCH_RESULT,
            options=LIST_OPTIONS,
        ),
        Endpoint(
            "query_tax_rules",
            "GET",
            "/api/v2/taxrules",
            summary="Retrieve tax rules across all companies.",
            shape=ResultShape.FETCH_RESULT,
            options=LIST_OPTIONS,
        ),
        Endpoint(
            "update_tax_rule",
            "PUT",
            "/api/v2/companies/{companyId}/taxrules/{id}",
            summary="Replace a single tax rule with an updated object.",
            body=True,
        ),
    )
