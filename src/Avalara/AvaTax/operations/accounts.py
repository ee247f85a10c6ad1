# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Account endpoints namespace."""

from __future__ import annotations

from ..data._decoder import ResultShape
from ._endpoints import LIST_OPTIONS, Endpoint, EndpointOperations, endpoint_table


class AccountOperations(EndpointOperations):
    """
    Account endpoints, accessed via ``client.accounts``.

    Example::

        account = client.accounts.get_account(123, include="Subscriptions,Users")
        for page in client.iter_pages("query_accounts", filter="accountStatusId eq 'Active'", top=100):
            ...
    """

    endpoints = endpoint_table(
        Endpoint(
            "account_reset_license_key",
            "POST",
            "/api/v2/accounts/{id}/resetlicensekey",
            summary="Reset this account's license key.",
            body=True,
        ),
        Endpoint(
            "activate_account",
            "POST",
            "/api/v2/accounts/{id}/activate",
            summary="Activate an account by accepting terms and conditions.",
            options=("include",),
            body=True,
        ),
        Endpoint(
            "get_account",
            "GET",
            "/api/v2/accounts/{id}",
            summary="Retrieve a single account.",
            options=("include",),
        ),
        Endpoint(
            "get_account_configuration",
            "GET",
            "/api/v2/accounts/{id}/configuration",
            summary="Get configuration settings for this account.",
        ),
        Endpoint(
            "query_accounts",
            "GET",
            "/api/v2/accounts",
            summary="Retrieve all accounts visible to the current user.",
            shape=ResultShape.FETCH_RESULT,
            options=LIST_OPTIONS,
        ),
        Endpoint(
            "set_account_configuration",
            "POST",
            "/api/v2/accounts/{id}/configuration",
            summary="Change configuration settings for this account.",
            body=True,
        ),
    )
