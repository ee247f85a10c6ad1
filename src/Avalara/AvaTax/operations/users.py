# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""User endpoints namespace."""

from __future__ import annotations

from ..data._decoder import ResultShape
from ._endpoints import LIST_OPTIONS, Endpoint, EndpointOperations, endpoint_table


class UserOperations(EndpointOperations):
    """
    User endpoints, accessed via ``client.users``.

    User-specific endpoints take the user ID before the account ID::

        user = client.users.get_user(42, 123, include="FetchAll")
    """

    endpoints = endpoint_table(
        Endpoint(
            "get_user",
            "GET",
            "/api/v2/accounts/{accountId}/users/{id}",
            summary="Retrieve a single user.",
            params=("id", "accountId"),
            options=("include",),
        ),
        Endpoint(
            "get_user_entitlements",
            "GET",
            "/api/v2/accounts/{accountId}/users/{id}/entitlements",
            summary="Retrieve all entitlements for a single user.",
            params=("id", "accountId"),
        ),
        Endpoint(
            "list_users_by_account",
            "GET",
            "/api/v2/accounts/{accountId}/users",
            summary="Retrieve users for this account.",
            shape=ResultShape.FETCH_RESULT,
            options=LIST_OPTIONS,
        ),
        Endpoint(
            "query_users",
            "GET",
            "/api/v2/users",
            summary="Retrieve all users visible to the current user.",
            shape=ResultShape.FETCH_RESULT,
            options=LIST_OPTIONS,
        ),
        Endpoint(
            "update_user",
            "PUT",
            "/api/v2/accounts/{accountId}/users/{id}",
            summary="Replace a single user with an updated object.",
            params=("id", "accountId"),
            body=True,
        ),
    )
