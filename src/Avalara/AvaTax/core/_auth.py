# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authentication state for AvaTax calls.

AvaTax accepts HTTP basic credentials (username/password, or account ID and
license key) and bearer tokens. A :class:`CredentialProvider` holds the
active credential as an immutable snapshot; callers read the snapshot without
locking and :meth:`CredentialProvider.rotate` replaces it in a single
reference assignment.
"""

from __future__ import annotations

import base64
import threading
from dataclasses import dataclass, field
from typing import Union

from azure.core.credentials import AzureKeyCredential, AzureNamedKeyCredential


@dataclass(frozen=True)
class BasicCredential:
    """Username/password pair sent as HTTP basic authentication."""

    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.username, str) or not self.username:
            raise ValueError("username must be a non-empty string")
        if not isinstance(self.password, str):
            raise ValueError("password must be a string")

    def auth_header(self) -> str:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"


@dataclass(frozen=True)
class BearerCredential:
    """Bearer token sent in the ``Authorization`` header."""

    token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not self.token.strip():
            raise ValueError("token must be a non-empty string")

    def auth_header(self) -> str:
        return f"Bearer {self.token}"


Credential = Union[BasicCredential, BearerCredential]
CredentialLike = Union[BasicCredential, BearerCredential, AzureNamedKeyCredential, AzureKeyCredential]


def _to_snapshot(credential: CredentialLike) -> Credential:
    if isinstance(credential, (BasicCredential, BearerCredential)):
        return credential
    if isinstance(credential, AzureNamedKeyCredential):
        name, key = credential.named_key
        return BasicCredential(name, key)
    if isinstance(credential, AzureKeyCredential):
        return BearerCredential(credential.key)
    raise TypeError(
        "credential must be BasicCredential, BearerCredential, "
        "azure.core.credentials.AzureNamedKeyCredential or AzureKeyCredential."
    )


class CredentialProvider:
    """
    Process-wide authentication state for a client.

    Azure key credentials are converted to a snapshot when passed in; later
    calls to their own ``update()`` are not observed. Use :meth:`rotate`.

    :param credential: Initial credential.
    :type credential: BasicCredential | BearerCredential |
        ~azure.core.credentials.AzureNamedKeyCredential | ~azure.core.credentials.AzureKeyCredential
    :raises TypeError: If ``credential`` is not one of the supported types.
    """

    def __init__(self, credential: CredentialLike) -> None:
        self._snapshot: Credential = _to_snapshot(credential)
        self._rotate_lock = threading.Lock()

    @property
    def credential(self) -> Credential:
        return self._snapshot

    def current_auth_header(self) -> str:
        """Return the ``Authorization`` header value for the current snapshot."""
        return self._snapshot.auth_header()

    def rotate(self, credential: CredentialLike) -> None:
        """
        Replace the active credential.

        Calls that already captured the previous header finish with it; calls
        issued afterwards use the new one.
        """
        snapshot = _to_snapshot(credential)
        with self._rotate_lock:
            self._snapshot = snapshot
