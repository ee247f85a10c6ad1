# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Immutable description of one logical AvaTax call."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..core._error_codes import PARAMETER_UNSUPPORTED_TYPE
from ..core.errors import InvalidParameterError
from ._paths import build_path
from ._query import QueryOptions, encode_query

VERBS = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True)
class Request:
    """
    Request descriptor consumed by :class:`~Avalara.AvaTax.data._dispatcher.Dispatcher`.

    :param verb: One of ``GET``, ``POST``, ``PUT``, ``DELETE`` (case-insensitive on input).
    :param path: Path template with ``{name}`` placeholders.
    :param route_params: Placeholder values; stored as a read-only mapping.
    :param options: Query options (a mapping is converted).
    :param body: JSON-serializable payload, or ``None`` for no body.
    :param endpoint: Endpoint name, used for telemetry only.
    :param literal: ``path`` is a ready-made target (such as a continuation link)
        and is sent as-is, without placeholder substitution.
    """

    verb: str
    path: str
    route_params: Mapping[str, Any] = field(default_factory=dict)
    options: QueryOptions = field(default_factory=QueryOptions)
    body: Optional[Any] = None
    endpoint: Optional[str] = None
    literal: bool = False

    def __post_init__(self) -> None:
        verb = (self.verb or "").upper()
        if verb not in VERBS:
            raise InvalidParameterError(
                f"Unsupported HTTP verb '{self.verb}'", parameter="verb", subcode=PARAMETER_UNSUPPORTED_TYPE
            )
        object.__setattr__(self, "verb", verb)
        object.__setattr__(self, "route_params", MappingProxyType(dict(self.route_params or {})))
        if not isinstance(self.options, QueryOptions):
            object.__setattr__(self, "options", QueryOptions.from_mapping(self.options))

    def target(self) -> str:
        """Return the request target: the built path plus encoded query string."""
        path = self.path if self.literal else build_path(self.path, self.route_params)
        query = encode_query(self.options)
        return f"{path}?{query}" if query else path
