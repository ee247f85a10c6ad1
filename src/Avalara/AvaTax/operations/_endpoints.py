# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Declarative endpoint descriptions and the namespaces that expose them.

Each AvaTax endpoint is a row of data: verb, path template, parameter order,
allowed query options and expected result shape. Operation namespaces turn
rows into callables that delegate to
:meth:`~Avalara.AvaTax.client.AvaTaxClient.invoke`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from ..core._error_codes import PARAMETER_MISSING, PARAMETER_UNEXPECTED
from ..core.errors import InvalidParameterError, MissingParameterError
from ..data._decoder import ResultShape
from ..data._paths import placeholders
from ..data._query import OPTION_NAMES, QueryOptions

if TYPE_CHECKING:
    from ..client import AvaTaxClient

# Query options accepted by list and query endpoints
LIST_OPTIONS = ("filter", "include", "top", "skip", "order_by")

_OPTION_ALIASES = {"orderBy": "order_by", "orderby": "order_by"}
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


@dataclass(frozen=True)
class Endpoint:
    """
    One AvaTax endpoint.

    :param name: Method name exposed on the namespace, e.g. ``"get_tax_rule"``.
    :param verb: HTTP verb.
    :param path: Path template with ``{name}`` placeholders.
    :param summary: One-line description, used as the method docstring.
    :param shape: Expected shape of a successful body.
    :param params: Positional order of route parameters; defaults to template order.
    :param options: Query options the endpoint accepts (Python names).
    :param body: Whether the endpoint takes a ``model`` body (bound after route parameters).
    :param model: Optional callable converting each JSON object to a typed value.
    """

    name: str
    verb: str
    path: str
    summary: str = ""
    shape: ResultShape = ResultShape.MODEL
    params: Optional[Tuple[str, ...]] = None
    options: Tuple[str, ...] = ()
    body: bool = False
    model: Optional[Callable[[Any], Any]] = None

    def __post_init__(self) -> None:
        declared = placeholders(self.path)
        if self.params is None:
            object.__setattr__(self, "params", declared)
        elif set(self.params) != set(declared):
            raise ValueError(f"Endpoint '{self.name}': params {self.params} do not match path {self.path}")
        unknown = set(self.options) - set(OPTION_NAMES)
        if unknown:
            raise ValueError(f"Endpoint '{self.name}': unknown query options {sorted(unknown)}")

    @property
    def positional(self) -> Tuple[str, ...]:
        return tuple(self.params) + (("model",) if self.body else ())

    def bind(self, args: Tuple[Any, ...], kwargs: Mapping[str, Any]) -> Tuple[Dict[str, Any], Any, QueryOptions]:
        """
        Split call arguments into route parameters, body and query options.

        Positional arguments bind to route parameters in ``params`` order and
        then to ``model``. Keyword arguments may name route parameters in
        either template (``companyId``) or snake case (``company_id``),
        ``model``, or an allowed query option.

        :raises InvalidParameterError: On surplus, duplicate or unknown arguments.
        :raises MissingParameterError: If a required body is absent.
        """
        positional = self.positional
        if len(args) > len(positional):
            raise InvalidParameterError(
                f"{self.name}() takes {len(positional)} positional arguments but {len(args)} were given",
                subcode=PARAMETER_UNEXPECTED,
            )
        values: Dict[str, Any] = dict(zip(positional, args))
        aliases = {_snake(p): p for p in self.params}
        options: Dict[str, Any] = {}
        for key, value in kwargs.items():
            name = key if key in positional else aliases.get(key)
            if name is not None:
                if name in values:
                    raise InvalidParameterError(
                        f"{self.name}() got multiple values for '{key}'", parameter=key, subcode=PARAMETER_UNEXPECTED
                    )
                values[name] = value
                continue
            option = _OPTION_ALIASES.get(key, key)
            if option in self.options:
                options[option] = value
                continue
            raise InvalidParameterError(
                f"{self.name}() got an unexpected argument '{key}'", parameter=key, subcode=PARAMETER_UNEXPECTED
            )

        body = values.pop("model", None)
        if self.body and body is None:
            raise MissingParameterError(
                f"{self.name}() requires a 'model' body", parameter="model", subcode=PARAMETER_MISSING
            )
        return values, body, QueryOptions.from_mapping(options)


def endpoint_table(*endpoints: Endpoint) -> Dict[str, Endpoint]:
    table: Dict[str, Endpoint] = {}
    for ep in endpoints:
        if ep.name in table:
            raise ValueError(f"Duplicate endpoint name '{ep.name}'")
        table[ep.name] = ep
    return table


class _EndpointMethod:
    """Callable bound to one endpoint of one client."""

    def __init__(self, client: "AvaTaxClient", endpoint: Endpoint) -> None:
        self._client = client
        self.endpoint = endpoint
        self.__name__ = endpoint.name
        self.__doc__ = endpoint.summary or None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._client.invoke(self.endpoint, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<endpoint {self.endpoint.name}: {self.endpoint.verb} {self.endpoint.path}>"


class EndpointOperations:
    """
    Base class for operation namespaces backed by an endpoint table.

    Subclasses set ``endpoints``; each row becomes an attribute callable with
    the endpoint's positional parameters, ``model`` and query options::

        client.tax_rules.get_tax_rule(123, 456)
        client.tax_rules.list_tax_rules(company_id=123, filter="isActive eq true", top=50)

    Every call also accepts ``cancel=`` and ``deadline=`` (see
    :meth:`~Avalara.AvaTax.client.AvaTaxClient.invoke`).
    """

    endpoints: Mapping[str, Endpoint] = {}

    def __init__(self, client: "AvaTaxClient") -> None:
        self._client = client

    def __getattr__(self, name: str) -> _EndpointMethod:
        endpoint = type(self).endpoints.get(name)
        if endpoint is None:
            raise AttributeError(f"'{type(self).__name__}' has no endpoint '{name}'")
        return _EndpointMethod(self._client, endpoint)

    def __dir__(self) -> Iterable[str]:
        return sorted(set(super().__dir__()) | set(type(self).endpoints))
