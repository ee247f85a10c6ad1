# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query options and their canonical query-string encoding.

AvaTax list and query endpoints share five options: ``filter``, ``include``,
``top``, ``skip`` and ``orderBy``. They are always emitted in that order so
that URLs are deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qsl, quote

from ..core._error_codes import (
    PARAMETER_NEGATIVE,
    PARAMETER_UNENCODABLE,
    PARAMETER_UNKNOWN_OPTION,
    PARAMETER_UNSUPPORTED_TYPE,
)
from ..core.errors import InvalidParameterError

# Python field name -> wire key, in emission order
_WIRE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("filter", "filter"),
    ("include", "include"),
    ("top", "top"),
    ("skip", "skip"),
    ("order_by", "orderBy"),
)
_FIELD_BY_KEY = {wire: name for name, wire in _WIRE_KEYS}
_FIELD_BY_KEY.update({name: name for name, _ in _WIRE_KEYS})
_FIELD_BY_KEY["orderby"] = "order_by"

OPTION_NAMES = tuple(name for name, _ in _WIRE_KEYS)

TextOrList = Union[str, Sequence[str], None]


def _join(name: str, value: TextOrList) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, Iterable):
        parts = []
        for item in value:
            if not isinstance(item, str):
                raise InvalidParameterError(
                    f"Query option '{name}' must contain strings, got {type(item).__name__}",
                    parameter=name,
                    subcode=PARAMETER_UNSUPPORTED_TYPE,
                )
            item = item.strip()
            if item:
                parts.append(item)
        return ",".join(parts) or None
    raise InvalidParameterError(
        f"Query option '{name}' must be a string or a list of strings",
        parameter=name,
        subcode=PARAMETER_UNSUPPORTED_TYPE,
    )


def _check_count(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(
            f"Query option '{name}' must be an integer, got {type(value).__name__}",
            parameter=name,
            subcode=PARAMETER_UNSUPPORTED_TYPE,
        )
    if value < 0:
        raise InvalidParameterError(
            f"Query option '{name}' must be non-negative, got {value}",
            parameter=name,
            subcode=PARAMETER_NEGATIVE,
        )
    return value


@dataclass(frozen=True)
class QueryOptions:
    """
    Out-of-path options for list and query endpoints.

    :param filter: Filter predicate, e.g. ``"taxCode eq 'P0000000'"``.
    :type filter: str or None
    :param include: Child objects to expand; a list is comma-joined.
    :type include: str or list[str] or None
    :param top: Maximum number of results in one page.
    :type top: int or None
    :param skip: Number of results to skip before the page starts.
    :type skip: int or None
    :param order_by: Sort clauses in the form ``field [ASC|DESC]``; a list is comma-joined.
        Sent as ``orderBy``.
    :type order_by: str or list[str] or None
    :raises InvalidParameterError: If ``top``/``skip`` are negative or not integers,
        or a list option contains non-strings.

    Empty strings and empty lists are treated as unset.
    """

    filter: Optional[str] = None
    include: Optional[str] = None
    top: Optional[int] = None
    skip: Optional[int] = None
    order_by: Optional[str] = None

    def __post_init__(self) -> None:
        if self.filter is not None and not isinstance(self.filter, str):
            raise InvalidParameterError(
                "Query option 'filter' must be a string", parameter="filter", subcode=PARAMETER_UNSUPPORTED_TYPE
            )
        object.__setattr__(self, "filter", self.filter or None)
        object.__setattr__(self, "include", _join("include", self.include))
        object.__setattr__(self, "order_by", _join("orderBy", self.order_by))
        object.__setattr__(self, "top", _check_count("top", self.top))
        object.__setattr__(self, "skip", _check_count("skip", self.skip))

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "QueryOptions":
        """
        Build options from a mapping keyed by wire or Python names.

        Accepts ``orderBy`` or ``order_by`` and tolerates a leading ``$``
        (``$filter``, ``$top``...).

        :raises InvalidParameterError: On unknown option names or invalid values.
        """
        if not options:
            return cls()
        if isinstance(options, QueryOptions):
            return options
        kwargs = {}
        for key, value in options.items():
            name = _FIELD_BY_KEY.get(str(key).lstrip("$"))
            if name is None:
                raise InvalidParameterError(
                    f"Unknown query option '{key}'", parameter=str(key), subcode=PARAMETER_UNKNOWN_OPTION
                )
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **changes: Any) -> "QueryOptions":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Return the set options keyed by wire name, in emission order."""
        out = {}
        for name, wire in _WIRE_KEYS:
            value = getattr(self, name)
            if value is not None:
                out[wire] = value
        return out

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))


def _encode_pair(key: str, value: Any) -> str:
    try:
        return f"{quote(key, safe='')}={quote(str(value), safe='')}"
    except UnicodeEncodeError as exc:
        raise InvalidParameterError(
            f"Query option '{key}' cannot be encoded: {exc.reason}",
            parameter=key,
            subcode=PARAMETER_UNENCODABLE,
        ) from exc


def encode_query(options: Union[QueryOptions, Mapping[str, Any], None]) -> str:
    """
    Serialize query options into a canonical query string (without ``?``).

    Keys are emitted in the fixed order ``filter, include, top, skip, orderBy``;
    values are percent-encoded with spaces as ``%20``. Unset options are skipped.

    :param options: Options object or mapping accepted by :meth:`QueryOptions.from_mapping`.
    :return: Encoded query string, empty if no option is set.
    :rtype: :class:`str`
    :raises InvalidParameterError: On invalid option names or values.

    Example::

        encode_query({"top": 10, "skip": 20, "filter": "name eq 'X'"})
        # "filter=name%20eq%20%27X%27&top=10&skip=20"
    """
    opts = QueryOptions.from_mapping(options) if not isinstance(options, QueryOptions) else options
    return "&".join(_encode_pair(key, value) for key, value in opts.to_dict().items())


def parse_query(query: str) -> QueryOptions:
    """
    Parse a query string produced by :func:`encode_query` back into options.

    :raises InvalidParameterError: On unknown keys or non-integer ``top``/``skip``.
    """
    raw = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        name = _FIELD_BY_KEY.get(key.lstrip("$"))
        if name in ("top", "skip"):
            try:
                raw[key] = int(value)
            except ValueError as exc:
                raise InvalidParameterError(
                    f"Query option '{key}' must be an integer, got {value!r}",
                    parameter=key,
                    subcode=PARAMETER_UNSUPPORTED_TYPE,
                ) from exc
        else:
            raw[key] = value
    return QueryOptions.from_mapping(raw)
