# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Route parameter interpolation for endpoint path templates."""

from __future__ import annotations

import re
from typing import Any, Mapping, Tuple
from urllib.parse import quote

from ..core._error_codes import (
    PARAMETER_EMPTY,
    PARAMETER_MISSING,
    PARAMETER_RESERVED_SEGMENT,
    PARAMETER_UNENCODABLE,
    PARAMETER_UNSUPPORTED_TYPE,
)
from ..core.errors import InvalidParameterError, MissingParameterError

_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def placeholders(template: str) -> Tuple[str, ...]:
    """Return placeholder names in the order they appear in ``template``."""
    seen = []
    for name in _PLACEHOLDER_RE.findall(template):
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def _encode_segment(name: str, value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidParameterError(
            f"Route parameter '{name}' must be a string or number, got {type(value).__name__}",
            parameter=name,
            subcode=PARAMETER_UNSUPPORTED_TYPE,
        )
    text = str(value)
    if not text:
        raise InvalidParameterError(
            f"Route parameter '{name}' must not be empty", parameter=name, subcode=PARAMETER_EMPTY
        )
    if text in (".", ".."):
        raise InvalidParameterError(
            f"Route parameter '{name}' cannot be '{text}'", parameter=name, subcode=PARAMETER_RESERVED_SEGMENT
        )
    try:
        return quote(text, safe="")
    except UnicodeEncodeError as exc:
        raise InvalidParameterError(
            f"Route parameter '{name}' cannot be encoded: {exc.reason}",
            parameter=name,
            subcode=PARAMETER_UNENCODABLE,
        ) from exc


def build_path(template: str, params: Mapping[str, Any]) -> str:
    """
    Substitute every ``{name}`` placeholder in ``template`` with its percent-encoded value.

    :param template: Path template, e.g. ``/api/v2/companies/{companyId}/taxrules/{id}``.
    :type template: :class:`str`
    :param params: Placeholder name to value. Names the template does not use are ignored.
    :type params: :class:`~typing.Mapping`
    :return: The literal path.
    :rtype: :class:`str`
    :raises MissingParameterError: If a placeholder has no value (absent or ``None``).
    :raises InvalidParameterError: If a value cannot form a single path segment.

    Example::

        build_path("/api/v2/companies/{companyId}/taxrules/{id}", {"companyId": 123, "id": 456})
        # '/api/v2/companies/123/taxrules/456'
    """

    def _substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        value = params.get(name)
        if value is None:
            raise MissingParameterError(
                f"Missing value for route parameter '{name}' in '{template}'",
                parameter=name,
                subcode=PARAMETER_MISSING,
            )
        return _encode_segment(name, value)

    return _PLACEHOLDER_RE.sub(_substitute, template)
