# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from Avalara.AvaTax.core._error_codes import (
    PARAMETER_EMPTY,
    PARAMETER_MISSING,
    PARAMETER_RESERVED_SEGMENT,
    PARAMETER_UNENCODABLE,
    PARAMETER_UNSUPPORTED_TYPE,
)
from Avalara.AvaTax.core.errors import InvalidParameterError, MissingParameterError
from Avalara.AvaTax.data._paths import build_path, placeholders

TAX_RULE_PATH = "/api/v2/companies/{companyId}/taxrules/{id}"


class TestPlaceholders:
    def test_order_of_appearance(self):
        assert placeholders(TAX_RULE_PATH) == ("companyId", "id")

    def test_no_placeholders(self):
        assert placeholders("/api/v2/taxrules") == ()

    def test_repeated_placeholder_listed_once(self):
        assert placeholders("/a/{id}/b/{id}") == ("id",)


class TestBuildPath:
    def test_substitutes_integers(self):
        assert build_path(TAX_RULE_PATH, {"companyId": 123, "id": 456}) == "/api/v2/companies/123/taxrules/456"

    def test_no_placeholders_returns_template(self):
        assert build_path("/api/v2/accounts", {}) == "/api/v2/accounts"

    def test_extra_params_ignored(self):
        assert build_path("/api/v2/accounts/{id}", {"id": 1, "unused": "x"}) == "/api/v2/accounts/1"

    def test_string_values_are_percent_encoded(self):
        path = build_path("/api/v2/items/{code}", {"code": "A B/C?#%"})
        assert path == "/api/v2/items/A%20B%2FC%3F%23%25"

    def test_slash_never_splits_segment(self):
        path = build_path("/api/v2/accounts/{id}", {"id": "../admin"})
        assert path.count("/") == 4
        assert path.endswith("..%2Fadmin")

    def test_unicode_is_utf8_encoded(self):
        assert build_path("/x/{name}", {"name": "café"}) == "/x/caf%C3%A9"

    def test_missing_param_raises(self):
        with pytest.raises(MissingParameterError) as ei:
            build_path(TAX_RULE_PATH, {"companyId": 123})
        assert ei.value.parameter == "id"
        assert ei.value.subcode == PARAMETER_MISSING
        assert ei.value.code == "missing_parameter"

    def test_none_param_raises_missing(self):
        with pytest.raises(MissingParameterError):
            build_path(TAX_RULE_PATH, {"companyId": None, "id": 1})

    def test_empty_string_raises_invalid(self):
        with pytest.raises(InvalidParameterError) as ei:
            build_path("/api/v2/accounts/{id}", {"id": ""})
        assert ei.value.subcode == PARAMETER_EMPTY

    @pytest.mark.parametrize("value", [".", ".."])
    def test_dot_segments_rejected(self, value):
        with pytest.raises(InvalidParameterError) as ei:
            build_path("/api/v2/accounts/{id}", {"id": value})
        assert ei.value.subcode == PARAMETER_RESERVED_SEGMENT

    @pytest.mark.parametrize("value", [True, [1], {"a": 1}, object()])
    def test_unsupported_types_rejected(self, value):
        with pytest.raises(InvalidParameterError) as ei:
            build_path("/api/v2/accounts/{id}", {"id": value})
        assert ei.value.subcode == PARAMETER_UNSUPPORTED_TYPE
        assert ei.value.details["parameter"] == "id"

    def test_lone_surrogate_rejected(self):
        with pytest.raises(InvalidParameterError) as ei:
            build_path("/api/v2/items/{code}", {"code": "bad\ud800"})
        assert ei.value.subcode == PARAMETER_UNENCODABLE
        assert ei.value.parameter == "code"
        assert isinstance(ei.value.__cause__, UnicodeEncodeError)

    def test_parameter_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            build_path("/api/v2/accounts/{id}", {})
