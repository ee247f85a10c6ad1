# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the AvaTax REST v2 service.

Service environments, wire envelope keys, header names and telemetry
attribute names shared by the dispatch core.
"""

# Service environments
SANDBOX_URL = "https://sandbox-rest.avatax.com"
PRODUCTION_URL = "https://rest.avatax.com"

ENVIRONMENTS = {
    "sandbox": SANDBOX_URL,
    "production": PRODUCTION_URL,
}

API_VERSION = "v2"
SDK_NAME = "PythonSdk"

# FetchResult envelope keys
ENVELOPE_VALUE = "value"
ENVELOPE_RECORD_COUNT = "@recordsetCount"
ENVELOPE_NEXT_LINK = "@nextLink"
ENVELOPE_NEXT_LINK_ALT = "nextLink"

# Header names
HEADER_AUTHORIZATION = "Authorization"
HEADER_CLIENT_ID = "X-Avalara-Client"
HEADER_RETRY_AFTER = "Retry-After"

# Truncation applied to raw bodies carried on error values
MAX_BODY_EXCERPT = 500

# OpenTelemetry semantic convention attributes
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_AVATAX_ENDPOINT = "avatax.endpoint"
OTEL_ATTR_AVATAX_REQUEST_ID = "avatax.client_request_id"
OTEL_ATTR_AVATAX_ATTEMPTS = "avatax.attempts"
