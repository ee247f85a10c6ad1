# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
AvaTax REST v2 client for Python.

The public entry point is :class:`~Avalara.AvaTax.client.AvaTaxClient`. Every
endpoint method delegates to a shared dispatch core that builds the URL,
authenticates the request, retries transient failures and decodes the
response into a typed value or a structured error.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
