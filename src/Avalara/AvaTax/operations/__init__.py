# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the AvaTax SDK.

Each namespace exposes the endpoints of one resource from a declarative table:
- AccountOperations: account endpoints
- TaxRuleOperations: tax rule endpoints
- UserOperations: user endpoints
"""

__all__ = []
