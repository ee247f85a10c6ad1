# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal helpers for the AvaTax SDK."""

__all__ = []
