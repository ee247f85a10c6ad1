# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request dispatch core: path and query encoding, dispatching, decoding and pagination.

Modules here are internal; the client and operation namespaces are the public surface.
"""

__all__ = []
