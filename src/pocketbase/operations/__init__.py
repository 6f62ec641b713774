# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation classes for the PocketBase client.

- Collection: entry point returned by ``PocketBase.collection()``
- GetOneBuilder, GetListBuilder, GetFirstListItemBuilder, GetFullListBuilder: record reads
- ImpersonateBuilder: superuser impersonation
"""

__all__ = []
