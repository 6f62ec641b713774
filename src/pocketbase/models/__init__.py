# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the PocketBase client.

- :class:`~pocketbase.models.record.Record`: Generic record with dict-like access.
- :class:`~pocketbase.models.record.RecordList`: One page of a list query.
- :class:`~pocketbase.models.record.RecordMeta`: Metadata returned by create/update.
- :class:`~pocketbase.models.auth.AuthStore`: Authenticated session.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from
    the specific module files.
"""

__all__ = []
