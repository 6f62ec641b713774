# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authenticated session models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class AuthStoreRecord:
    """
    Snapshot of the authenticated record returned with a token.

    :param id: Record id of the authenticated user.
    :param collection_id: Id of the auth collection the user belongs to.
    :param collection_name: Name of that collection, e.g. ``"users"`` or ``"_superusers"``.
    :param created: Creation timestamp as sent by the server.
    :param updated: Last update timestamp as sent by the server.
    :param email: The user's email address.
    :param email_visibility: Whether the email is publicly visible.
    :param verified: Whether the email address has been verified.
    :param data: Complete record object, including custom fields.
    """

    id: str
    collection_id: str
    collection_name: str
    created: str = ""
    updated: str = ""
    email: str = ""
    email_visibility: bool = False
    verified: bool = False
    data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AuthStoreRecord":
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        return cls(
            id=payload["id"],
            collection_id=payload["collectionId"],
            collection_name=payload["collectionName"],
            created=payload.get("created", ""),
            updated=payload.get("updated", ""),
            email=payload.get("email", ""),
            email_visibility=bool(payload.get("emailVisibility", False)),
            verified=bool(payload.get("verified", False)),
            data=dict(payload),
        )


@dataclass(frozen=True)
class AuthStore:
    """
    An authenticated session: bearer token plus the record it belongs to.

    Instances are immutable; a client replaces its whole ``AuthStore`` on
    every successful authentication, refresh, or impersonation.
    """

    record: AuthStoreRecord
    token: str = field(repr=False)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AuthStore":
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        token = payload["token"]
        if not isinstance(token, str) or not token:
            raise ValueError("'token' must be a non-empty string")
        return cls(record=AuthStoreRecord.from_dict(payload["record"]), token=token)


__all__ = ["AuthStore", "AuthStoreRecord"]
