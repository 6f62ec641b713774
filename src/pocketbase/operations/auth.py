# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Auth collection operations: password login, token refresh, impersonation, verification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

import requests

from ..core._error_codes import FIELD_VALIDATION_IS_EMAIL, FIELD_VALIDATION_REQUIRED
from ..core._status import PRIVILEGED_ERRORS, SESSION_ERRORS, _decode, _raise_for_status, _StatusPolicy
from ..core.errors import (
    EmptyFieldError,
    IdentityMustBeEmailError,
    InvalidCredentialsError,
    PocketBaseError,
)
from ..models.auth import AuthStore

if TYPE_CHECKING:
    from ..client import PocketBase
    from .collection import Collection


def _field_code(data: Dict[str, Any], name: str) -> Optional[str]:
    entry = data.get(name)
    if isinstance(entry, dict) and isinstance(entry.get("code"), str):
        return entry["code"]
    return None


def _credentials_error(response: requests.Response, operation: str) -> PocketBaseError:
    """
    Map a 400 from ``auth-with-password`` onto the matching authentication error.

    An empty ``data`` object means the credentials were wrong; field entries
    tell a malformed identity apart from blank fields.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {"code": 400, "message": "Unknown error", "data": None}

    data = body.get("data")
    details = {"server_message": body.get("message")}
    if not isinstance(data, dict) or not data:
        return InvalidCredentialsError(operation=operation, details=details)

    details["data"] = data
    identity_code = _field_code(data, "identity")
    if identity_code == FIELD_VALIDATION_IS_EMAIL:
        return IdentityMustBeEmailError(operation=operation, details=details)
    if identity_code == FIELD_VALIDATION_REQUIRED:
        return EmptyFieldError(identity=True, password="password" in data, operation=operation, details=details)
    if identity_code is None:
        return EmptyFieldError(identity=False, password="password" in data, operation=operation, details=details)
    return InvalidCredentialsError(operation=operation, details=details)


_AUTH_WITH_PASSWORD = _StatusPolicy("auth_with_password", bad_request=_credentials_error)
_AUTH_REFRESH = _StatusPolicy("auth_refresh", SESSION_ERRORS, success=frozenset({200}))
_AUTH_REFRESH_FOR_USER = _StatusPolicy("auth_refresh_for_user", SESSION_ERRORS, success=frozenset({200}))
_IMPERSONATE = _StatusPolicy("impersonate", PRIVILEGED_ERRORS, success=frozenset({200}))
_REQUEST_VERIFICATION = _StatusPolicy("request_verification", PRIVILEGED_ERRORS, success=frozenset({204}))


def auth_with_password(collection: "Collection", identity: str, password: str) -> AuthStore:
    client = collection.client
    url = collection._url("auth-with-password")
    response = client._post_json(
        _AUTH_WITH_PASSWORD.operation,
        url,
        {"identity": identity, "password": password},
        collection=collection.name,
    )
    _raise_for_status(response, _AUTH_WITH_PASSWORD)
    auth_store = _decode(response, _AUTH_WITH_PASSWORD.operation, AuthStore.from_dict)
    client._update_auth_store(auth_store)
    return auth_store


def auth_refresh(collection: "Collection") -> AuthStore:
    client = collection.client
    response = client._post(_AUTH_REFRESH.operation, collection._url("auth-refresh"), collection=collection.name)
    _raise_for_status(response, _AUTH_REFRESH)
    auth_store = _decode(response, _AUTH_REFRESH.operation, AuthStore.from_dict)
    client._update_auth_store(auth_store)
    return auth_store


def auth_refresh_for_user(collection: "Collection", user_token: str) -> AuthStore:
    if not user_token:
        raise ValueError("user_token is required.")
    client = collection.client
    response = client._post(
        _AUTH_REFRESH_FOR_USER.operation,
        collection._url("auth-refresh"),
        collection=collection.name,
        token=user_token,
    )
    _raise_for_status(response, _AUTH_REFRESH_FOR_USER)
    return _decode(response, _AUTH_REFRESH_FOR_USER.operation, AuthStore.from_dict)


def request_verification(collection: "Collection", email: str) -> None:
    client = collection.client
    response = client._post_json(
        _REQUEST_VERIFICATION.operation,
        collection._url("request-verification"),
        {"email": email},
        collection=collection.name,
    )
    _raise_for_status(response, _REQUEST_VERIFICATION)


@dataclass
class ImpersonateBuilder:
    """
    Obtain a session for another user of an auth collection.

    Requires a superuser session. The result is a new client carrying the
    impersonated session; the calling client is left untouched. Impersonation
    tokens cannot be refreshed.

    Example::

        as_user = (pb.collection("users")
                   .impersonate("USER_RECORD_ID")
                   .duration(3600)
                   .execute())
        as_user.collection("articles").get_list().execute()
    """

    collection: "Collection" = field(repr=False)
    user_id: str
    _duration: Optional[int] = None
    _executed: bool = field(default=False, init=False, repr=False)

    def duration(self, seconds: int) -> "ImpersonateBuilder":
        """
        Custom token lifetime in seconds; the collection default applies when unset.

        :return: Self for method chaining.
        """
        if seconds < 0:
            raise ValueError("duration must be >= 0")
        self._duration = seconds
        return self

    def execute(self) -> "PocketBase":
        """
        Send the request.

        :return: A new client authenticated as ``user_id``.
        :rtype: ~pocketbase.client.PocketBase
        :raises BadRequestError: 400.
        :raises UnauthorizedError: 401, the caller has no valid session.
        :raises ForbiddenError: 403, the caller is not a superuser.
        :raises NotFoundError: 404, unknown user id.
        :raises ParseError: The body is not an auth response.
        :raises UnexpectedResponseError: Any other status.
        :raises UnreachableError: Transport failure.
        """
        if self._executed:
            raise RuntimeError("ImpersonateBuilder has already been executed; create a new builder.")
        self._executed = True

        client = self.collection.client
        url = self.collection._url("impersonate", self.user_id)
        if self._duration is not None:
            response = client._post_form(
                _IMPERSONATE.operation, url, {"duration": self._duration}, collection=self.collection.name
            )
        else:
            response = client._post(_IMPERSONATE.operation, url, collection=self.collection.name)
        _raise_for_status(response, _IMPERSONATE)
        auth_store = _decode(response, _IMPERSONATE.operation, AuthStore.from_dict)

        impersonated = type(client)(client.base_url, config=client.config)
        impersonated._update_auth_store(auth_store)
        return impersonated


__all__ = [
    "ImpersonateBuilder",
    "auth_with_password",
    "auth_refresh",
    "auth_refresh_for_user",
    "request_verification",
]
