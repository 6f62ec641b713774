# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Collection handle: entry point for every record and auth operation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import quote

from ..core._error_codes import VALIDATION_EMPTY_RECORD_ID
from ..core._status import DELETE_ERRORS, WRITE_ERRORS, _decode, _parse_field_errors, _raise_for_status, _StatusPolicy
from ..core.errors import BadRequestError
from ..models.auth import AuthStore
from ..models.record import RecordMeta, RecordModel, encode_record
from . import auth as _auth
from .auth import ImpersonateBuilder
from .records import GetFirstListItemBuilder, GetFullListBuilder, GetListBuilder, GetOneBuilder

if TYPE_CHECKING:
    from ..client import PocketBase

_COLLECTION_NAME_RE = re.compile(r"\w+")

_CREATE = _StatusPolicy("create", WRITE_ERRORS, success=frozenset({200}), bad_request=_parse_field_errors)
_UPDATE = _StatusPolicy("update", WRITE_ERRORS, success=frozenset({200}), bad_request=_parse_field_errors)
_DELETE = _StatusPolicy("delete", DELETE_ERRORS, success=frozenset({200, 204}))


class Collection:
    """
    A named collection on the server, bound to the client that created it.

    Obtained from :meth:`~pocketbase.client.PocketBase.collection`; holds no
    state besides the client and the name.

    Example:
        Record operations::

            articles = pb.collection("articles")

            meta = articles.create({"title": "Hello", "published": False})
            articles.update(meta.id, {"published": True})
            article = articles.get_one(meta.id).expand("author").execute()
            articles.delete(meta.id)

        Authentication::

            pb.collection("users").auth_with_password("test@example.com", "secret")
    """

    def __init__(self, client: "PocketBase", name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("Collection name cannot be empty")
        if not _COLLECTION_NAME_RE.fullmatch(name):
            raise ValueError(
                "Collection name contains invalid characters. "
                "Only alphanumeric characters and underscores are allowed"
            )
        self.client = client
        self.name = name

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r})"

    def _url(self, *parts: str) -> str:
        return self.client._collection_url(self.name, *(quote(part, safe="") for part in parts))

    def _records_url(self, record_id: Optional[str] = None) -> str:
        if record_id is None:
            return self._url("records")
        return self._url("records", record_id)

    # ------------------------------------------------------------------ read

    def get_one(self, record_id: str, model: Optional[RecordModel] = None) -> GetOneBuilder:
        """
        Build a request for one record by id.

        :param record_id: Record id.
        :type record_id: str
        :param model: Optional model the record is decoded into; plain ``dict`` by default.
        :return: Builder; call ``execute()`` to send.
        :rtype: ~pocketbase.operations.records.GetOneBuilder
        :raises ValueError: If ``record_id`` is empty.
        """
        if not record_id:
            raise ValueError("record_id is required.")
        return GetOneBuilder(self, record_id, model)

    def get_list(self, model: Optional[RecordModel] = None) -> GetListBuilder:
        """
        Build a paginated list request.

        :return: Builder; call ``execute()`` to send.
        :rtype: ~pocketbase.operations.records.GetListBuilder
        """
        return GetListBuilder(self, model)

    def get_first_list_item(self, model: Optional[RecordModel] = None) -> GetFirstListItemBuilder:
        """
        Build a request for the first record matching a filter.

        :rtype: ~pocketbase.operations.records.GetFirstListItemBuilder
        """
        return GetFirstListItemBuilder(self, model)

    def get_full_list(self, model: Optional[RecordModel] = None) -> GetFullListBuilder:
        """
        Build a request walking every page of the collection.

        The batch size defaults to the client's ``full_list_batch_size``.

        :rtype: ~pocketbase.operations.records.GetFullListBuilder
        """
        return GetFullListBuilder(self, model, _batch_size=self.client.config.full_list_batch_size)

    # ----------------------------------------------------------------- write

    def create(self, record: Any) -> RecordMeta:
        """
        Create a record from a JSON body.

        :param record: Field values, as a mapping or a dataclass instance.
        :return: Id, collection identity and timestamps of the new record.
        :rtype: ~pocketbase.models.record.RecordMeta
        :raises BadRequestError: 400, with ``field_errors`` listing each invalid field.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404, unknown collection.
        :raises ParseError: The 200 body or the 400 body has an unexpected shape.
        :raises UnexpectedResponseError: Any other status.
        :raises UnreachableError: Transport failure.
        """
        response = self.client._post_json(
            _CREATE.operation, self._records_url(), encode_record(record), collection=self.name
        )
        return self._record_meta(response, _CREATE)

    def create_multipart(
        self,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> RecordMeta:
        """
        Create a record from a multipart form, typically to upload files.

        :param data: Plain form fields; values are sent as text.
        :param files: File parts in ``requests`` form, e.g.
            ``{"document": ("report.pdf", fh, "application/pdf")}``.
        :return: Same result and errors as :meth:`create`.
        :rtype: ~pocketbase.models.record.RecordMeta
        :raises ValueError: If both ``data`` and ``files`` are empty.

        Example::

            with open("avatar.png", "rb") as fh:
                pb.collection("profiles").create_multipart(
                    {"name": "Jane"}, {"avatar": ("avatar.png", fh, "image/png")}
                )
        """
        if not data and not files:
            raise ValueError("A multipart create needs at least one field or file.")
        response = self.client._post_form(
            _CREATE.operation, self._records_url(), data, files, collection=self.name
        )
        return self._record_meta(response, _CREATE)

    def update(self, record_id: str, record: Any) -> RecordMeta:
        """
        Patch a record with the given fields.

        :param record_id: Record id.
        :param record: Changed fields, as a mapping or a dataclass instance.
        :return: Id, collection identity and timestamps of the record.
        :rtype: ~pocketbase.models.record.RecordMeta
        :raises BadRequestError: 400, with ``field_errors``.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises ParseError: Unexpected body shape.
        :raises UnexpectedResponseError: Any other status.
        :raises UnreachableError: Transport failure.
        """
        if not record_id:
            raise ValueError("record_id is required.")
        response = self.client._patch_json(
            _UPDATE.operation, self._records_url(record_id), encode_record(record), collection=self.name
        )
        return self._record_meta(response, _UPDATE)

    def delete(self, record_id: str) -> None:
        """
        Delete a record.

        An empty ``record_id`` is rejected before any request is sent.

        :raises BadRequestError: Empty id, or 400 (e.g. the record is still
            referenced by a required relation).
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises UnexpectedResponseError: Any other status.
        :raises UnreachableError: Transport failure.
        """
        if not record_id:
            raise BadRequestError(
                "Failed to delete record: record id cannot be empty.",
                operation=_DELETE.operation,
                subcode=VALIDATION_EMPTY_RECORD_ID,
            )
        response = self.client._delete(_DELETE.operation, self._records_url(record_id), collection=self.name)
        _raise_for_status(response, _DELETE)

    @staticmethod
    def _record_meta(response, policy: _StatusPolicy) -> RecordMeta:
        _raise_for_status(response, policy)
        return _decode(response, policy.operation, RecordMeta.from_dict)

    # ------------------------------------------------------------------ auth

    def auth_with_password(self, identity: str, password: str) -> AuthStore:
        """
        Authenticate a record of this auth collection with identity and password.

        On success the client's session is replaced and later requests carry the new token.

        :param identity: Username or email.
        :param password: Password.
        :return: The new session.
        :rtype: ~pocketbase.models.auth.AuthStore
        :raises InvalidCredentialsError: Wrong identity or password.
        :raises EmptyFieldError: Identity and/or password blank; see ``identity`` / ``password`` flags.
        :raises IdentityMustBeEmailError: The collection only accepts an email identity.
        :raises ParseError: Unexpected success body.
        :raises UnexpectedResponseError: Any non-2xx, non-400 status.
        :raises UnreachableError: Transport failure.
        """
        return _auth.auth_with_password(self, identity, password)

    def auth_refresh(self) -> AuthStore:
        """
        Refresh the current session's token.

        The session is replaced on success.

        :rtype: ~pocketbase.models.auth.AuthStore
        :raises UnauthorizedError: 401, missing or invalid token.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        """
        return _auth.auth_refresh(self)

    def auth_refresh_for_user(self, user_token: str) -> AuthStore:
        """
        Refresh somebody else's token.

        The request carries ``user_token`` instead of the client's own token,
        and the client's session is not changed.

        :param user_token: Token to refresh.
        :return: A fresh session for the token's owner.
        :rtype: ~pocketbase.models.auth.AuthStore
        """
        return _auth.auth_refresh_for_user(self, user_token)

    def impersonate(self, user_id: str) -> ImpersonateBuilder:
        """
        Build an impersonation request for ``user_id`` (superusers only).

        :rtype: ~pocketbase.operations.auth.ImpersonateBuilder
        """
        if not user_id:
            raise ValueError("user_id is required.")
        return ImpersonateBuilder(self, user_id)

    def request_verification(self, email: str) -> None:
        """
        Send the account verification email to ``email``.

        :raises BadRequestError: 400.
        :raises UnauthorizedError: 401.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises UnexpectedResponseError: Any status other than 204.
        """
        _auth.request_verification(self, email)


__all__ = ["Collection"]
