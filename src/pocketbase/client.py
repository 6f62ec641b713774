# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import requests

from .common.constants import COLLECTIONS_PATH
from .core._error_codes import UNREACHABLE_CONNECT, UNREACHABLE_OTHER, UNREACHABLE_TIMEOUT
from .core._http import _HttpClient
from .core.config import PocketBaseConfig
from .core.errors import UnreachableError
from .core.telemetry import create_telemetry_manager
from .models.auth import AuthStore
from .operations.collection import Collection

logger = logging.getLogger(__name__)

# Sentinel meaning "attach the token of the current session, if any"
_SESSION_TOKEN = object()

QueryParams = List[Tuple[str, str]]


class PocketBase:
    """
    Client for a PocketBase server.

    The client holds the server URL, the current authenticated session
    (:class:`~pocketbase.models.auth.AuthStore`) and the HTTP transport. All
    record and auth operations are reached through :meth:`collection`.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager pools connections and releases
        them on exit::

            with PocketBase("http://127.0.0.1:8090") as pb:
                pb.collection("users").auth_with_password("test@example.com", "secret")
                articles = pb.collection("articles").get_full_list().execute()

    **Without Context Manager**:
        Each request uses a standalone connection unless a ``session`` is passed.
        Call ``close()`` when done::

            pb = PocketBase("http://127.0.0.1:8090")
            try:
                article = pb.collection("articles").get_one("abc123").execute()
            finally:
                pb.close()

    Authentication calls replace the session in place, so one client instance
    must not be shared by concurrent callers that authenticate differently.
    Use separate clients instead; :meth:`~pocketbase.operations.collection.Collection.impersonate`
    already returns one.

    :param base_url: Server URL, for example ``"http://127.0.0.1:8090"``.
        Trailing slashes are removed.
    :type base_url: :class:`str`
    :param config: Optional timeouts and telemetry configuration. Defaults to
        :meth:`~pocketbase.core.config.PocketBaseConfig.from_env`.
    :type config: ~pocketbase.core.config.PocketBaseConfig or None
    :param session: Optional caller-owned ``requests.Session``. The client uses
        it for every request and never closes it.
    :type session: :class:`requests.Session` or None

    :raises ValueError: If ``base_url`` does not start with ``http://`` or ``https://``.
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[PocketBaseConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        trimmed = (base_url or "").strip().rstrip("/")
        if not trimmed.startswith(("http://", "https://")):
            raise ValueError("Invalid base_url: must start with http:// or https://")
        self._base_url = trimmed
        self._config = config or PocketBaseConfig.from_env()
        self._session: Optional[requests.Session] = session
        self._owns_session: bool = False
        self._http: Optional[_HttpClient] = None
        self._telemetry = create_telemetry_manager(self._config.telemetry)
        self._auth_store: Optional[AuthStore] = None
        self._auth_lock = threading.Lock()

    def __repr__(self) -> str:
        auth = "***REDACTED***" if self._auth_store is not None else None
        return f"PocketBase(base_url={self._base_url!r}, auth_store={auth!r})"

    def __enter__(self) -> "PocketBase":
        """
        Enter the context manager, creating a pooled HTTP session if none exists.

        :return: The client instance.
        :rtype: PocketBase
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            self._http = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Release the HTTP session created by the context manager.

        A session passed in by the caller is left open. Safe to call multiple
        times; the authenticated session is kept.
        """
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False
        self._http = None

    # ---------------------------------------------------------------- session

    @property
    def base_url(self) -> str:
        """Server URL without trailing slash."""
        return self._base_url

    @property
    def config(self) -> PocketBaseConfig:
        return self._config

    @property
    def auth_store(self) -> Optional[AuthStore]:
        """The current authenticated session, or ``None`` when anonymous."""
        with self._auth_lock:
            return self._auth_store

    @property
    def token(self) -> Optional[str]:
        """Bearer token of the current session, or ``None`` when anonymous."""
        store = self.auth_store
        return store.token if store is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self.auth_store is not None

    def _update_auth_store(self, auth_store: AuthStore) -> None:
        """Replace the whole session. The only writer of ``_auth_store``."""
        if not isinstance(auth_store, AuthStore):
            raise TypeError("auth_store must be an AuthStore")
        with self._auth_lock:
            self._auth_store = auth_store
        logger.debug(
            "Session replaced for record %s in collection %s",
            auth_store.record.id,
            auth_store.record.collection_name,
        )

    # ------------------------------------------------------------- collection

    def collection(self, name: str) -> Collection:
        """
        Return a handle on the named collection.

        :param name: Collection name; non-empty, letters, digits and underscores only.
        :type name: :class:`str`
        :return: Collection handle exposing record and auth operations.
        :rtype: ~pocketbase.operations.collection.Collection
        :raises ValueError: If ``name`` is empty or contains other characters.

        Example::

            pb.collection("articles").get_list().filter("published = true").execute()
        """
        return Collection(self, name)

    def _collection_url(self, name: str, *parts: str) -> str:
        return "/".join([f"{self._base_url}{COLLECTIONS_PATH}", name, *parts])

    # -------------------------------------------------------------- transport

    def _get_http(self) -> _HttpClient:
        if self._http is None:
            self._http = _HttpClient(
                timeout=self._config.http_timeout,
                connect_timeout=self._config.http_connect_timeout,
                session=self._session,
            )
        return self._http

    def _headers(self, token: Any = _SESSION_TOKEN) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token is _SESSION_TOKEN:
            token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        collection: Optional[str] = None,
        token: Any = _SESSION_TOKEN,
        **kwargs: Any,
    ) -> requests.Response:
        """
        Send one request and return the raw response, whatever its status.

        :param operation: Operation name used for telemetry and raised errors.
        :param token: Explicit bearer token; by default the current session's token.
        :raises UnreachableError: On any transport failure.
        """
        headers = self._headers(token)
        headers.update(kwargs.pop("headers", None) or {})
        logger.debug("%s %s %s", operation, method, url)
        with self._telemetry.trace_request(operation, method, url, collection) as ctx:
            try:
                response = self._get_http()._request(method, url, headers=headers, **kwargs)
            except requests.exceptions.Timeout as exc:
                raise UnreachableError(
                    f"Request timed out: {exc}", operation=operation, subcode=UNREACHABLE_TIMEOUT
                ) from exc
            except requests.exceptions.ConnectionError as exc:
                raise UnreachableError(
                    f"Failed to connect to server: {exc}", operation=operation, subcode=UNREACHABLE_CONNECT
                ) from exc
            except requests.exceptions.RequestException as exc:
                raise UnreachableError(str(exc), operation=operation, subcode=UNREACHABLE_OTHER) from exc
            content = getattr(response, "content", None)
            self._telemetry.record_response(ctx, response.status_code, len(content) if content else None)
        return response

    def _get(
        self, operation: str, url: str, params: Optional[QueryParams] = None, **kwargs: Any
    ) -> requests.Response:
        return self._request(operation, "GET", url, params=params or None, **kwargs)

    def _post(self, operation: str, url: str, **kwargs: Any) -> requests.Response:
        return self._request(operation, "POST", url, **kwargs)

    def _post_json(self, operation: str, url: str, body: Any, **kwargs: Any) -> requests.Response:
        return self._request(operation, "POST", url, json=body, **kwargs)

    def _patch_json(self, operation: str, url: str, body: Any, **kwargs: Any) -> requests.Response:
        return self._request(operation, "PATCH", url, json=body, **kwargs)

    def _post_form(
        self,
        operation: str,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        # Text fields ride along as file-less parts so the body is always multipart
        parts: Dict[str, Any] = {name: (None, _form_value(value)) for name, value in (data or {}).items()}
        parts.update(files or {})
        return self._request(operation, "POST", url, files=parts, **kwargs)

    def _delete(self, operation: str, url: str, **kwargs: Any) -> requests.Response:
        return self._request(operation, "DELETE", url, **kwargs)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["PocketBase"]
