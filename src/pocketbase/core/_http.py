# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with fixed timeouts and optional session support.

This module provides :class:`~pocketbase.core._http._HttpClient`, a thin wrapper
around the requests library. Connect and read timeouts are configured once at
construction; requests are never retried, and transport failures propagate as
:class:`requests.exceptions.RequestException` for the caller to classify.
"""

from __future__ import annotations

from typing import Any, Optional

import requests


class _HttpClient:
    """
    HTTP client with construction-time timeouts and optional connection pooling.

    :param timeout: Read timeout in seconds applied to every request.
    :type timeout: :class:`float`
    :param connect_timeout: Connect timeout in seconds applied to every request.
    :type connect_timeout: :class:`float`
    :param session: Optional requests.Session for connection pooling. If provided,
        all requests use this session for efficient connection reuse.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute one HTTP request.

        :param method: HTTP method (GET, POST, PATCH, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, params, json, files.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: On any transport failure.
        """
        kwargs.setdefault("timeout", (self.connect_timeout, self.timeout))
        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

