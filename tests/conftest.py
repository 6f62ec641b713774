# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for PocketBase client tests.

Requests never leave the process: ``make_client`` swaps the client's HTTP
transport for :class:`DummyHTTP`, which replays canned responses and records
every call.
"""

import json

import pytest

from pocketbase import PocketBase, PocketBaseConfig
from pocketbase.models.auth import AuthStore


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code, body=None, reason=None, headers=None):
        self.status_code = status_code
        self.reason = reason
        self.headers = headers or {}
        self._body = body
        if body is None:
            self.text = ""
        elif isinstance(body, (dict, list)):
            self.text = json.dumps(body)
        else:
            self.text = str(body)
        self.content = self.text.encode("utf-8")

    def json(self):
        if isinstance(self._body, (dict, list)):
            return self._body
        raise ValueError("non-json")


class DummyHTTP:
    """
    Replays responses in order.

    Each entry is a :class:`FakeResponse`, a ``(status, body)`` tuple, or an
    exception instance to raise from the transport.
    """

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def _request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError("No more responses")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, FakeResponse):
            return item
        status, body = item
        return FakeResponse(status, body)


@pytest.fixture
def fake_response():
    """The :class:`FakeResponse` class, for tests building responses directly."""
    return FakeResponse


@pytest.fixture
def dummy_http():
    """The :class:`DummyHTTP` class, for clients built outside ``make_client``."""
    return DummyHTTP


@pytest.fixture
def base_url():
    """Standard test server URL."""
    return "http://127.0.0.1:8090"


@pytest.fixture
def test_config():
    """Test configuration with short timeouts."""
    return PocketBaseConfig(http_timeout=5.0, http_connect_timeout=1.0)


@pytest.fixture
def auth_payload():
    """Body of a successful auth-with-password response."""
    return {
        "token": "user-token",
        "record": {
            "id": "u1a2b3c4d5e6f7g",
            "collectionId": "_pb_users_auth_",
            "collectionName": "users",
            "created": "2024-01-01 10:00:00.000Z",
            "updated": "2024-01-02 10:00:00.000Z",
            "email": "test@example.com",
            "emailVisibility": False,
            "verified": True,
            "name": "Test User",
        },
    }


@pytest.fixture
def auth_store(auth_payload):
    return AuthStore.from_dict(auth_payload)


@pytest.fixture
def record_payload():
    """A record as returned by create, update and get-one."""
    return {
        "id": "r1a2b3c4d5e6f7g",
        "collectionId": "pbc_3142635823",
        "collectionName": "articles",
        "created": "2024-03-01 08:00:00.000Z",
        "updated": "2024-03-01 08:00:00.000Z",
        "title": "Hello",
        "published": False,
    }


@pytest.fixture
def list_body():
    """Factory for a list envelope; totals default to skipped (-1)."""

    def _make(items, page=1, per_page=30, total_items=-1, total_pages=-1):
        return {
            "page": page,
            "perPage": per_page,
            "totalItems": total_items,
            "totalPages": total_pages,
            "items": list(items),
        }

    return _make


@pytest.fixture
def make_client(base_url, test_config):
    """
    Factory returning ``(client, http)`` where ``http`` is the :class:`DummyHTTP`
    answering the client's requests.
    """

    def _make(responses=(), auth_store=None):
        client = PocketBase(base_url, config=test_config)
        http = DummyHTTP(responses)
        client._http = http
        if auth_store is not None:
            client._update_auth_store(auth_store)
        return client, http

    return _make
