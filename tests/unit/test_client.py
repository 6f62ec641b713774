# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from unittest.mock import MagicMock

import pytest
import requests

from pocketbase import PocketBase, PocketBaseConfig
from pocketbase.core._error_codes import UNREACHABLE_CONNECT, UNREACHABLE_OTHER, UNREACHABLE_TIMEOUT
from pocketbase.core.errors import UnreachableError
from pocketbase.operations.collection import Collection


class TestConstruction:
    def test_trailing_slashes_trimmed(self):
        pb = PocketBase("http://127.0.0.1:8090///")
        assert pb.base_url == "http://127.0.0.1:8090"

    def test_https_accepted(self):
        pb = PocketBase("https://pb.example.com/")
        assert pb.base_url == "https://pb.example.com"

    @pytest.mark.parametrize("url", ["", "127.0.0.1:8090", "ftp://pb.example.com", "localhost"])
    def test_invalid_scheme_rejected(self, url):
        with pytest.raises(ValueError, match="http:// or https://"):
            PocketBase(url)

    def test_explicit_config_used(self, base_url):
        config = PocketBaseConfig(http_timeout=12.0)
        pb = PocketBase(base_url, config=config)
        assert pb.config is config
        assert pb._get_http().timeout == 12.0
        assert pb._get_http().connect_timeout == 10.0

    def test_starts_anonymous(self, base_url):
        pb = PocketBase(base_url)
        assert pb.auth_store is None
        assert pb.token is None
        assert pb.is_authenticated is False


class TestRepr:
    def test_anonymous(self, base_url):
        assert repr(PocketBase(base_url)) == "PocketBase(base_url='http://127.0.0.1:8090', auth_store=None)"

    def test_token_redacted(self, make_client, auth_store):
        client, _ = make_client(auth_store=auth_store)
        text = repr(client)
        assert "***REDACTED***" in text
        assert "user-token" not in text

    def test_auth_store_repr_hides_token(self, auth_store):
        assert "user-token" not in repr(auth_store)


class TestCollectionHandle:
    def test_returns_collection(self, base_url):
        coll = PocketBase(base_url).collection("articles_2024")
        assert isinstance(coll, Collection)
        assert coll.name == "articles_2024"

    @pytest.mark.parametrize("name", ["", "bad-name", "bad name", "users\n", "a/b"])
    def test_invalid_name_rejected(self, base_url, name):
        with pytest.raises(ValueError):
            PocketBase(base_url).collection(name)

    def test_record_url(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        client.collection("articles").get_one("abc123").execute()
        method, url, _ = http.calls[0]
        assert method == "GET"
        assert url == "http://127.0.0.1:8090/api/collections/articles/records/abc123"

    def test_record_id_is_quoted(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        client.collection("articles").get_one("a/b c").execute()
        assert http.calls[0][1].endswith("/records/a%2Fb%20c")


class TestHeaders:
    def test_anonymous_request_has_no_authorization(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        client.collection("articles").get_one("abc123").execute()
        headers = http.calls[0][2]["headers"]
        assert headers["Accept"] == "application/json"
        assert "Authorization" not in headers

    def test_session_token_attached(self, make_client, auth_store, record_payload):
        client, http = make_client([(200, record_payload)], auth_store=auth_store)
        client.collection("articles").get_one("abc123").execute()
        assert http.calls[0][2]["headers"]["Authorization"] == "Bearer user-token"

    def test_update_auth_store_requires_auth_store(self, base_url):
        with pytest.raises(TypeError):
            PocketBase(base_url)._update_auth_store({"token": "x"})


class TestTransportFailures:
    def _run(self, make_client, exc):
        client, _ = make_client([exc])
        with pytest.raises(UnreachableError) as ei:
            client.collection("articles").get_one("abc123").execute()
        return ei.value

    def test_timeout(self, make_client):
        err = self._run(make_client, requests.exceptions.ReadTimeout("read timed out"))
        assert err.subcode == UNREACHABLE_TIMEOUT
        assert err.operation == "get_one"
        assert err.is_transient is True
        assert isinstance(err.__cause__, requests.exceptions.ReadTimeout)

    def test_connection_refused(self, make_client):
        err = self._run(make_client, requests.exceptions.ConnectionError("refused"))
        assert err.subcode == UNREACHABLE_CONNECT

    def test_other_request_exception(self, make_client):
        err = self._run(make_client, requests.exceptions.TooManyRedirects("loop"))
        assert err.subcode == UNREACHABLE_OTHER
        assert "loop" in err.message


class TestCallerSession:
    def test_caller_session_used_and_left_open(self, base_url):
        session = MagicMock(spec=requests.Session)
        pb = PocketBase(base_url, session=session)
        assert pb._get_http()._session is session

        pb.close()
        session.close.assert_not_called()

    def test_context_manager_keeps_caller_session(self, base_url):
        session = MagicMock(spec=requests.Session)
        with PocketBase(base_url, session=session) as pb:
            assert pb._session is session
        session.close.assert_not_called()
        assert pb._session is session
