# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for record read builders and record write operations."""

from dataclasses import dataclass

import pytest

from pocketbase.core._error_codes import PARSE_EMPTY_PAGE, VALIDATION_EMPTY_RECORD_ID
from pocketbase.core.errors import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    ParseError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedResponseError,
)
from pocketbase.models.record import RecordList, RecordMeta

RECORDS_URL = "http://127.0.0.1:8090/api/collections/articles/records"


@dataclass
class Article:
    id: str
    title: str


def _items(n, start=0):
    return [{"id": f"rec{i:012d}", "title": f"Article {i}"} for i in range(start, start + n)]


class TestGetOne:
    def test_returns_dict_by_default(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        record = client.collection("articles").get_one("r1a2b3c4d5e6f7g").execute()
        assert record == record_payload
        assert http.calls[0][2]["params"] is None

    def test_expand_and_model(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        article = (
            client.collection("articles")
            .get_one("r1a2b3c4d5e6f7g", model=Article)
            .expand("author,comments")
            .execute()
        )
        assert article == Article(id="r1a2b3c4d5e6f7g", title="Hello")
        assert http.calls[0][2]["params"] == [("expand", "author,comments")]

    @pytest.mark.parametrize(
        "status,error_cls",
        [(403, ForbiddenError), (404, NotFoundError), (429, TooManyRequestsError)],
    )
    def test_error_statuses(self, make_client, status, error_cls):
        client, _ = make_client([(status, {"status": status, "message": "x", "data": {}})])
        with pytest.raises(error_cls) as ei:
            client.collection("articles").get_one("abc").execute()
        assert ei.value.operation == "get_one"

    def test_unexpected_status(self, make_client):
        client, _ = make_client([(500, None)])
        with pytest.raises(UnexpectedResponseError):
            client.collection("articles").get_one("abc").execute()

    def test_model_mismatch_is_parse_error(self, make_client):
        client, _ = make_client([(200, {"id": "abc"})])
        with pytest.raises(ParseError):
            client.collection("articles").get_one("abc", model=Article).execute()

    def test_single_use(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        builder = client.collection("articles").get_one("abc")
        builder.execute()
        with pytest.raises(RuntimeError):
            builder.execute()
        assert len(http.calls) == 1

    def test_empty_id_sends_nothing(self, make_client, list_body, record_payload):
        client, http = make_client([(200, list_body([record_payload]))])
        with pytest.raises(ValueError, match="record_id"):
            client.collection("articles").get_one("")
        assert http.calls == []


class TestGetList:
    def test_no_params_by_default(self, make_client, list_body):
        client, http = make_client([(200, list_body([], total_items=0, total_pages=0))])
        page = client.collection("articles").get_list().execute()
        assert isinstance(page, RecordList)
        assert page.items == []
        method, url, kwargs = http.calls[0]
        assert (method, url) == ("GET", RECORDS_URL)
        assert kwargs["params"] is None

    def test_all_params_in_order(self, make_client, list_body):
        client, http = make_client([(200, list_body(_items(2), page=2, per_page=50))])
        page = (
            client.collection("articles")
            .get_list()
            .page(2)
            .per_page(50)
            .sort("-created")
            .filter("published = true")
            .expand("author")
            .skip_total()
            .execute()
        )
        assert http.calls[0][2]["params"] == [
            ("page", "2"),
            ("perPage", "50"),
            ("sort", "-created"),
            ("filter", "published = true"),
            ("expand", "author"),
            ("skipTotal", "true"),
        ]
        assert page.page == 2
        assert page.total_skipped is True
        assert len(page) == 2

    def test_totals_kept(self, make_client, list_body):
        client, _ = make_client([(200, list_body(_items(3), per_page=3, total_items=9, total_pages=3))])
        page = client.collection("articles").get_list(model=Article).per_page(3).execute()
        assert page.total_items == 9
        assert page.total_pages == 3
        assert [a.title for a in page] == ["Article 0", "Article 1", "Article 2"]

    @pytest.mark.parametrize("method", ["page", "per_page"])
    def test_paging_must_be_positive(self, make_client, method):
        client, _ = make_client()
        with pytest.raises(ValueError):
            getattr(client.collection("articles").get_list(), method)(0)

    def test_malformed_envelope(self, make_client):
        client, _ = make_client([(200, {"items": []})])
        with pytest.raises(ParseError) as ei:
            client.collection("articles").get_list().execute()
        assert ei.value.operation == "get_list"


class TestGetFirstListItem:
    def test_forces_single_item_page(self, make_client, list_body, record_payload):
        client, http = make_client([(200, list_body([record_payload], per_page=1))])
        record = (
            client.collection("articles")
            .get_first_list_item()
            .filter('title = "Hello"')
            .sort("-created")
            .execute()
        )
        assert record == record_payload
        assert http.calls[0][2]["params"] == [
            ("page", "1"),
            ("perPage", "1"),
            ("skipTotal", "true"),
            ("sort", "-created"),
            ("filter", 'title = "Hello"'),
        ]

    def test_no_match_is_parse_error(self, make_client, list_body):
        client, _ = make_client([(200, list_body([], per_page=1))])
        with pytest.raises(ParseError) as ei:
            client.collection("articles").get_first_list_item().filter("id = ''").execute()
        assert ei.value.subcode == PARSE_EMPTY_PAGE
        assert "No record found." in ei.value.message

    def test_rate_limited(self, make_client):
        client, _ = make_client([(429, None)])
        with pytest.raises(TooManyRequestsError):
            client.collection("articles").get_first_list_item().execute()


class TestGetFullList:
    def _pages(self, list_body, total, batch):
        pages = []
        start = 0
        while True:
            n = min(batch, total - start)
            pages.append((200, list_body(_items(n, start), page=len(pages) + 1, per_page=batch)))
            start += n
            if n < batch:
                return pages

    @pytest.mark.parametrize(
        "total,batch,requests_expected",
        [
            (5, 2, 3),
            (4, 2, 3),
            (0, 2, 1),
            (1, 500, 1),
        ],
    )
    def test_request_count(self, make_client, list_body, total, batch, requests_expected):
        pages = self._pages(list_body, total, batch)
        client, http = make_client(pages)
        records = client.collection("articles").get_full_list().batch_size(batch).execute()
        assert len(http.calls) == requests_expected
        assert [r["id"] for r in records] == [r["id"] for r in _items(total)]

    def test_page_params(self, make_client, list_body):
        client, http = make_client(self._pages(list_body, 3, 2))
        client.collection("articles").get_full_list().batch_size(2).filter("published = true").execute()
        assert [kwargs["params"] for _, _, kwargs in http.calls] == [
            [("page", "1"), ("perPage", "2"), ("skipTotal", "true"), ("filter", "published = true")],
            [("page", "2"), ("perPage", "2"), ("skipTotal", "true"), ("filter", "published = true")],
        ]

    def test_default_batch_from_config(self, make_client, list_body):
        client, http = make_client([(200, list_body([], per_page=500))])
        client.collection("articles").get_full_list().execute()
        assert ("perPage", "500") in http.calls[0][2]["params"]

    def test_batch_size_clamped(self, make_client, list_body):
        client, http = make_client([(200, list_body([], per_page=500))])
        client.collection("articles").get_full_list().batch_size(5000).execute()
        assert ("perPage", "500") in http.calls[0][2]["params"]

    def test_batch_size_must_be_positive(self, make_client):
        client, _ = make_client()
        with pytest.raises(ValueError):
            client.collection("articles").get_full_list().batch_size(0)

    def test_model_applied(self, make_client, list_body):
        client, _ = make_client([(200, list_body(_items(1), per_page=2))])
        records = client.collection("articles").get_full_list(model=Article).batch_size(2).execute()
        assert records == [Article(id="rec000000000000", title="Article 0")]

    def test_unauthorized_on_later_page(self, make_client, list_body):
        client, http = make_client([(200, list_body(_items(2), per_page=2)), (401, None)])
        with pytest.raises(UnauthorizedError) as ei:
            client.collection("articles").get_full_list().batch_size(2).execute()
        assert ei.value.operation == "get_full_list"
        assert len(http.calls) == 2


class TestCreate:
    def test_create_json(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        meta = client.collection("articles").create({"title": "Hello", "published": False})
        assert meta == RecordMeta.from_dict(record_payload)
        method, url, kwargs = http.calls[0]
        assert (method, url) == ("POST", RECORDS_URL)
        assert kwargs["json"] == {"title": "Hello", "published": False}

    def test_create_from_dataclass(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        client.collection("articles").create(Article(id="r1a2b3c4d5e6f7g", title="Hello"))
        assert http.calls[0][2]["json"] == {"id": "r1a2b3c4d5e6f7g", "title": "Hello"}

    def test_field_errors(self, make_client):
        body = {
            "status": 400,
            "message": "Failed to create record.",
            "data": {"title": {"code": "validation_required", "message": "Missing required value."}},
        }
        client, _ = make_client([(400, body)])
        with pytest.raises(BadRequestError) as ei:
            client.collection("articles").create({})
        err = ei.value
        assert err.operation == "create"
        assert [(e.name, e.code) for e in err.field_errors] == [("title", "validation_required")]

    def test_created_status_is_unexpected(self, make_client, record_payload):
        client, _ = make_client([(201, record_payload)])
        with pytest.raises(UnexpectedResponseError):
            client.collection("articles").create({"title": "Hello"})

    def test_multipart(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        upload = ("report.pdf", b"%PDF-1.4", "application/pdf")
        client.collection("articles").create_multipart(
            {"title": "Hello", "published": True, "views": 3},
            {"document": upload},
        )
        kwargs = http.calls[0][2]
        assert "json" not in kwargs
        assert kwargs["files"] == {
            "title": (None, "Hello"),
            "published": (None, "true"),
            "views": (None, "3"),
            "document": upload,
        }

    def test_multipart_needs_content(self, make_client):
        client, http = make_client()
        with pytest.raises(ValueError):
            client.collection("articles").create_multipart()
        with pytest.raises(ValueError):
            client.collection("articles").create_multipart({}, {})
        assert http.calls == []


class TestUpdate:
    def test_patch(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        meta = client.collection("articles").update("r1a2b3c4d5e6f7g", {"published": True})
        assert meta.id == "r1a2b3c4d5e6f7g"
        method, url, kwargs = http.calls[0]
        assert method == "PATCH"
        assert url == f"{RECORDS_URL}/r1a2b3c4d5e6f7g"
        assert kwargs["json"] == {"published": True}

    def test_not_found(self, make_client):
        client, _ = make_client([(404, {"status": 404, "message": "The requested resource wasn't found.", "data": {}})])
        with pytest.raises(NotFoundError) as ei:
            client.collection("articles").update("missing", {"published": True})
        assert ei.value.operation == "update"

    def test_empty_id_sends_nothing(self, make_client, record_payload):
        client, http = make_client([(200, record_payload)])
        with pytest.raises(ValueError, match="record_id"):
            client.collection("articles").update("", {"published": True})
        assert http.calls == []


class TestDelete:
    @pytest.mark.parametrize("status", [200, 204])
    def test_success(self, make_client, status):
        client, http = make_client([(status, None)])
        assert client.collection("articles").delete("r1a2b3c4d5e6f7g") is None
        method, url, _ = http.calls[0]
        assert (method, url) == ("DELETE", f"{RECORDS_URL}/r1a2b3c4d5e6f7g")

    def test_empty_id_sends_nothing(self, make_client):
        client, http = make_client()
        with pytest.raises(BadRequestError) as ei:
            client.collection("articles").delete("")
        assert ei.value.subcode == VALIDATION_EMPTY_RECORD_ID
        assert ei.value.operation == "delete"
        assert http.calls == []

    def test_referenced_record(self, make_client):
        body = {"status": 400, "message": "Failed to delete record.", "data": {}}
        client, _ = make_client([(400, body)])
        with pytest.raises(BadRequestError) as ei:
            client.collection("articles").delete("r1a2b3c4d5e6f7g")
        assert ei.value.details["server_message"] == "Failed to delete record."

    def test_rate_limit_is_unexpected(self, make_client):
        client, _ = make_client([(429, None)])
        with pytest.raises(UnexpectedResponseError):
            client.collection("articles").delete("r1a2b3c4d5e6f7g")
