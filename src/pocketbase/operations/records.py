# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Fluent builders for record read operations.

Each builder collects optional query parameters through chained setters and
performs its request(s) in :meth:`execute`. Builders are single-use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, List, Optional, Tuple, TypeVar

from ..common.constants import MAX_PER_PAGE
from ..core._error_codes import PARSE_EMPTY_PAGE
from ..core._status import FULL_LIST_ERRORS, READ_ERRORS, _decode, _raise_for_status, _StatusPolicy
from ..core.errors import ParseError
from ..models.record import RecordList, RecordModel, decode_record

if TYPE_CHECKING:
    from .collection import Collection

logger = logging.getLogger(__name__)

T = TypeVar("T")

_GET_ONE = _StatusPolicy("get_one", READ_ERRORS)
_GET_LIST = _StatusPolicy("get_list", READ_ERRORS)
_GET_FIRST_LIST_ITEM = _StatusPolicy("get_first_list_item", READ_ERRORS)
_GET_FULL_LIST = _StatusPolicy("get_full_list", FULL_LIST_ERRORS)


class _SingleUseBuilder:
    """Mixin refusing a second :meth:`execute` on the same builder."""

    _executed: bool = False

    def _consume(self) -> None:
        if self._executed:
            raise RuntimeError(f"{type(self).__name__} has already been executed; create a new builder.")
        self._executed = True


def _query(
    sort: Optional[str],
    filter: Optional[str],
    expand: Optional[str],
) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    if sort:
        params.append(("sort", sort))
    if filter:
        params.append(("filter", filter))
    if expand:
        params.append(("expand", expand))
    return params


@dataclass
class GetOneBuilder(_SingleUseBuilder, Generic[T]):
    """
    Fetch one record by id.

    Example::

        article = (pb.collection("articles")
                   .get_one("abc123", model=Article)
                   .expand("author")
                   .execute())
    """

    collection: "Collection" = field(repr=False)
    record_id: str
    model: Optional[RecordModel] = None
    _expand: Optional[str] = None

    def expand(self, expand: str) -> "GetOneBuilder[T]":
        """
        Expand relation fields, e.g. ``"author,comments.user"``.

        :param expand: Comma separated relation paths.
        :return: Self for method chaining.
        """
        self._expand = expand
        return self

    def execute(self) -> T:
        """
        Send the request.

        :return: The decoded record.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises TooManyRequestsError: 429.
        :raises ParseError: The body does not fit ``model``.
        :raises UnexpectedResponseError: Any other non-2xx status.
        :raises UnreachableError: Transport failure.
        """
        self._consume()
        client = self.collection.client
        url = self.collection._records_url(self.record_id)
        params = [("expand", self._expand)] if self._expand else None
        response = client._get(_GET_ONE.operation, url, params, collection=self.collection.name)
        _raise_for_status(response, _GET_ONE)
        return _decode(response, _GET_ONE.operation, lambda body: decode_record(body, self.model))


@dataclass
class GetListBuilder(_SingleUseBuilder, Generic[T]):
    """
    Fetch one page of records.

    Example::

        page = (pb.collection("articles")
                .get_list()
                .page(2)
                .per_page(50)
                .sort("-created")
                .filter("published = true")
                .skip_total(True)
                .execute())
    """

    collection: "Collection" = field(repr=False)
    model: Optional[RecordModel] = None
    _page: Optional[int] = None
    _per_page: Optional[int] = None
    _sort: Optional[str] = None
    _filter: Optional[str] = None
    _expand: Optional[str] = None
    _skip_total: bool = False

    def page(self, page: int) -> "GetListBuilder[T]":
        """Page number, starting at 1 (server default 1)."""
        if page < 1:
            raise ValueError("page must be >= 1")
        self._page = page
        return self

    def per_page(self, per_page: int) -> "GetListBuilder[T]":
        """Maximum records per page (server default 30)."""
        if per_page < 1:
            raise ValueError("per_page must be >= 1")
        self._per_page = per_page
        return self

    def sort(self, sort: str) -> "GetListBuilder[T]":
        """Sort expression, e.g. ``"-created,title"``."""
        self._sort = sort
        return self

    def filter(self, filter: str) -> "GetListBuilder[T]":
        """Filter expression, e.g. ``"published = true && views > 10"``."""
        self._filter = filter
        return self

    def expand(self, expand: str) -> "GetListBuilder[T]":
        """Relations to expand."""
        self._expand = expand
        return self

    def skip_total(self, skip_total: bool = True) -> "GetListBuilder[T]":
        """
        Skip counting the matching records.

        Faster on large collections; ``total_items`` and ``total_pages`` come back as ``-1``.
        """
        self._skip_total = skip_total
        return self

    def _params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self._page is not None:
            params.append(("page", str(self._page)))
        if self._per_page is not None:
            params.append(("perPage", str(self._per_page)))
        params.extend(_query(self._sort, self._filter, self._expand))
        if self._skip_total:
            params.append(("skipTotal", "true"))
        return params

    def execute(self) -> RecordList[T]:
        """
        Send the request.

        :return: The requested page.
        :rtype: ~pocketbase.models.record.RecordList
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises TooManyRequestsError: 429.
        :raises ParseError: The body is not a list envelope or an item does not fit ``model``.
        :raises UnexpectedResponseError: Any other non-2xx status.
        :raises UnreachableError: Transport failure.
        """
        self._consume()
        client = self.collection.client
        response = client._get(
            _GET_LIST.operation, self.collection._records_url(), self._params(), collection=self.collection.name
        )
        _raise_for_status(response, _GET_LIST)
        return _decode(response, _GET_LIST.operation, lambda body: RecordList.from_dict(body, self.model))


@dataclass
class GetFirstListItemBuilder(_SingleUseBuilder, Generic[T]):
    """
    Fetch the first record matching a filter.

    Always queries ``page=1&perPage=1&skipTotal=true``; paging cannot be set.

    Example::

        user = (pb.collection("users")
                .get_first_list_item()
                .filter('email = "test@example.com"')
                .execute())
    """

    collection: "Collection" = field(repr=False)
    model: Optional[RecordModel] = None
    _sort: Optional[str] = None
    _filter: Optional[str] = None
    _expand: Optional[str] = None

    def sort(self, sort: str) -> "GetFirstListItemBuilder[T]":
        self._sort = sort
        return self

    def filter(self, filter: str) -> "GetFirstListItemBuilder[T]":
        self._filter = filter
        return self

    def expand(self, expand: str) -> "GetFirstListItemBuilder[T]":
        self._expand = expand
        return self

    def execute(self) -> T:
        """
        Send the request.

        :return: The first matching record.
        :raises ParseError: No record matched, or the body does not fit ``model``.
        :raises ForbiddenError: 403.
        :raises NotFoundError: 404.
        :raises TooManyRequestsError: 429.
        :raises UnexpectedResponseError: Any other non-2xx status.
        :raises UnreachableError: Transport failure.
        """
        self._consume()
        client = self.collection.client
        params = [("page", "1"), ("perPage", "1"), ("skipTotal", "true")]
        params.extend(_query(self._sort, self._filter, self._expand))
        response = client._get(
            _GET_FIRST_LIST_ITEM.operation, self.collection._records_url(), params, collection=self.collection.name
        )
        _raise_for_status(response, _GET_FIRST_LIST_ITEM)
        records = _decode(
            response, _GET_FIRST_LIST_ITEM.operation, lambda body: RecordList.from_dict(body, self.model)
        )
        if not records.items:
            raise ParseError(
                "No record found.",
                operation=_GET_FIRST_LIST_ITEM.operation,
                status_code=response.status_code,
                subcode=PARSE_EMPTY_PAGE,
            )
        return records.items[0]


@dataclass
class GetFullListBuilder(_SingleUseBuilder, Generic[T]):
    """
    Fetch every matching record by walking the pages in order.

    Pages are requested one after another with ``skipTotal=true`` until a page
    returns fewer items than the batch size. When the record count is an exact
    multiple of the batch size, the last request returns an empty page.

    Example::

        articles = (pb.collection("articles")
                    .get_full_list()
                    .batch_size(200)
                    .sort("-created")
                    .execute())
    """

    collection: "Collection" = field(repr=False)
    model: Optional[RecordModel] = None
    _batch_size: int = MAX_PER_PAGE
    _sort: Optional[str] = None
    _filter: Optional[str] = None
    _expand: Optional[str] = None

    def batch_size(self, size: int) -> "GetFullListBuilder[T]":
        """Records per request; values above 500 are clamped to 500."""
        if size < 1:
            raise ValueError("batch size must be >= 1")
        self._batch_size = min(size, MAX_PER_PAGE)
        return self

    def sort(self, sort: str) -> "GetFullListBuilder[T]":
        self._sort = sort
        return self

    def filter(self, filter: str) -> "GetFullListBuilder[T]":
        self._filter = filter
        return self

    def expand(self, expand: str) -> "GetFullListBuilder[T]":
        self._expand = expand
        return self

    def execute(self) -> List[T]:
        """
        Send as many requests as needed.

        :return: All records, in page order.
        :raises UnauthorizedError: 401 on any page.
        :raises ForbiddenError: 403 on any page.
        :raises NotFoundError: 404 on any page.
        :raises TooManyRequestsError: 429 on any page.
        :raises ParseError: A page does not fit the list envelope or ``model``.
        :raises UnexpectedResponseError: Any other non-2xx status.
        :raises UnreachableError: Transport failure.
        """
        self._consume()
        client = self.collection.client
        url = self.collection._records_url()
        extra = _query(self._sort, self._filter, self._expand)
        records: List[Any] = []
        page = 1
        while True:
            params = [("page", str(page)), ("perPage", str(self._batch_size)), ("skipTotal", "true")]
            params.extend(extra)
            response = client._get(_GET_FULL_LIST.operation, url, params, collection=self.collection.name)
            _raise_for_status(response, _GET_FULL_LIST)
            batch = _decode(response, _GET_FULL_LIST.operation, lambda body: RecordList.from_dict(body, self.model))
            records.extend(batch.items)
            logger.debug("get_full_list %s page %d: %d items", self.collection.name, page, len(batch.items))
            # skipTotal hides totalPages, so a short page is the only end marker
            if len(batch.items) < self._batch_size:
                break
            page += 1
        return records


__all__ = [
    "GetOneBuilder",
    "GetListBuilder",
    "GetFirstListItemBuilder",
    "GetFullListBuilder",
]
