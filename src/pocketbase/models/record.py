# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Record data models and structural decoding for PocketBase collections.

Records come back from the server as JSON objects. Callers choose the Python
shape they want through a *model*:

- ``None`` (default): the plain ``dict``.
- A dataclass type: fields are filled from the JSON keys, matching either the
  field name or its camelCase spelling (``collection_id`` <- ``collectionId``).
  Unknown keys are ignored; missing required fields fail decoding.
- Any other callable taking the JSON object, e.g. ``Record.from_dict`` or a
  pydantic model's ``model_validate``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterator, List, Mapping, Optional, TypeVar, Union

from ..common.constants import SKIPPED_TOTAL

T = TypeVar("T")

RecordModel = Union[Callable[[Dict[str, Any]], T], type]

RecordId = str  # 15 character PocketBase id


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def decode_record(payload: Any, model: Optional[RecordModel] = None) -> Any:
    """
    Decode one JSON object into the caller's model.

    :param payload: Decoded JSON value.
    :param model: Target model, see module documentation.
    :return: The decoded record.
    :raises TypeError: If ``payload`` is not an object or does not fit ``model``.
    :raises ValueError: If the model rejects one of the values.
    """
    if model is None:
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        return payload
    if dataclasses.is_dataclass(model) and isinstance(model, type):
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(model):
            if not f.init:
                continue
            if f.name in payload:
                kwargs[f.name] = payload[f.name]
            elif _camel_case(f.name) in payload:
                kwargs[f.name] = payload[_camel_case(f.name)]
        return model(**kwargs)
    return model(payload)


def encode_record(record: Any) -> Dict[str, Any]:
    """
    Turn a record value into a JSON-serializable object body.

    Accepts mappings, dataclass instances, and :class:`Record`.

    :raises TypeError: For any other value.
    """
    if isinstance(record, Record):
        return dict(record.data)
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)
    if isinstance(record, Mapping):
        return dict(record)
    raise TypeError("record must be a mapping or a dataclass instance")


@dataclass
class Record:
    """
    Generic record representation with metadata and dict-like field access.

    Usable as a model: ``collection.get_one(rid, model=Record.from_dict)``.

    :param id: Record id.
    :type id: str
    :param collection_name: Name of the owning collection.
    :type collection_name: str
    :param data: All fields of the record, metadata included.
    :type data: dict[str, Any]

    Example::

        record = pb.collection("articles").get_one("abc", model=Record.from_dict).execute()
        print(record.id, record["title"])
        if "expand" in record:
            print(record["expand"])
    """

    id: RecordId
    collection_name: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Record":
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        return cls(id=payload["id"], collection_name=payload.get("collectionName", ""), data=dict(payload))

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class RecordMeta:
    """
    Metadata returned by create and update calls.

    Only the record identity and timestamps are kept; the echoed record
    fields are not part of this result.
    """

    id: RecordId
    collection_id: str
    collection_name: str
    created: str
    updated: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RecordMeta":
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        return cls(
            id=payload["id"],
            collection_id=payload["collectionId"],
            collection_name=payload["collectionName"],
            created=payload["created"],
            updated=payload["updated"],
        )


@dataclass(frozen=True)
class RecordList(Generic[T]):
    """
    One page of a paginated list query.

    :param page: 1-based page number.
    :param per_page: Maximum number of items per page.
    :param total_items: Total matching records, or ``-1`` when the total was skipped.
    :param total_pages: Total pages, or ``-1`` when the total was skipped.
    :param items: Decoded records of this page, in server order.

    Example::

        page = pb.collection("articles").get_list().page(2).per_page(50).execute()
        for article in page:
            print(article["title"])
    """

    page: int
    per_page: int
    total_items: int
    total_pages: int
    items: List[T] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], model: Optional[RecordModel] = None) -> "RecordList[T]":
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        raw_items = payload["items"]
        if not isinstance(raw_items, list):
            raise TypeError("'items' must be a JSON array")
        return cls(
            page=int(payload["page"]),
            per_page=int(payload["perPage"]),
            total_items=int(payload["totalItems"]),
            total_pages=int(payload["totalPages"]),
            items=[decode_record(item, model) for item in raw_items],
        )

    @property
    def total_skipped(self) -> bool:
        """``True`` when the server did not count the matching records."""
        return self.total_items == SKIPPED_TOTAL

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


__all__ = [
    "RecordId",
    "RecordModel",
    "Record",
    "RecordMeta",
    "RecordList",
    "decode_record",
    "encode_record",
]
