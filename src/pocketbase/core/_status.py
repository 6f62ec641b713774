# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Status-code classification shared by every operation.

Each operation declares a :class:`_StatusPolicy`: which statuses count as
success, which error class each recognized status maps to, and optionally a
custom 400 handler that inspects the structured error body. Any status the
policy does not list becomes :class:`~pocketbase.core.errors.UnexpectedResponseError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Type

import requests

from ._error_codes import PARSE_BODY_MISMATCH
from .errors import (
    BadRequestError,
    FieldError,
    ForbiddenError,
    HttpStatusError,
    NotFoundError,
    ParseError,
    PocketBaseError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedResponseError,
)

_BODY_EXCERPT_LIMIT = 512

BadRequestHandler = Callable[[requests.Response, str], PocketBaseError]


@dataclass(frozen=True)
class _StatusPolicy:
    """
    Status-to-error table for one operation family.

    :param operation: Operation name recorded on raised errors.
    :param errors: Recognized error statuses and the class raised for each.
    :param success: Accepted success statuses. Empty means any 2xx.
    :param bad_request: Optional handler building the error for a 400 response.
    """

    operation: str
    errors: Mapping[int, Type[HttpStatusError]] = field(default_factory=dict)
    success: FrozenSet[int] = frozenset()
    bad_request: Optional[BadRequestHandler] = None

    def is_success(self, status_code: int) -> bool:
        if self.success:
            return status_code in self.success
        return 200 <= status_code < 300


def _error_details(response: requests.Response) -> Dict[str, Any]:
    """Collect the server's message/data (or a raw body excerpt) without ever raising."""
    details: Dict[str, Any] = {}
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        if text:
            details["body_excerpt"] = text[:_BODY_EXCERPT_LIMIT]
        return details
    if isinstance(body, dict):
        if isinstance(body.get("message"), str):
            details["server_message"] = body["message"]
        if body.get("data"):
            details["data"] = body["data"]
    return details


def _raise_for_status(response: requests.Response, policy: _StatusPolicy) -> None:
    """
    Classify ``response`` under ``policy``.

    :raises PocketBaseError: The mapped error for every non-success status.
    """
    status = response.status_code
    if policy.is_success(status):
        return
    if status == 400 and policy.bad_request is not None:
        raise policy.bad_request(response, policy.operation)
    error_cls = policy.errors.get(status)
    if error_cls is None:
        raise UnexpectedResponseError(
            status,
            getattr(response, "reason", None),
            operation=policy.operation,
            details=_error_details(response),
        )
    raise error_cls(operation=policy.operation, details=_error_details(response))


def _parse_field_errors(response: requests.Response, operation: str) -> PocketBaseError:
    """
    Build a :class:`BadRequestError` listing every field error in a 400 body.

    A body that is not the expected ``{status, message, data: {field: {code, message}}}``
    shape is reported as :class:`ParseError`.
    """
    try:
        body = response.json()
        data = body["data"]
        if not isinstance(data, dict):
            raise TypeError("'data' must be a JSON object")
        field_errors: List[FieldError] = [
            FieldError(name=name, code=entry["code"], message=entry["message"]) for name, entry in data.items()
        ]
    except (ValueError, KeyError, TypeError) as exc:
        return ParseError(str(exc), operation=operation, status_code=400, subcode=PARSE_BODY_MISMATCH)
    details = {"server_message": body.get("message")} if isinstance(body.get("message"), str) else None
    return BadRequestError(field_errors=field_errors, operation=operation, details=details)


def _json_body(response: requests.Response, operation: str) -> Any:
    """
    Decode the JSON body of a success response.

    :raises ParseError: When the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(str(exc), operation=operation, status_code=response.status_code) from exc


def _decode(response: requests.Response, operation: str, decoder: Callable[[Any], Any]) -> Any:
    """
    Decode the JSON body of a success response with ``decoder``.

    :raises ParseError: When the body is not JSON or does not fit the decoder.
    """
    body = _json_body(response, operation)
    try:
        return decoder(body)
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError(
            f"{type(exc).__name__}: {exc}", operation=operation, status_code=response.status_code
        ) from exc


# Statuses recognized by each read-only family
READ_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    403: ForbiddenError,
    404: NotFoundError,
    429: TooManyRequestsError,
}

FULL_LIST_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: TooManyRequestsError,
}

WRITE_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    403: ForbiddenError,
    404: NotFoundError,
}

DELETE_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    400: BadRequestError,
    403: ForbiddenError,
    404: NotFoundError,
}

SESSION_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}

PRIVILEGED_ERRORS: Mapping[int, Type[HttpStatusError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}
