# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exceptions raised by the PocketBase client.

Every failure surfaces as a subclass of :class:`PocketBaseError`. The class
identifies the kind of failure (bad request, forbidden, unreachable, ...)
while ``operation`` records which call produced it, so callers can match on
either one::

    try:
        pb.collection("articles").get_one("abc").execute()
    except NotFoundError:
        ...
    except TooManyRequestsError as err:
        wait_and_retry(err)
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional

from ._error_codes import (
    AUTH_EMPTY_FIELD,
    AUTH_IDENTITY_MUST_BE_EMAIL,
    AUTH_INVALID_CREDENTIALS,
    HTTP_400,
    HTTP_401,
    HTTP_403,
    HTTP_404,
    HTTP_429,
    PARSE_BODY_MISMATCH,
    UNREACHABLE_OTHER,
    http_status_subcode,
)


@dataclass(frozen=True)
class FieldError:
    """
    One field-level validation failure reported in a 400 response body.

    :param name: Name of the offending field.
    :type name: str
    :param code: Validation code, e.g. ``validation_required``.
    :type code: str
    :param message: Human readable description from the server.
    :type message: str
    """

    name: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.name}: {self.code} {self.message}"


class PocketBaseError(Exception):
    """Base structured error for the PocketBase client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        operation: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.operation = operation
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "operation": self.operation,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"{self.__class__.__name__}(operation={self.operation!r}, "
            f"subcode={self.subcode!r}, message={self.message!r})"
        )


class HttpStatusError(PocketBaseError):
    """
    The server answered with a non-success HTTP status.

    Subclasses bind a fixed ``status`` and a default message; the server's own
    message and ``data`` payload, when present, are kept in ``details``.
    """

    status: ClassVar[int] = 0
    status_subcode: ClassVar[str] = ""
    default_message: ClassVar[str] = "The PocketBase API returned an error response."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        subcode: Optional[str] = None,
    ) -> None:
        super().__init__(
            message or self.default_message,
            code="http_error",
            subcode=subcode or self.status_subcode or http_status_subcode(self.status),
            status_code=self.status,
            details=details,
            source="server",
            operation=operation,
            is_transient=self.status == 429,
        )


class BadRequestError(HttpStatusError):
    """400 Bad Request, optionally carrying field-level validation errors."""

    status = 400
    status_subcode = HTTP_400
    default_message = "Bad Request: Something went wrong while processing your request."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        field_errors: Optional[List[FieldError]] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        subcode: Optional[str] = None,
    ) -> None:
        self.field_errors: List[FieldError] = list(field_errors or [])
        if message is None and self.field_errors:
            message = f"{self.default_message} " + "; ".join(str(e) for e in self.field_errors)
        super().__init__(message, operation=operation, details=details, subcode=subcode)


class UnauthorizedError(HttpStatusError):
    status = 401
    status_subcode = HTTP_401
    default_message = "Unauthorized: The request may require an Authorization Token."


class ForbiddenError(HttpStatusError):
    status = 403
    status_subcode = HTTP_403
    default_message = "Forbidden: The authenticated user may not have permissions for this interaction."


class NotFoundError(HttpStatusError):
    status = 404
    status_subcode = HTTP_404
    default_message = "Not Found: The requested resource could not be found."


class TooManyRequestsError(HttpStatusError):
    status = 429
    status_subcode = HTTP_429
    default_message = "Too Many Requests: The server is rate limiting requests. Please wait before retrying."


class UnexpectedResponseError(PocketBaseError):
    """Any status code the called operation does not recognize."""

    def __init__(
        self,
        status_code: int,
        reason: Optional[str] = None,
        *,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.raw_status = f"{status_code} {reason}".strip() if reason else str(status_code)
        super().__init__(
            f"An unhandled status code was returned by the PocketBase API: {self.raw_status}",
            code="unexpected_response",
            subcode=http_status_subcode(status_code),
            status_code=status_code,
            details=details,
            source="server",
            operation=operation,
        )


class UnreachableError(PocketBaseError):
    """The HTTP exchange failed below the HTTP layer (timeout, DNS, refused connection)."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        subcode: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"The communication with the PocketBase API failed: {message}",
            code="unreachable",
            subcode=subcode or UNREACHABLE_OTHER,
            operation=operation,
            source="client",
            is_transient=True,
        )


class ParseError(PocketBaseError):
    """A successful response whose body does not match the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        subcode: Optional[str] = None,
    ) -> None:
        super().__init__(
            "Could not parse response into the expected data structure. It usually means that there is "
            f"a mismatch between the provided model and your collection definition: {message}",
            code="parse_error",
            subcode=subcode or PARSE_BODY_MISMATCH,
            status_code=status_code,
            operation=operation,
            source="client",
        )


class AuthenticationError(BadRequestError):
    """Base for the 400 outcomes of ``auth_with_password``."""


class InvalidCredentialsError(AuthenticationError):
    default_message = "Authentication failed: Invalid Credentials. Given email and/or password is wrong."

    def __init__(self, *, operation: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(operation=operation, details=details, subcode=AUTH_INVALID_CREDENTIALS)


class EmptyFieldError(AuthenticationError):
    """
    Identity and/or password were blank.

    :param identity: ``True`` when the identity field was reported blank.
    :param password: ``True`` when the password field was reported blank.
    """

    default_message = "Authentication failed: Empty Credential Field. Given email and/or password is empty."

    def __init__(
        self,
        identity: bool,
        password: bool,
        *,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.identity = identity
        self.password = password
        super().__init__(
            self.default_message,
            operation=operation,
            details=details,
            subcode=AUTH_EMPTY_FIELD,
        )


class IdentityMustBeEmailError(AuthenticationError):
    default_message = "Authentication failed. Given identity is not a valid email."

    def __init__(self, *, operation: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(operation=operation, details=details, subcode=AUTH_IDENTITY_MUST_BE_EMAIL)


__all__ = [
    "FieldError",
    "PocketBaseError",
    "HttpStatusError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "TooManyRequestsError",
    "UnexpectedResponseError",
    "UnreachableError",
    "ParseError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "EmptyFieldError",
    "IdentityMustBeEmailError",
]
