# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Python client for the PocketBase REST API.

Example::

    from pocketbase import PocketBase

    with PocketBase("http://127.0.0.1:8090") as pb:
        pb.collection("users").auth_with_password("test@example.com", "secret")
        page = pb.collection("articles").get_list().per_page(20).execute()
"""

from .__version__ import __version__
from .client import PocketBase
from .core.config import PocketBaseConfig
from .core.errors import (
    AuthenticationError,
    BadRequestError,
    EmptyFieldError,
    FieldError,
    ForbiddenError,
    IdentityMustBeEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ParseError,
    PocketBaseError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedResponseError,
    UnreachableError,
)
from .core.telemetry import TelemetryConfig
from .models.auth import AuthStore, AuthStoreRecord
from .models.record import Record, RecordList, RecordMeta

__all__ = [
    "__version__",
    "PocketBase",
    "PocketBaseConfig",
    "TelemetryConfig",
    "AuthStore",
    "AuthStoreRecord",
    "Record",
    "RecordList",
    "RecordMeta",
    "FieldError",
    "PocketBaseError",
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
