# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Subcode constants attached to :class:`~pocketbase.core.errors.PocketBaseError` instances."""

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_429 = "http_429"

# Transport and decoding subcodes
UNREACHABLE_TIMEOUT = "unreachable_timeout"
UNREACHABLE_CONNECT = "unreachable_connect"
UNREACHABLE_OTHER = "unreachable_other"
PARSE_BODY_MISMATCH = "parse_body_mismatch"
PARSE_EMPTY_PAGE = "parse_empty_page"

# Authentication subcodes
AUTH_INVALID_CREDENTIALS = "auth_invalid_credentials"
AUTH_EMPTY_FIELD = "auth_empty_field"
AUTH_IDENTITY_MUST_BE_EMAIL = "auth_identity_must_be_email"

# Client-side validation subcodes
VALIDATION_EMPTY_RECORD_ID = "validation_empty_record_id"

# Server-side field validation codes inspected by auth-with-password
FIELD_VALIDATION_IS_EMAIL = "validation_is_email"
FIELD_VALIDATION_REQUIRED = "validation_required"


def http_status_subcode(status_code: int) -> str:
    """Return the ``http_<status>`` subcode for any HTTP status."""
    return f"http_{status_code}"
