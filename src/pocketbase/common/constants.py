# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the PocketBase REST API and client telemetry.
"""

# Largest ``perPage`` value the server accepts
MAX_PER_PAGE = 500

# Sentinel the server returns for totalItems/totalPages when skipTotal is set
SKIPPED_TOTAL = -1

# REST namespace for collection-scoped endpoints
COLLECTIONS_PATH = "/api/collections"

# OpenTelemetry semantic convention attribute names
OTEL_ATTR_DB_SYSTEM = "db.system"
OTEL_ATTR_DB_OPERATION = "db.operation"
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_POCKETBASE_COLLECTION = "pocketbase.collection"
