# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the PocketBase client.

This module contains the foundational components including configuration,
HTTP transport, status classification, telemetry, and error handling.
"""

from .config import PocketBaseConfig
from .telemetry import TelemetryConfig

__all__ = [
    "PocketBaseConfig",
    "TelemetryConfig",
]
