# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..common.constants import MAX_PER_PAGE
from .telemetry import TelemetryConfig


@dataclass(frozen=True)
class PocketBaseConfig:
    """
    Configuration settings for PocketBase client operations.

    Timeouts are fixed once at client construction; there is no per-call
    override and no retry policy.

    :param http_timeout: Read timeout in seconds for every request (default: 30.0).
    :type http_timeout: float
    :param http_connect_timeout: Connect timeout in seconds (default: 10.0).
    :type http_connect_timeout: float
    :param full_list_batch_size: Default page size used by ``get_full_list`` (default and maximum: 500).
    :type full_list_batch_size: int
    :param telemetry: Optional logging/tracing configuration. ``None`` disables telemetry.
    :type telemetry: ~pocketbase.core.telemetry.TelemetryConfig or None
    """

    http_timeout: float = 30.0
    http_connect_timeout: float = 10.0
    full_list_batch_size: int = MAX_PER_PAGE
    telemetry: Optional[TelemetryConfig] = None

    def __post_init__(self) -> None:
        if self.http_timeout <= 0 or self.http_connect_timeout <= 0:
            raise ValueError("HTTP timeouts must be positive.")
        if self.full_list_batch_size < 1:
            raise ValueError("full_list_batch_size must be at least 1.")
        if self.full_list_batch_size > MAX_PER_PAGE:
            object.__setattr__(self, "full_list_batch_size", MAX_PER_PAGE)

    @classmethod
    def from_env(cls) -> "PocketBaseConfig":
        """
        Create a configuration instance from ``POCKETBASE_*`` environment variables.

        Recognized variables are ``POCKETBASE_HTTP_TIMEOUT`` and
        ``POCKETBASE_HTTP_CONNECT_TIMEOUT``; unset variables keep the defaults.

        :return: Configuration instance.
        :rtype: ~pocketbase.core.config.PocketBaseConfig
        """
        return cls(
            http_timeout=_float_env("POCKETBASE_HTTP_TIMEOUT", 30.0),
            http_connect_timeout=_float_env("POCKETBASE_HTTP_CONNECT_TIMEOUT", 10.0),
        )


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
