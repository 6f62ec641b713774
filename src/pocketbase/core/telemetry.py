# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Telemetry infrastructure for the PocketBase client.

Provides OpenTelemetry-based tracing and metrics, standard-library logging,
and an extensible hook system for custom telemetry providers. Spans and
instruments come from ``opentelemetry-api`` and are no-ops unless the host
application installs an OpenTelemetry SDK.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from opentelemetry import metrics, trace
from opentelemetry.trace import Status, StatusCode

from ..common.constants import (
    OTEL_ATTR_DB_OPERATION,
    OTEL_ATTR_DB_SYSTEM,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_HTTP_URL,
    OTEL_ATTR_POCKETBASE_COLLECTION,
)

_INSTRUMENTATION_NAME = "pocketbase"

_hook_logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration for client telemetry and observability.

    Telemetry is opt-in. Authorization headers and tokens are never recorded.

    Example:
        Request logging::

            config = PocketBaseConfig(
                telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG")
            )

        Custom hook::

            config = PocketBaseConfig(
                telemetry=TelemetryConfig(hooks=[MyCustomTelemetryHook()])
            )
    """

    # Signal toggles
    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    # Logging configuration
    log_level: str = "WARNING"
    logger_name: str = "pocketbase"

    # Custom hooks
    hooks: List["TelemetryHook"] = field(default_factory=list)


# ============================================================================
# Context Objects
# ============================================================================


@dataclass
class RequestContext:
    """Context passed to telemetry hooks for each HTTP request."""

    method: str  # GET, POST, PATCH, DELETE
    url: str
    operation: str  # e.g. "get_list", "auth_with_password"
    collection: Optional[str] = None

    start_time: float = field(default_factory=time.perf_counter)

    # Custom data bag for hooks to share state
    custom_data: Dict[str, Any] = field(default_factory=dict)

    _span: Any = field(default=None, repr=False)


@dataclass
class ResponseContext:
    """Response information passed to telemetry hooks."""

    status_code: int
    duration_ms: float
    response_size: Optional[int] = None


# ============================================================================
# Hook Protocol
# ============================================================================


@runtime_checkable
class TelemetryHook(Protocol):
    """Protocol for custom telemetry hooks.

    All methods are optional - implement only what you need.

    Example:
        class StatsdHook:
            def __init__(self, statsd):
                self.statsd = statsd

            def on_request_end(self, request: RequestContext, response: ResponseContext):
                self.statsd.timing(
                    f"pocketbase.{request.operation}.duration",
                    response.duration_ms
                )
    """

    def on_request_start(self, context: RequestContext) -> None:
        """Called before each HTTP request is sent."""
        ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None:
        """Called after each HTTP response is received."""
        ...

    def on_request_error(self, request: RequestContext, error: Exception) -> None:
        """Called when the exchange raises before a response is available."""
        ...


# ============================================================================
# Telemetry Manager
# ============================================================================


class TelemetryManager:
    """Manages telemetry instrumentation for the client.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._tracer: Optional[trace.Tracer] = None
        self._logger: Optional[logging.Logger] = None
        self._hooks = list(self._config.hooks)

        self._request_duration: Optional[Any] = None
        self._request_count: Optional[Any] = None
        self._error_count: Optional[Any] = None

        self._initialize()

    @property
    def is_tracing_enabled(self) -> bool:
        return self._tracer is not None

    @property
    def is_metrics_enabled(self) -> bool:
        return self._request_duration is not None

    def _initialize(self) -> None:
        if self._config.enable_tracing:
            self._tracer = trace.get_tracer(_INSTRUMENTATION_NAME)

        if self._config.enable_metrics:
            meter = metrics.get_meter(_INSTRUMENTATION_NAME)
            self._request_duration = meter.create_histogram(
                name="pocketbase.client.request.duration",
                description="Duration of PocketBase API requests",
                unit="ms",
            )
            self._request_count = meter.create_counter(
                name="pocketbase.client.request.count",
                description="Number of PocketBase API requests",
                unit="1",
            )
            self._error_count = meter.create_counter(
                name="pocketbase.client.error.count",
                description="Number of PocketBase API error responses",
                unit="1",
            )

        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        collection: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        """Create a traced request context.

        Usage:
            with telemetry.trace_request("get_list", "GET", url, "articles") as ctx:
                response = self._http._request(...)
                telemetry.record_response(ctx, response.status_code)
        """
        ctx = RequestContext(method=method, url=url, operation=operation, collection=collection)

        self._dispatch("on_request_start", ctx)

        span = None
        if self._tracer is not None:
            span_name = f"PocketBase {operation}"
            if collection:
                span_name = f"{span_name} {collection}"
            attributes = {
                OTEL_ATTR_DB_SYSTEM: "pocketbase",
                OTEL_ATTR_DB_OPERATION: operation,
                OTEL_ATTR_HTTP_METHOD: method,
                OTEL_ATTR_HTTP_URL: url,
            }
            if collection:
                attributes[OTEL_ATTR_POCKETBASE_COLLECTION] = collection
            span = self._tracer.start_span(span_name, kind=trace.SpanKind.CLIENT, attributes=attributes)
            ctx._span = span

        try:
            yield ctx
        except Exception as e:
            if span is not None:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
            if self._logger:
                self._logger.warning(f"{operation} {method} failed: {e}")
            self._dispatch("on_request_error", ctx, e)
            raise
        finally:
            if span is not None:
                span.end()

    def record_response(self, ctx: RequestContext, status_code: int, response_size: Optional[int] = None) -> None:
        """Record response metrics, log the exchange, and dispatch to hooks."""
        duration_ms = (time.perf_counter() - ctx.start_time) * 1000
        response = ResponseContext(status_code=status_code, duration_ms=duration_ms, response_size=response_size)

        if ctx._span is not None:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)

        if self._request_duration is not None:
            attributes: Dict[str, Any] = {
                "operation": ctx.operation,
                "method": ctx.method,
                "status_code": status_code,
            }
            if ctx.collection:
                attributes["collection"] = ctx.collection
            self._request_duration.record(duration_ms, attributes)
            self._request_count.add(1, attributes)
            if status_code >= 400:
                self._error_count.add(1, attributes)

        if self._logger:
            level = logging.WARNING if status_code >= 400 else logging.DEBUG
            self._logger.log(
                level,
                f"{ctx.operation} {ctx.method} {status_code} {duration_ms:.1f}ms",
                extra={"collection": ctx.collection},
            )

        self._dispatch("on_request_end", ctx, response)

    def _dispatch(self, method_name: str, *args: Any) -> None:
        """Call ``method_name`` on every hook implementing it; a failing hook never breaks the request."""
        for hook in self._hooks:
            callback = getattr(hook, method_name, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                _hook_logger.debug("Telemetry hook %r failed in %s", hook, method_name, exc_info=True)


# ============================================================================
# No-op Manager for when telemetry is disabled
# ============================================================================


class NoOpTelemetryManager:
    """No-op telemetry manager when telemetry is disabled."""

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        collection: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        yield RequestContext(method=method, url=url, operation=operation, collection=collection)

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Factory to create appropriate telemetry manager."""
    if config is None:
        return NoOpTelemetryManager()

    has_any_enabled = config.enable_tracing or config.enable_metrics or config.enable_logging or config.hooks

    if not has_any_enabled:
        return NoOpTelemetryManager()

    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]
