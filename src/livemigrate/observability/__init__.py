"""
Observability utilities for livemigrate.

Tracing is composition-based: components accept a ``Tracer`` and fall
back to ``create_tracer(__name__, enable_tracing)``. OpenTelemetry is an
optional dependency and every utility here degrades to a no-op without it.
"""

from livemigrate.observability.attributes import (
    ATTR_BATCH_SIZE,
    ATTR_CLASS_NAME,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_HTTP_METHOD,
    ATTR_HTTP_URL,
    ATTR_JOB_NAME,
    ATTR_MIGRATION_STATUS,
    ATTR_PAGE_SIZE,
    ATTR_QUERY_FILTER_COUNT,
    ATTR_QUERY_LIMIT,
    ATTR_RECORD_ID,
    ATTR_RECORDS_MIGRATED,
    ATTR_TRIGGER_KIND,
)
from livemigrate.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)
from livemigrate.observability.tracing import (
    OTEL_AVAILABLE,
    get_tracer,
    should_trace,
)

__all__ = [
    "OTEL_AVAILABLE",
    "get_tracer",
    "should_trace",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    "ATTR_BATCH_SIZE",
    "ATTR_CLASS_NAME",
    "ATTR_DB_OPERATION",
    "ATTR_DB_SYSTEM",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_URL",
    "ATTR_JOB_NAME",
    "ATTR_MIGRATION_STATUS",
    "ATTR_PAGE_SIZE",
    "ATTR_QUERY_FILTER_COUNT",
    "ATTR_QUERY_LIMIT",
    "ATTR_RECORD_ID",
    "ATTR_RECORDS_MIGRATED",
    "ATTR_TRIGGER_KIND",
]
