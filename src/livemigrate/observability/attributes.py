"""
Standard span attributes for livemigrate.

Attribute names are shared by the triggers, the importer, the sweep job,
the host stores and the destination client so that traces from a live
write and from a sweep page can be correlated.
"""

# =============================================================================
# Record Attributes
# =============================================================================

ATTR_CLASS_NAME = "livemigrate.record.class"
"""Name of the record class (e.g., 'Order', '_User')."""

ATTR_RECORD_ID = "livemigrate.record.id"
"""Durable identifier of the record, empty for new records (string)."""

ATTR_MIGRATION_STATUS = "livemigrate.record.migration_status"
"""Migration status value of the record (integer, -1 when unset)."""

# =============================================================================
# Trigger Attributes
# =============================================================================

ATTR_TRIGGER_KIND = "livemigrate.trigger.kind"
"""Lifecycle trigger being executed (e.g., 'before_save')."""

# =============================================================================
# Batch / Sweep Attributes
# =============================================================================

ATTR_BATCH_SIZE = "livemigrate.batch.size"
"""Number of records in a batch operation (integer)."""

ATTR_RECORDS_MIGRATED = "livemigrate.records.migrated"
"""Number of records migrated by an operation (integer)."""

ATTR_PAGE_SIZE = "livemigrate.sweep.page_size"
"""Configured sweep page size (integer)."""

ATTR_JOB_NAME = "livemigrate.job.name"
"""Name of a host job (string)."""

# =============================================================================
# Query Attributes
# =============================================================================

ATTR_QUERY_FILTER_COUNT = "livemigrate.query.filter_count"
"""Number of filters in a host store query (integer)."""

ATTR_QUERY_LIMIT = "livemigrate.query.limit"
"""Limit of a host store query, -1 for unlimited (integer)."""

# =============================================================================
# Database / HTTP Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier (e.g., 'sqlite')."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation name (e.g., 'SELECT', 'UPSERT')."""

ATTR_HTTP_METHOD = "http.request.method"
"""HTTP method of a destination request."""

ATTR_HTTP_URL = "url.full"
"""Full URL of a destination request, secret redacted."""


__all__ = [
    "ATTR_CLASS_NAME",
    "ATTR_RECORD_ID",
    "ATTR_MIGRATION_STATUS",
    "ATTR_TRIGGER_KIND",
    "ATTR_BATCH_SIZE",
    "ATTR_RECORDS_MIGRATED",
    "ATTR_PAGE_SIZE",
    "ATTR_JOB_NAME",
    "ATTR_QUERY_FILTER_COUNT",
    "ATTR_QUERY_LIMIT",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_URL",
]
