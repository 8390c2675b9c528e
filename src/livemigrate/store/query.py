"""
Query builder for host store lookups.

Provides a backend-agnostic way to express the queries the migrator needs
(the sweep's "not yet migrated" page, the ad-hoc lookup by identifier).
Host store implementations evaluate these against their records.

The pseudo-field ``"id"`` refers to the record identifier. Absent fields
compare as None, so ``not_in`` matches records that never had the field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from livemigrate.records import Record

ID_FIELD = "id"


@dataclass(frozen=True)
class Filter:
    """
    A single filter condition for a query.

    Attributes:
        field: Name of the field to filter on
        operator: Comparison operator (eq, ne, gt, gte, lt, lte, in, not_in)
        value: Value to compare against

    Example:
        >>> Filter.eq("status", "active")
        Filter(field='status', operator='eq', value='active')
        >>> Filter.not_in("migrationStatus", [1, 2, 3, 4])
        Filter(field='migrationStatus', operator='not_in', value=[1, 2, 3, 4])
    """

    field: str
    operator: Literal["eq", "ne", "gt", "gte", "lt", "lte", "in", "not_in"]
    value: Any

    @classmethod
    def eq(cls, field: str, value: Any) -> Filter:
        """Create an equality filter (field = value)."""
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def ne(cls, field: str, value: Any) -> Filter:
        """Create a not-equal filter (field != value)."""
        return cls(field=field, operator="ne", value=value)

    @classmethod
    def gt(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="gt", value=value)

    @classmethod
    def gte(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="gte", value=value)

    @classmethod
    def lt(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="lt", value=value)

    @classmethod
    def lte(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="lte", value=value)

    @classmethod
    def in_(cls, field: str, values: list[Any]) -> Filter:
        """Create an "in list" filter (field IN (values))."""
        return cls(field=field, operator="in", value=list(values))

    @classmethod
    def not_in(cls, field: str, values: list[Any]) -> Filter:
        """Create a "not in list" filter; matches records without the field."""
        return cls(field=field, operator="not_in", value=list(values))

    def matches(self, record: Record) -> bool:
        """
        Evaluate this filter against a record.

        Ordering comparisons never match an absent value.
        """
        value = record.id if self.field == ID_FIELD else record.get(self.field)

        if self.operator == "eq":
            return bool(value == self.value)
        elif self.operator == "ne":
            return bool(value != self.value)
        elif self.operator == "in":
            return bool(value in self.value)
        elif self.operator == "not_in":
            return bool(value not in self.value)

        if value is None:
            return False
        if self.operator == "gt":
            return bool(value > self.value)
        elif self.operator == "gte":
            return bool(value >= self.value)
        elif self.operator == "lt":
            return bool(value < self.value)
        elif self.operator == "lte":
            return bool(value <= self.value)
        return False

    def __str__(self) -> str:
        op_symbols = {
            "eq": "=",
            "ne": "!=",
            "gt": ">",
            "gte": ">=",
            "lt": "<",
            "lte": "<=",
            "in": "IN",
            "not_in": "NOT IN",
        }
        return f"{self.field} {op_symbols[self.operator]} {self.value!r}"


@dataclass
class Query:
    """
    Query specification for host store lookups.

    All filters are combined with AND logic.

    Attributes:
        filters: List of Filter conditions
        order_by: Field name to order results by ("id" for the identifier)
        order_direction: Sort direction ('asc' or 'desc')
        limit: Maximum number of records to return
        offset: Number of records to skip

    Example:
        >>> query = (
        ...     Query()
        ...     .with_filter(Filter.not_in("migrationStatus", [1, 2, 3, 4]))
        ...     .with_order("id")
        ...     .with_pagination(limit=1000)
        ... )
    """

    filters: list[Filter] = field(default_factory=list)
    order_by: str | None = None
    order_direction: Literal["asc", "desc"] = "asc"
    limit: int | None = None
    offset: int = 0

    def with_filter(self, filter_: Filter) -> Query:
        """Create a new Query with an additional filter."""
        return Query(
            filters=[*self.filters, filter_],
            order_by=self.order_by,
            order_direction=self.order_direction,
            limit=self.limit,
            offset=self.offset,
        )

    def with_order(self, field: str, direction: Literal["asc", "desc"] = "asc") -> Query:
        """Create a new Query with ordering."""
        return Query(
            filters=self.filters.copy(),
            order_by=field,
            order_direction=direction,
            limit=self.limit,
            offset=self.offset,
        )

    def with_pagination(self, limit: int, offset: int = 0) -> Query:
        """Create a new Query with pagination."""
        return Query(
            filters=self.filters.copy(),
            order_by=self.order_by,
            order_direction=self.order_direction,
            limit=limit,
            offset=offset,
        )

    def matches(self, record: Record) -> bool:
        return all(filter_.matches(record) for filter_ in self.filters)

    def apply(self, records: list[Record]) -> list[Record]:
        """Filter, order and paginate an in-memory list of records."""
        results = [r for r in records if self.matches(r)]

        if self.order_by:
            order_by = self.order_by

            def sort_key(record: Record) -> tuple[bool, Any]:
                value = record.id if order_by == ID_FIELD else record.get(order_by)
                return (value is None, value if value is not None else 0)

            results.sort(key=sort_key, reverse=self.order_direction == "desc")

        if self.offset:
            results = results[self.offset :]
        if self.limit is not None:
            results = results[: self.limit]
        return results

    def __str__(self) -> str:
        parts = []
        if self.filters:
            parts.append("WHERE " + " AND ".join(str(f) for f in self.filters))
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by} {self.order_direction.upper()}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        if self.offset:
            parts.append(f"OFFSET {self.offset}")
        return " ".join(parts) if parts else "(all records)"


__all__ = [
    "ID_FIELD",
    "Filter",
    "Query",
]
