"""
Ad-hoc migration of specific records.

Registered on the host as a callable function so an operator can push
chosen records to the destination on demand, for example after fixing
a migrate_object bug. Parameters use the host's wire names::

    {"class": "Order", "objectId": "abc"}
    {"class": "Order", "objectIds": ["abc", "def"]}

The ad-hoc path runs migrate_object only; it never changes the
migration status of the records it touches.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from livemigrate.exceptions import MigrationRequestError
from livemigrate.observability import (
    ATTR_BATCH_SIZE,
    ATTR_CLASS_NAME,
    Tracer,
    create_tracer,
)
from livemigrate.records import call_hook
from livemigrate.registry import TriggerRegistry
from livemigrate.store.interface import HostStore

logger = logging.getLogger(__name__)


class AdhocMigrationRequest(BaseModel):
    """
    Parameters of an ad-hoc migration.

    Exactly the records named by ``objectId`` and/or ``objectIds`` are
    migrated; at least one of them is required.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    class_name: str = Field(..., alias="class", min_length=1)
    object_id: str | None = Field(default=None, alias="objectId", min_length=1)
    object_ids: list[str] | None = Field(default=None, alias="objectIds")

    @model_validator(mode="after")
    def _require_ids(self) -> AdhocMigrationRequest:
        if self.object_id is None and not self.object_ids:
            raise ValueError("objectId or objectIds is required")
        return self

    @property
    def ids(self) -> list[str]:
        """Requested identifiers, de-duplicated in request order."""
        ids = [self.object_id] if self.object_id is not None else []
        ids.extend(self.object_ids or [])
        return list(dict.fromkeys(ids))


@dataclass(frozen=True)
class AdhocMigrationResult:
    """
    Outcome of an ad-hoc migration.

    Attributes:
        class_name: Class of the migrated records
        requested: Number of distinct identifiers requested
        migrated: Number of records migrated
    """

    class_name: str
    requested: int
    migrated: int


class AdhocMigrator:
    """
    Host function that migrates explicitly named records.

    Example:
        >>> adhoc = AdhocMigrator(registry, store)
        >>> result = await adhoc({"class": "Order", "objectIds": ["a", "b"]})
        >>> result.migrated
        2
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        store: HostStore,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._registry = registry
        self._store = store
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def __call__(
        self,
        params: dict[str, Any] | AdhocMigrationRequest,
    ) -> AdhocMigrationResult:
        """
        Migrate the requested records.

        Raises:
            MigrationRequestError: If the parameters are invalid or the class
                has no migrate_object hook
            RecordNotFoundError: If a requested record does not exist
            Exception: The first migrate_object failure
        """
        request = self.parse(params)
        migrate = self._registry.handlers(request.class_name).migrate_object
        if migrate is None:
            raise MigrationRequestError(
                f"No migrate_object hook registered for {request.class_name}"
            )

        ids = request.ids
        with self._tracer.span(
            "livemigrate.adhoc.migrate",
            {ATTR_CLASS_NAME: request.class_name, ATTR_BATCH_SIZE: len(ids)},
        ):
            records = await asyncio.gather(
                *(self._store.get(request.class_name, record_id) for record_id in ids)
            )
            await asyncio.gather(*(call_hook(migrate, record) for record in records))

        logger.info(
            "Migrated %d %s records on request",
            len(records),
            request.class_name,
            extra={"class_name": request.class_name, "migrated": len(records)},
        )
        return AdhocMigrationResult(
            class_name=request.class_name,
            requested=len(ids),
            migrated=len(records),
        )

    @staticmethod
    def parse(params: dict[str, Any] | AdhocMigrationRequest) -> AdhocMigrationRequest:
        """Validate raw host parameters into a request."""
        if isinstance(params, AdhocMigrationRequest):
            return params
        try:
            return AdhocMigrationRequest.model_validate(params)
        except ValidationError as e:
            raise MigrationRequestError(f"Invalid migration request: {e}") from e


__all__ = [
    "AdhocMigrationRequest",
    "AdhocMigrationResult",
    "AdhocMigrator",
]
