"""Audit Service - Append-only audit trail for admin-triggered mutations."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError, NotFoundError
from ridetrust.models.audit_log import (
    AuditDiff,
    AuditFilters,
    AuditLogCreate,
    AuditLogEntry,
    Snapshot,
)
from ridetrust.models.common import PaginatedResult, Pagination
from ridetrust.utils.timezone_utils import utc_now


logger = logging.getLogger(__name__)


class AuditService:
    """
    Audit logging service.

    SECURITY: Every admin mutation is recorded with a before/after diff.
    Entries are only ever appended and read; there is no update or delete
    path. Storage faults surface as InternalError, and callers that write
    audit entries as a side effect decide whether to swallow them.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.admin_audit_log

    async def append(self, entry: AuditLogCreate) -> AuditLogEntry:
        """Store an entry, assigning its id and timestamp."""
        log_entry = AuditLogEntry(
            id=str(uuid.uuid4()),
            admin_uid=entry.admin_uid,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            diff=entry.diff,
            created_at=utc_now(),
        )

        try:
            await self.collection.insert_one(log_entry.to_document())
        except PyMongoError as e:
            logger.error(f"Failed to log audit action {entry.action}: {e}")
            raise InternalError(f"Failed to log audit action: {e}") from e

        return log_entry

    async def log_admin_action(
        self,
        admin_uid: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        before: Optional[Snapshot] = None,
        after: Optional[Snapshot] = None,
    ) -> AuditLogEntry:
        """Convenience wrapper building the diff from before/after snapshots."""
        diff = None
        if before is not None or after is not None:
            diff = AuditDiff(before=before, after=after)

        return await self.append(
            AuditLogCreate(
                admin_uid=admin_uid,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                diff=diff,
            )
        )

    @staticmethod
    def build_query(filters: AuditFilters) -> Dict[str, Any]:
        query: Dict[str, Any] = {}

        if filters.admin_uid:
            query["adminUid"] = filters.admin_uid
        if filters.entity_type:
            query["entityType"] = filters.entity_type
        if filters.entity_id:
            query["entityId"] = filters.entity_id

        created_range: Dict[str, Any] = {}
        if filters.date_from:
            created_range["$gte"] = filters.date_from
        if filters.date_to:
            created_range["$lte"] = filters.date_to
        if created_range:
            query["createdAt"] = created_range

        return query

    async def list_entries(
        self, filters: AuditFilters, pagination: Pagination
    ) -> PaginatedResult[AuditLogEntry]:
        """
        Query audit logs with pagination, newest first.

        SECURITY: Only admins should have access to this.
        """
        query = self.build_query(filters)

        try:
            total = await self.collection.count_documents(query)
            cursor = (
                self.collection.find(query)
                .sort("createdAt", DESCENDING)
                .skip(pagination.skip)
                .limit(pagination.page_size)
            )
            docs = await cursor.to_list(length=pagination.page_size)
        except PyMongoError as e:
            logger.error(f"Failed to list audit logs: {e}")
            raise InternalError(f"Failed to list audit logs: {e}") from e

        return PaginatedResult.build(
            [AuditLogEntry.model_validate(doc) for doc in docs], total, pagination
        )

    async def get(self, entry_id: str) -> AuditLogEntry:
        try:
            doc = await self.collection.find_one({"id": entry_id})
        except PyMongoError as e:
            logger.error(f"Failed to get audit log {entry_id}: {e}")
            raise InternalError(f"Failed to get audit log: {e}") from e

        if not doc:
            raise NotFoundError("Audit log entry")

        return AuditLogEntry.model_validate(doc)

    async def get_entity_history(
        self, entity_type: str, entity_id: str, limit: int = 50
    ) -> List[AuditLogEntry]:
        """
        Get all entries that touched one entity, newest first.

        Useful for admin review of a user's score history.
        """
        try:
            cursor = (
                self.collection.find({"entityType": entity_type, "entityId": entity_id})
                .sort("createdAt", DESCENDING)
                .limit(limit)
            )
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error(f"Failed to get history for {entity_type}:{entity_id}: {e}")
            raise InternalError(f"Failed to get entity history: {e}") from e

        return [AuditLogEntry.model_validate(doc) for doc in docs]
