"""
Audit Router

Read-only access to the admin audit trail.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ridetrust.config import settings
from ridetrust.dependencies import get_admin_uid, get_reputation_service
from ridetrust.models.audit_log import AuditFilters
from ridetrust.routers.responses import dump, ok
from ridetrust.services.reputation_service import ReputationService
from ridetrust.utils.csv_export import csv_response, render_csv


router = APIRouter()


@router.get("/audit")
async def list_audit_logs(
    filter_admin_uid: Optional[str] = Query(None, alias="adminUid"),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    page: int = 1,
    page_size: int = Query(settings.default_page_size, alias="pageSize"),
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    List audit entries, newest first.

    SECURITY: Only admins should have access to this.
    """
    filters = AuditFilters(
        admin_uid=filter_admin_uid,
        entity_type=entity_type,
        entity_id=entity_id,
        date_from=start_date,
        date_to=end_date,
    )
    result = await service.list_audit_log(filters, page=page, page_size=page_size)
    return ok(result)


AUDIT_CSV_HEADERS = [
    "ID",
    "Admin UID",
    "Action",
    "Entity Type",
    "Entity ID",
    "Before State",
    "After State",
    "Created At",
]


@router.get("/audit/export.csv")
async def export_audit_logs(
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Export the whole audit trail as CSV, newest first.

    The diff is flattened into before/after JSON columns.
    """
    entries = await service.export_audit_log()
    rows = (
        [
            entry.id,
            entry.admin_uid,
            entry.action,
            entry.entity_type,
            entry.entity_id,
            entry.diff.before if entry.diff else None,
            entry.diff.after if entry.diff else None,
            entry.created_at,
        ]
        for entry in entries
    )
    return csv_response(render_csv(AUDIT_CSV_HEADERS, rows), "audit-log-export")


@router.get("/audit/{entry_id}")
async def get_audit_entry(
    entry_id: str,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    return ok(await service.get_audit_entry(entry_id))


@router.get("/audit/entities/{entity_type}/{entity_id}")
async def get_entity_history(
    entity_type: str,
    entity_id: str,
    limit: int = 50,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """Every audit entry that touched one entity, newest first."""
    entries = await service.get_entity_history(entity_type, entity_id, limit=limit)
    return ok([dump(entry) for entry in entries])
