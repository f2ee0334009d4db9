"""Audit Log Model - Immutable record of every admin-triggered mutation."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from ridetrust.models.common import CamelModel
from ridetrust.utils.timezone_utils import ensure_utc


# Ordered field name -> serializable value; each action snapshots its own fields
Snapshot = Dict[str, Any]


class AuditDiff(CamelModel):
    """Only the fields that changed, not full entity dumps."""
    before: Optional[Snapshot] = None
    after: Optional[Snapshot] = None


class AuditLogEntry(CamelModel):
    """
    Audit log entry stored in MongoDB.

    SECURITY: Entries are append-only. Nothing in this codebase updates or
    deletes them once written.

    Fields:
    - id: Unique UUID assigned on append
    - admin_uid: Acting admin
    - action: Free-form verb (recalculate_trust_score, hide_rating, ...)
    - entity_type: user, rating, ride, ...
    - entity_id: Target entity, None for entity-less actions
    - diff: Before/after snapshots
    - created_at: When the entry was written
    """
    id: str = Field(..., description="Unique entry ID")
    admin_uid: str
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    diff: Optional[AuditDiff] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditLogCreate(CamelModel):
    """Data required to append an audit entry."""
    admin_uid: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    entity_id: Optional[str] = None
    diff: Optional[AuditDiff] = None


class AuditFilters(CamelModel):
    """Exact-match filters plus an inclusive creation-time range."""
    admin_uid: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Naive bounds are read as UTC so both ends compare with stored timestamps."""
        return ensure_utc(value) if value is not None else None
