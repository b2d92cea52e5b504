"""
Immutable event log for audit trail.

Every workflow mutation is logged here in the same transaction as the
mutation itself.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from thesis_tracker.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""

    # Thesis events
    THESIS_CREATED = "thesis.created"
    THESIS_UPDATED = "thesis.updated"
    THESIS_STATUS_CHANGED = "thesis.status_changed"
    THESIS_APPROVED = "thesis.approved"
    THESIS_LOCKED = "thesis.locked"
    THESIS_DEACTIVATED = "thesis.deactivated"

    # Grading events
    GRADES_APPLIED = "grading.applied"

    # Submission events
    SUBMISSION_CREATED = "submission.created"
    DEADLINES_UPDATED = "deadline.updated"

    # Collaboration events
    COMMENT_ADDED = "comment.added"
    COMMENT_DELETED = "comment.deleted"

    # Export events
    EXPORT_COMPLETED = "export.completed"


class EventLog(Base):
    """
    Immutable audit event log.

    This table is append-only - no updates or deletes allowed.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )

    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Entity reference
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,  # None for collection-level events (deadlines, export)
        index=True,
    )

    # Actor
    account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_type_time", "event_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
