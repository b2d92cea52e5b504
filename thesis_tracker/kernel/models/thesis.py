"""
Thesis models: the thesis record and its grade history.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from thesis_tracker.kernel.models.base import Base, TimestampMixin, generate_uuid


class ThesisStatus(str, Enum):
    """Lifecycle status of a thesis."""

    NEW = "new"
    FOR_CHECKING = "for_checking"
    CHECKED = "checked"
    ENDORSED = "endorsed"
    REDEFENSE = "redefense"
    PASS = "pass"
    FAIL = "fail"
    FINAL = "final"


class MemberRole(str, Enum):
    """Membership lists carried by a thesis."""

    AUTHOR = "authors"
    ADVISER = "advisers"
    PANELIST = "panelists"


# (minimum, maximum) members per list
MEMBER_LIMITS = {
    MemberRole.AUTHOR: (1, 4),
    MemberRole.ADVISER: (1, 2),
    MemberRole.PANELIST: (0, 4),
}

PHASES = (1, 2, 3)


class Thesis(Base, TimestampMixin):
    """
    A thesis project moving through phases and review statuses.

    Member lists are stored as ordered JSON arrays of account ids (strings).
    ``approved`` is tri-state: ``None`` is treated as approved for listing.
    """

    __tablename__ = "theses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    authors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    advisers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    panelists: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    phase: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    status: Mapped[ThesisStatus] = mapped_column(
        String(50),
        default=ThesisStatus.NEW,
        nullable=False,
    )
    approved: Mapped[Optional[bool]] = mapped_column(
        Boolean,
        nullable=True,
    )
    locked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    inactive: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_theses_status_phase", "status", "phase"),
    )

    def members(self, role: MemberRole) -> List[str]:
        return list(getattr(self, role.value) or [])

    def has_author(self, account_id: uuid.UUID) -> bool:
        return str(account_id) in self.members(MemberRole.AUTHOR)

    def has_member(self, account_id: uuid.UUID) -> bool:
        key = str(account_id)
        return any(key in self.members(role) for role in MemberRole)

    def __repr__(self) -> str:
        return f"<Thesis {self.title[:50]} {self.status}>"


class ThesisGrade(Base):
    """
    Dated thesis-level grade snapshot.

    Kept apart from ``Account.grade``: this is the grade of the thesis as a
    whole at a point in time, newest entry being the current one.
    """

    __tablename__ = "thesis_grades"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    thesis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("theses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    graded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    value: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    remarks: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    graded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ThesisGrade thesis={self.thesis_id} value={self.value}>"
