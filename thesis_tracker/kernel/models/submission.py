"""
Submission models - a student's upload event and its attached files.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, LargeBinary, String, Uuid, func
from sqlalchemy.orm import Mapped, deferred, mapped_column, relationship

from thesis_tracker.kernel.models.base import Base, generate_uuid


class Submission(Base):
    """
    One upload event against a thesis.

    ``phase`` is the thesis phase at the time of submission. Records are never
    updated after creation.
    """

    __tablename__ = "submissions"

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
    submitter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("accounts.id"),
        nullable=False,
    )
    phase: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    submitted: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Metadata only; payloads stay deferred until an attachment is downloaded
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="Attachment.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_submissions_thesis_submitted", "thesis_id", "submitted"),
    )

    def __repr__(self) -> str:
        return f"<Submission thesis={self.thesis_id} phase={self.phase}>"


class Attachment(Base):
    """A file bound to exactly one submission."""

    __tablename__ = "attachments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    submission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    mime: Mapped[str] = mapped_column(
        String(255),
        default="application/octet-stream",
        nullable=False,
    )
    size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    data: Mapped[bytes] = deferred(mapped_column(LargeBinary, nullable=False))

    submission: Mapped["Submission"] = relationship(
        "Submission",
        back_populates="attachments",
    )

    def __repr__(self) -> str:
        return f"<Attachment {self.original_name} ({self.size} bytes)>"
