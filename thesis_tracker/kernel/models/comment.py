"""
Comment model - thesis-scoped discussion.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from thesis_tracker.kernel.models.base import Base, generate_uuid


class Comment(Base):
    """A comment on a thesis, tagged with the phase the thesis was in."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    thesis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("theses.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )
    phase: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    sent: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_comments_thesis_sent", "thesis_id", "sent"),
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} thesis={self.thesis_id}>"
