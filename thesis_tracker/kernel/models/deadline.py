"""
Submission deadline model.
"""

import uuid
import datetime

from sqlalchemy import Date, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from thesis_tracker.kernel.models.base import Base, TimestampMixin, generate_uuid


class SubmissionDeadline(Base, TimestampMixin):
    """Closing date for one sub-phase of a thesis phase."""

    __tablename__ = "submission_deadlines"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    phase: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    subphase: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("phase", "subphase", name="uq_submission_deadlines_phase_subphase"),
    )

    def __repr__(self) -> str:
        return f"<SubmissionDeadline phase={self.phase}.{self.subphase} {self.date}>"
