"""
Account model for identity and per-student grading.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from thesis_tracker.kernel.models.base import Base, TimestampMixin, generate_uuid


class AccountRole(str, Enum):
    """Account roles in the system."""
    STUDENT = "student"
    FACULTY = "faculty"
    ADMINISTRATOR = "administrator"


class Account(Base, TimestampMixin):
    """
    Account of a student, faculty member or administrator.

    Accounts are provisioned by the identity service; this table mirrors the
    fields the thesis workflow needs. ``grade`` and ``remarks`` are the
    per-student grade store written by the grading endpoint and are distinct
    from the thesis-level grade history (see ``ThesisGrade``).
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    middle_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    role: Mapped[AccountRole] = mapped_column(
        String(50),
        default=AccountRole.STUDENT,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Student grading
    grade: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    remarks: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    @property
    def display_name(self) -> str:
        """Roster form: ``Last, First``."""
        return f"{self.last_name}, {self.first_name}"

    def __repr__(self) -> str:
        return f"<Account {self.email} {self.role}>"
