"""
Kernel Data Models

SQLAlchemy models for accounts, theses, submissions, deadlines, comments and
the audit log.
"""

from thesis_tracker.kernel.models.base import Base, TimestampMixin, generate_uuid
from thesis_tracker.kernel.models.account import Account, AccountRole
from thesis_tracker.kernel.models.thesis import (
    Thesis,
    ThesisGrade,
    ThesisStatus,
    MemberRole,
    MEMBER_LIMITS,
    PHASES,
)
from thesis_tracker.kernel.models.submission import Submission, Attachment
from thesis_tracker.kernel.models.deadline import SubmissionDeadline
from thesis_tracker.kernel.models.comment import Comment
from thesis_tracker.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # Accounts
    "Account",
    "AccountRole",
    # Thesis
    "Thesis",
    "ThesisGrade",
    "ThesisStatus",
    "MemberRole",
    "MEMBER_LIMITS",
    "PHASES",
    # Submissions
    "Submission",
    "Attachment",
    "SubmissionDeadline",
    # Collaboration
    "Comment",
    # Event Log
    "EventLog",
    "EventType",
]
