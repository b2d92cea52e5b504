"""
Kernel Layer

Foundational components shared by every engine:
- Data models (accounts, theses, submissions, deadlines, comments)
- Immutable event log (every mutation recorded)
- Identity core (access tokens, password confirmation)
- Permission core (role gates, list visibility)
"""

from thesis_tracker.kernel.models import (
    Account,
    AccountRole,
    Thesis,
    ThesisGrade,
    ThesisStatus,
    MemberRole,
    Submission,
    Attachment,
    SubmissionDeadline,
    Comment,
    EventLog,
    EventType,
)

__all__ = [
    # Identity
    "Account",
    "AccountRole",
    # Thesis
    "Thesis",
    "ThesisGrade",
    "ThesisStatus",
    "MemberRole",
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
