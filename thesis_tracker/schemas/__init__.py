"""
Pydantic schemas for API request/response validation.
"""

from thesis_tracker.schemas.common import ErrorResponse, HealthResponse
from thesis_tracker.schemas.thesis import (
    MemberSummary,
    AuthorSummary,
    ThesisGradeResponse,
    LatestSubmission,
    ThesisResponse,
    ThesisUpdate,
    StatusChangeRequest,
)
from thesis_tracker.schemas.submission import (
    AttachmentInfo,
    SubmissionCreated,
    SubmissionSummary,
    SubmissionResponse,
)
from thesis_tracker.schemas.comment import CommentCreate, CommentResponse
from thesis_tracker.schemas.deadline import DeadlineEntries, DeadlineMap, DeadlineValue

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    # Thesis
    "MemberSummary",
    "AuthorSummary",
    "ThesisGradeResponse",
    "LatestSubmission",
    "ThesisResponse",
    "ThesisUpdate",
    "StatusChangeRequest",
    # Submission
    "AttachmentInfo",
    "SubmissionCreated",
    "SubmissionSummary",
    "SubmissionResponse",
    # Comment
    "CommentCreate",
    "CommentResponse",
    # Deadline
    "DeadlineEntries",
    "DeadlineMap",
    "DeadlineValue",
]
