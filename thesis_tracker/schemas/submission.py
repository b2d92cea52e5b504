"""
Submission schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AttachmentInfo(BaseModel):
    """Attachment metadata; the payload is only served by the download route."""

    id: uuid.UUID
    original_name: str
    mime: str
    size: int

    class Config:
        from_attributes = True


class SubmissionCreated(BaseModel):
    """Response to a new submission."""

    id: uuid.UUID
    submitter: uuid.UUID
    submitted: datetime
    phase: int


class SubmissionSummary(BaseModel):
    """Submission as embedded in thesis responses."""

    id: uuid.UUID
    submitter: uuid.UUID
    submitted: datetime
    phase: int
    attachments: List[AttachmentInfo] = []


class ThesisRef(BaseModel):
    id: uuid.UUID
    title: str


class SubmitterInfo(BaseModel):
    id: uuid.UUID
    last_name: str
    first_name: str
    middle_name: Optional[str] = None


class SubmissionResponse(BaseModel):
    """A single submission with its thesis and submitter."""

    id: uuid.UUID
    thesis: ThesisRef
    submitter: Optional[SubmitterInfo] = None
    submitted: datetime
    phase: int
    attachments: List[AttachmentInfo] = []
