"""
Thesis schemas.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from thesis_tracker.engines.grading.grading_service import StudentGrade
from thesis_tracker.schemas.submission import SubmissionSummary


class MemberSummary(BaseModel):
    """Adviser or panelist as shown on a thesis."""

    id: uuid.UUID
    last_name: str
    first_name: str
    middle_name: Optional[str] = None


class AuthorSummary(MemberSummary):
    """Author with their current grade."""

    grade: Optional[float] = None
    remarks: Optional[str] = None


class ThesisGradeResponse(BaseModel):
    """One thesis-level grade snapshot."""

    graded_at: datetime
    value: Optional[float] = None
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class LatestSubmission(BaseModel):
    latest: uuid.UUID
    when: datetime


class ThesisResponse(BaseModel):
    """Thesis as returned by list and detail routes."""

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    authors: List[AuthorSummary] = []
    advisers: List[MemberSummary] = []
    panelists: List[MemberSummary] = []
    phase: int
    status: str
    approved: bool
    locked: bool
    grade: Optional[float] = None
    remarks: Optional[str] = None
    grades: List[ThesisGradeResponse] = []
    submission: Optional[LatestSubmission] = None
    submissions: Optional[List[SubmissionSummary]] = None


class ThesisUpdate(BaseModel):
    """
    Thesis edit request.

    Only supplied fields are applied. Member list sizes are checked by the
    lifecycle service so a bad list is a 400 rather than a validation error.
    """

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    authors: Optional[List[uuid.UUID]] = None
    advisers: Optional[List[uuid.UUID]] = None
    panelists: Optional[List[uuid.UUID]] = None
    status: Optional[str] = None
    phase: Optional[int] = None


class StatusChangeRequest(BaseModel):
    """
    Staff action on a thesis.

    - approve: administrators approve the thesis
    - status: move to ``status``
    - grade: apply per-student ``grades``, and optionally append a
      thesis-level ``grade`` / ``remarks`` snapshot
    """

    type: Literal["approve", "status", "grade"]
    status: Optional[str] = None
    grades: Optional[Dict[str, StudentGrade]] = None
    grade: Optional[float] = None
    remarks: Optional[str] = None
    password: Optional[str] = None
