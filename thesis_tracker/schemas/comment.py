"""
Comment schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    """Comment creation request."""

    text: str = Field(..., min_length=1, max_length=5000)


class CommentAuthor(BaseModel):
    id: uuid.UUID
    last_name: str
    first_name: str
    middle_name: Optional[str] = None


class CommentResponse(BaseModel):
    """Comment response."""

    id: uuid.UUID
    thesis_id: uuid.UUID
    author: Optional[CommentAuthor] = None
    phase: int
    text: str
    sent: datetime
