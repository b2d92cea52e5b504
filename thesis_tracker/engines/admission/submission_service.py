"""
Submission Service - deadline-gated admission of student uploads.

Admission runs its preconditions in a fixed order and stops at the first
failure:

1. actor is a student
2. thesis exists and is active
3. thesis is not locked
4. actor is one of its authors
5. a deadline is set for the thesis phase
6. the current time is strictly before that deadline
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from thesis_tracker.config import get_settings
from thesis_tracker.engines.deadlines.deadline_service import DeadlineService
from thesis_tracker.kernel.errors import BadRequest, Forbidden, InternalError, NotFound
from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.models.submission import Attachment, Submission
from thesis_tracker.kernel.models.thesis import Thesis, ThesisStatus
from thesis_tracker.kernel.permissions.permission_service import is_student
from thesis_tracker.logging_config import get_logger
from thesis_tracker.orchestration.state_machine import ThesisStateMachine

logger = get_logger(__name__)

DEFAULT_MIME = "application/octet-stream"


class IncomingFile(BaseModel):
    """A file read from the request, before it is stored."""

    original_name: str
    mime: str = DEFAULT_MIME
    data: bytes


class SubmissionService:
    """Admits, stores and retrieves thesis submissions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)
        self.lifecycle = ThesisStateMachine(session)
        self.deadlines = DeadlineService(session)

    async def submit(
        self,
        thesis_id: uuid.UUID,
        actor: Account,
        files: Sequence[IncomingFile],
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> Submission:
        """
        Admit a new submission for a thesis.

        On success the thesis moves to ``for_checking`` regardless of its
        current status.

        Raises:
            Forbidden: role, lock, authorship or deadline check failed
            NotFound: thesis missing or inactive
            BadRequest: no files, too many, or one too large
            InternalError: nothing could be stored
        """
        if not is_student(actor):
            raise Forbidden("Only students can submit new files.")

        thesis = await self.lifecycle.get_thesis(thesis_id)
        self.lifecycle.ensure_unlocked(thesis)

        if not thesis.has_author(actor.id):
            raise Forbidden("You cannot submit to a thesis in which you are not the author.")

        deadline = await self.deadlines.closing_deadline(thesis.phase)
        if deadline is None:
            raise Forbidden("Cannot submit thesis without deadline.")

        now = now or datetime.now(timezone.utc)
        if now >= deadline:
            logger.warning(
                "Submission rejected after deadline",
                extra={"thesis_id": str(thesis.id), "phase": thesis.phase, "deadline": deadline.isoformat()},
            )
            raise Forbidden("Cannot submit thesis beyond deadline.")

        self.check_files(files)

        submission = await self.record_submission(thesis, actor, files, now)
        thesis.status = ThesisStatus.FOR_CHECKING

        await self.event_store.log(
            event_type=EventType.SUBMISSION_CREATED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={
                "submission_id": submission.id,
                "phase": submission.phase,
                "attachments": len(submission.attachments),
            },
            ip_address=ip_address,
        )
        logger.info(
            "Submission admitted",
            extra={"thesis_id": str(thesis.id), "submission_id": str(submission.id)},
        )
        return submission

    @staticmethod
    def check_files(files: Sequence[IncomingFile]) -> None:
        settings = get_settings()
        if not files:
            raise BadRequest("At least one file is required.")
        if len(files) > settings.max_upload_files:
            raise BadRequest(f"At most {settings.max_upload_files} files can be submitted at once.")

        limit = settings.max_upload_size_mb * 1024 * 1024
        for f in files:
            if len(f.data) > limit:
                raise BadRequest(f"File '{f.original_name}' exceeds {settings.max_upload_size_mb} MB.")

    async def record_submission(
        self,
        thesis: Thesis,
        submitter: Account,
        files: Sequence[IncomingFile],
        now: Optional[datetime] = None,
    ) -> Submission:
        """Store a submission with its attachments, stamped with the thesis phase."""
        submission = Submission(
            thesis_id=thesis.id,
            submitter_id=submitter.id,
            phase=thesis.phase,
            submitted=now or datetime.now(timezone.utc),
        )
        submission.attachments = [
            Attachment(
                position=position,
                original_name=f.original_name,
                mime=f.mime or DEFAULT_MIME,
                size=len(f.data),
                data=f.data,
            )
            for position, f in enumerate(files)
        ]
        self.session.add(submission)
        await self.session.flush()

        if not submission.attachments:
            raise InternalError("Could not add submission.")
        return submission

    async def latest(self, thesis_id: uuid.UUID) -> Submission:
        """Most recent submission; ties on the timestamp go to the larger id."""
        result = await self.session.execute(
            select(Submission)
            .where(Submission.thesis_id == thesis_id)
            .order_by(Submission.submitted.desc(), Submission.id.desc())
            .limit(1)
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise NotFound("Submission not found.")
        return submission

    async def get(self, thesis_id: uuid.UUID, submission_id: uuid.UUID) -> Submission:
        result = await self.session.execute(
            select(Submission).where(
                Submission.id == submission_id,
                Submission.thesis_id == thesis_id,
            )
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise NotFound("Submission not found.")
        return submission

    async def list_for_thesis(self, thesis_ids: Sequence[uuid.UUID]) -> List[Submission]:
        """Submissions of the given theses, newest first."""
        if not thesis_ids:
            return []
        result = await self.session.execute(
            select(Submission)
            .where(Submission.thesis_id.in_(list(thesis_ids)))
            .order_by(Submission.submitted.desc(), Submission.id.desc())
        )
        return list(result.scalars().all())

    async def get_attachment(
        self,
        thesis_id: uuid.UUID,
        submission_id: uuid.UUID,
        attachment_id: uuid.UUID,
    ) -> Attachment:
        """Attachment with its payload loaded; must belong to the exact thesis and submission."""
        await self.get(thesis_id, submission_id)

        result = await self.session.execute(
            select(Attachment)
            .options(undefer(Attachment.data))
            .where(
                Attachment.id == attachment_id,
                Attachment.submission_id == submission_id,
            )
        )
        attachment = result.scalar_one_or_none()
        if attachment is None:
            raise NotFound("Attachment not found.")
        return attachment
