"""
Submission endpoints - deadline-gated uploads and their retrieval.
"""

import uuid
from typing import Annotated, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Request, Response, UploadFile, status

from thesis_tracker.api.deps import CurrentAccount, DbSession, get_client_ip, read_uploads
from thesis_tracker.api.presenters import present_submission
from thesis_tracker.config import get_settings
from thesis_tracker.engines.admission.submission_service import SubmissionService
from thesis_tracker.orchestration.state_machine import ThesisStateMachine
from thesis_tracker.schemas.submission import SubmissionCreated, SubmissionResponse

router = APIRouter()


@router.post(
    "/thesis/{thesis_id}/submission",
    response_model=SubmissionCreated,
    status_code=status.HTTP_201_CREATED,
)
async def submit(
    request: Request,
    response: Response,
    thesis_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
    files: Annotated[Optional[List[UploadFile]], File()] = None,
):
    """Submit files for the thesis's current phase, before its deadline."""
    submission = await SubmissionService(db).submit(
        thesis_id,
        account,
        await read_uploads(files),
        ip_address=get_client_ip(request),
    )
    response.headers["Location"] = (
        f"{get_settings().api_v1_prefix}/thesis/{thesis_id}/submission/{submission.id}"
    )
    return SubmissionCreated(
        id=submission.id,
        submitter=submission.submitter_id,
        submitted=submission.submitted,
        phase=submission.phase,
    )


@router.get("/thesis/{thesis_id}/submission/latest", response_model=SubmissionResponse)
async def get_latest_submission(thesis_id: uuid.UUID, account: CurrentAccount, db: DbSession):
    thesis = await ThesisStateMachine(db).get_thesis(thesis_id)
    submission = await SubmissionService(db).latest(thesis_id)
    return await present_submission(db, thesis, submission)


@router.get("/thesis/{thesis_id}/submission/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    thesis_id: uuid.UUID,
    submission_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
):
    thesis = await ThesisStateMachine(db).get_thesis(thesis_id)
    submission = await SubmissionService(db).get(thesis_id, submission_id)
    return await present_submission(db, thesis, submission)


@router.get("/thesis/{thesis_id}/submission/{submission_id}/attachment/{attachment_id}")
async def download_attachment(
    thesis_id: uuid.UUID,
    submission_id: uuid.UUID,
    attachment_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
):
    """Raw attachment content with its stored mime type."""
    attachment = await SubmissionService(db).get_attachment(thesis_id, submission_id, attachment_id)
    return Response(
        content=attachment.data,
        media_type=attachment.mime,
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(attachment.original_name)}"},
    )
