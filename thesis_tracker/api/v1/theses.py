"""
Thesis endpoints - listing, creation, editing, lifecycle actions, deadlines
and the roster export.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import APIRouter, File, Form, Query, Request, Response, UploadFile, status

from thesis_tracker.api.deps import CurrentAccount, DbSession, get_client_ip, read_uploads
from thesis_tracker.api.presenters import present_theses
from thesis_tracker.config import get_settings
from thesis_tracker.engines.admission.submission_service import SubmissionService
from thesis_tracker.engines.deadlines.deadline_service import DeadlineService
from thesis_tracker.engines.export.roster_export import XLSX_MIME, RosterExportService
from thesis_tracker.engines.grading.grading_service import GradingService
from thesis_tracker.kernel.errors import BadRequest, Forbidden
from thesis_tracker.kernel.identity.password import verify_password
from thesis_tracker.kernel.permissions.permission_service import PermissionService, is_query_true
from thesis_tracker.logging_config import get_logger
from thesis_tracker.orchestration.state_machine import ThesisStateMachine
from thesis_tracker.schemas.deadline import DeadlineEntries, DeadlineMap
from thesis_tracker.schemas.thesis import StatusChangeRequest, ThesisResponse, ThesisUpdate

logger = get_logger(__name__)

router = APIRouter()

EXPORT_FILENAME = "thesis-roster.xlsx"


def _thesis_location(thesis_id: uuid.UUID) -> str:
    return f"{get_settings().api_v1_prefix}/thesis/{thesis_id}"


def _parse_ids(values: Optional[List[str]], label: str) -> Optional[List[uuid.UUID]]:
    """Form member lists arrive as repeated string fields."""
    if values is None:
        return None
    ids = []
    for value in values:
        try:
            ids.append(uuid.UUID(value))
        except ValueError:
            raise BadRequest(f"Invalid account id in {label}: '{value}'.")
    return ids


@router.get("", response_model=List[ThesisResponse])
async def list_theses(
    account: CurrentAccount,
    db: DbSession,
    all_param: Optional[str] = Query(None, alias="all", description="Include theses the requester is not a member of"),
    q: Optional[str] = Query(None, description="Case-insensitive title search"),
    status_filter: Optional[str] = Query(None, alias="status"),
    phase: Optional[str] = Query(None),
    show_pending: Optional[str] = Query(None, alias="showPending", description="'show' or 'all'"),
    get_submissions: Optional[str] = Query(None, alias="getSubmissions"),
):
    """List theses visible to the requester, sorted by title."""
    theses = await PermissionService(db).list_visible_theses(
        account,
        all_param=all_param,
        q=q,
        status_filter=status_filter,
        phase=phase,
        show_pending=show_pending,
    )
    return await present_theses(db, theses, include_submissions=is_query_true(get_submissions))


@router.post("", response_model=ThesisResponse, status_code=status.HTTP_201_CREATED)
async def create_thesis(
    request: Request,
    response: Response,
    account: CurrentAccount,
    db: DbSession,
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    authors: Annotated[Optional[List[str]], Form()] = None,
    advisers: Annotated[Optional[List[str]], Form()] = None,
    panelists: Annotated[Optional[List[str]], Form()] = None,
    phase: Annotated[Optional[int], Form()] = None,
    files: Annotated[Optional[List[UploadFile]], File()] = None,
):
    """
    Register a thesis.

    Files sent along become the thesis's first submission; deadlines do not
    apply to it.
    """
    lifecycle = ThesisStateMachine(db)
    thesis = await lifecycle.create(
        account,
        title=title,
        description=description,
        authors=_parse_ids(authors, "authors"),
        advisers=_parse_ids(advisers, "advisers"),
        panelists=_parse_ids(panelists, "panelists"),
        phase=phase,
        ip_address=get_client_ip(request),
    )

    incoming = await read_uploads(files)
    if incoming:
        submissions = SubmissionService(db)
        submissions.check_files(incoming)
        await submissions.record_submission(thesis, account, incoming)

    response.headers["Location"] = _thesis_location(thesis.id)
    return (await present_theses(db, [thesis]))[0]


@router.get("/export")
async def export_roster(request: Request, account: CurrentAccount, db: DbSession):
    """Download the grading roster workbook. Administrators only."""
    content = await RosterExportService(db).export(account, ip_address=get_client_ip(request))
    return Response(
        content=content,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.get("/deadline", response_model=DeadlineMap)
async def get_deadlines(account: CurrentAccount, db: DbSession):
    """Submission deadlines per phase, ordered by sub-phase."""
    return await DeadlineService(db).get_deadlines()


@router.post("/deadline", status_code=status.HTTP_204_NO_CONTENT)
async def set_deadlines(
    request: Request,
    data: DeadlineEntries,
    account: CurrentAccount,
    db: DbSession,
):
    """Upsert deadlines. The whole batch is applied or none of it."""
    await DeadlineService(db).set_deadlines(data, account, ip_address=get_client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{thesis_id}", response_model=ThesisResponse)
async def get_thesis(
    thesis_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
    get_submissions: Optional[str] = Query(None, alias="getSubmissions"),
):
    """Get a thesis with members, grade history and latest submission."""
    thesis = await ThesisStateMachine(db).get_thesis(thesis_id)
    return (await present_theses(db, [thesis], include_submissions=is_query_true(get_submissions)))[0]


@router.put("/{thesis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_thesis(
    request: Request,
    thesis_id: uuid.UUID,
    data: ThesisUpdate,
    account: CurrentAccount,
    db: DbSession,
):
    """Edit a thesis. Staff only; locked theses cannot be edited."""
    await ThesisStateMachine(db).update_fields(
        thesis_id,
        data.model_dump(exclude_unset=True),
        account,
        ip_address=get_client_ip(request),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{thesis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_thesis(
    request: Request,
    thesis_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
):
    """Retire a thesis: deactivate it if never approved, lock it otherwise."""
    await ThesisStateMachine(db).delete(thesis_id, account, ip_address=get_client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{thesis_id}/status", status_code=status.HTTP_204_NO_CONTENT)
async def change_status(
    request: Request,
    thesis_id: uuid.UUID,
    data: StatusChangeRequest,
    account: CurrentAccount,
    db: DbSession,
):
    """
    Approve, move or grade a thesis.

    The actor re-enters their password. Grading and any status change made
    here share one transaction.
    """
    ip_address = get_client_ip(request)
    lifecycle = ThesisStateMachine(db)
    thesis = await lifecycle.open_for_change(thesis_id, account)

    if get_settings().require_password_confirmation:
        if not data.password or not verify_password(data.password, account.password_hash):
            logger.warning("Status change with wrong password", extra={"thesis_id": str(thesis_id)})
            raise Forbidden("Incorrect password.")

    if data.type == "approve":
        await lifecycle.approve(thesis, account, ip_address=ip_address)
    elif data.type == "status":
        await lifecycle.set_status(thesis, data.status, account, ip_address=ip_address)
    elif data.type == "grade":
        grading = GradingService(db)
        await grading.apply_grades(thesis, data.grades or {}, account, ip_address=ip_address)
        if data.grade is not None or data.remarks is not None:
            await grading.record_thesis_grade(thesis, data.grade, data.remarks, account, ip_address=ip_address)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
