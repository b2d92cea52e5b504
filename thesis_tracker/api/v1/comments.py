"""
Comment endpoints - discussion on a thesis.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import select

from thesis_tracker.api.deps import CurrentAccount, DbSession, get_client_ip
from thesis_tracker.api.presenters import load_accounts
from thesis_tracker.config import get_settings
from thesis_tracker.kernel.errors import Forbidden, NotFound
from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.comment import Comment
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.permissions.permission_service import require_author_if_student
from thesis_tracker.orchestration.state_machine import ThesisStateMachine
from thesis_tracker.schemas.comment import CommentAuthor, CommentCreate, CommentResponse

router = APIRouter()


def _comment_response(comment: Comment, author: Optional[Account] = None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        thesis_id=comment.thesis_id,
        author=CommentAuthor(
            id=author.id,
            last_name=author.last_name,
            first_name=author.first_name,
            middle_name=author.middle_name,
        ) if author else None,
        phase=comment.phase,
        text=comment.text,
        sent=comment.sent,
    )


@router.get("/thesis/{thesis_id}/comment", response_model=List[CommentResponse])
async def list_comments(thesis_id: uuid.UUID, account: CurrentAccount, db: DbSession):
    """Comments on a thesis, newest first."""
    thesis = await ThesisStateMachine(db).get_thesis(thesis_id)
    require_author_if_student(account, thesis, "You must be an author to be able to read comments.")

    result = await db.execute(
        select(Comment)
        .where(Comment.thesis_id == thesis_id)
        .order_by(Comment.sent.desc(), Comment.id.desc())
    )
    comments = result.scalars().all()
    authors = await load_accounts(db, [c.author_id for c in comments])
    return [_comment_response(c, authors.get(str(c.author_id))) for c in comments]


@router.post(
    "/thesis/{thesis_id}/comment",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    request: Request,
    response: Response,
    thesis_id: uuid.UUID,
    data: CommentCreate,
    account: CurrentAccount,
    db: DbSession,
):
    """Comment on a thesis. The comment is tied to the thesis's current phase."""
    thesis = await ThesisStateMachine(db).get_thesis(thesis_id)
    require_author_if_student(account, thesis, "You must be an author to comment.")

    comment = Comment(
        thesis_id=thesis.id,
        author_id=account.id,
        phase=thesis.phase,
        text=data.text,
        sent=datetime.now(timezone.utc),
    )
    db.add(comment)
    await db.flush()

    event_store = EventStore(db)
    await event_store.log(
        event_type=EventType.COMMENT_ADDED,
        entity_type="comment",
        entity_id=comment.id,
        account_id=account.id,
        payload={"thesis_id": thesis.id, "phase": thesis.phase, "content_preview": data.text[:100]},
        ip_address=get_client_ip(request),
    )

    response.headers["Location"] = (
        f"{get_settings().api_v1_prefix}/thesis/{thesis_id}/comment/{comment.id}"
    )
    return _comment_response(comment, account)


@router.delete("/thesis/{thesis_id}/comment/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    request: Request,
    thesis_id: uuid.UUID,
    comment_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
):
    """Delete one of your own comments."""
    result = await db.execute(
        select(Comment).where(Comment.id == comment_id, Comment.thesis_id == thesis_id)
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found.")
    if comment.author_id != account.id:
        raise Forbidden("You can only delete your own comments.")

    await db.delete(comment)

    event_store = EventStore(db)
    await event_store.log(
        event_type=EventType.COMMENT_DELETED,
        entity_type="comment",
        entity_id=comment_id,
        account_id=account.id,
        payload={"thesis_id": thesis_id},
        ip_address=get_client_ip(request),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
