"""
Builders for thesis and submission response bodies.
"""

import uuid
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.engines.admission.submission_service import SubmissionService
from thesis_tracker.engines.grading.grading_service import GradingService
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.submission import Submission
from thesis_tracker.kernel.models.thesis import Thesis, ThesisGrade
from thesis_tracker.schemas.submission import (
    AttachmentInfo,
    SubmissionResponse,
    SubmissionSummary,
    SubmitterInfo,
    ThesisRef,
)
from thesis_tracker.schemas.thesis import (
    AuthorSummary,
    LatestSubmission,
    MemberSummary,
    ThesisGradeResponse,
    ThesisResponse,
)


async def load_accounts(session: AsyncSession, ids: Iterable[str]) -> Dict[str, Account]:
    """Accounts keyed by string id; malformed or unknown ids are left out."""
    wanted = set()
    for value in ids:
        try:
            wanted.add(uuid.UUID(str(value)))
        except ValueError:
            continue
    if not wanted:
        return {}
    result = await session.execute(select(Account).where(Account.id.in_(wanted)))
    return {str(a.id): a for a in result.scalars().all()}


def _member(account: Account) -> MemberSummary:
    return MemberSummary(
        id=account.id,
        last_name=account.last_name,
        first_name=account.first_name,
        middle_name=account.middle_name,
    )


def _author(account: Account) -> AuthorSummary:
    return AuthorSummary(
        id=account.id,
        last_name=account.last_name,
        first_name=account.first_name,
        middle_name=account.middle_name,
        grade=account.grade,
        remarks=account.remarks,
    )


def submission_summary(submission: Submission) -> SubmissionSummary:
    return SubmissionSummary(
        id=submission.id,
        submitter=submission.submitter_id,
        submitted=submission.submitted,
        phase=submission.phase,
        attachments=[AttachmentInfo.model_validate(a) for a in submission.attachments],
    )


def build_thesis_response(
    thesis: Thesis,
    accounts: Dict[str, Account],
    grades: Sequence[ThesisGrade] = (),
    submissions: Sequence[Submission] = (),
    include_submissions: bool = False,
) -> ThesisResponse:
    """
    Args:
        thesis: The thesis
        accounts: Lookup holding at least the thesis members
        grades: Thesis grade history, newest first
        submissions: Thesis submissions, newest first
        include_submissions: Embed every submission, not just a pointer to the latest
    """
    latest: Optional[LatestSubmission] = None
    if submissions:
        latest = LatestSubmission(latest=submissions[0].id, when=submissions[0].submitted)

    current = grades[0] if grades else None
    return ThesisResponse(
        id=thesis.id,
        title=thesis.title,
        description=thesis.description,
        authors=[_author(accounts[i]) for i in thesis.authors if i in accounts],
        advisers=[_member(accounts[i]) for i in thesis.advisers if i in accounts],
        panelists=[_member(accounts[i]) for i in thesis.panelists if i in accounts],
        phase=thesis.phase,
        status=str(getattr(thesis.status, "value", thesis.status)),
        approved=thesis.approved is not False,
        locked=thesis.locked,
        grade=current.value if current else None,
        remarks=current.remarks if current else None,
        grades=[ThesisGradeResponse.model_validate(g) for g in grades],
        submission=latest,
        submissions=[submission_summary(s) for s in submissions] if include_submissions else None,
    )


async def present_theses(
    session: AsyncSession,
    theses: List[Thesis],
    include_submissions: bool = False,
) -> List[ThesisResponse]:
    """Response bodies for several theses with batched lookups."""
    member_ids = [m for t in theses for m in (*t.authors, *t.advisers, *t.panelists)]
    accounts = await load_accounts(session, member_ids)

    thesis_ids = [t.id for t in theses]
    histories = await GradingService(session).histories(thesis_ids)

    by_thesis: Dict[uuid.UUID, List[Submission]] = {}
    for submission in await SubmissionService(session).list_for_thesis(thesis_ids):
        by_thesis.setdefault(submission.thesis_id, []).append(submission)

    return [
        build_thesis_response(
            thesis,
            accounts,
            grades=histories.get(thesis.id, []),
            submissions=by_thesis.get(thesis.id, []),
            include_submissions=include_submissions,
        )
        for thesis in theses
    ]


async def present_submission(
    session: AsyncSession,
    thesis: Thesis,
    submission: Submission,
) -> SubmissionResponse:
    submitter = await session.get(Account, submission.submitter_id)
    return SubmissionResponse(
        id=submission.id,
        thesis=ThesisRef(id=thesis.id, title=thesis.title),
        submitter=SubmitterInfo(
            id=submitter.id,
            last_name=submitter.last_name,
            first_name=submitter.first_name,
            middle_name=submitter.middle_name,
        ) if submitter else None,
        submitted=submission.submitted,
        phase=submission.phase,
        attachments=[AttachmentInfo.model_validate(a) for a in submission.attachments],
    )
