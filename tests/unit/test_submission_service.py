"""Unit tests for deadline-gated submission admission."""

import datetime

import pytest
from sqlalchemy import func, select

from thesis_tracker.engines.admission.submission_service import IncomingFile, SubmissionService
from thesis_tracker.engines.deadlines.deadline_service import DeadlineService, closing_instant
from thesis_tracker.kernel.errors import BadRequest, Forbidden
from thesis_tracker.kernel.models import AccountRole, Submission, ThesisStatus

DEADLINE = datetime.date(2025, 3, 1)


def _files():
    return [IncomingFile(original_name="chapter1.pdf", mime="application/pdf", data=b"%PDF-1.4")]


async def _submission_count(session):
    return (await session.execute(select(func.count()).select_from(Submission))).scalar_one()


class TestDeadlineBoundary:

    @pytest.mark.asyncio
    async def test_closing_instant_is_rejected(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        thesis = await make_thesis([student], [faculty])
        await DeadlineService(db_session).set_deadlines({"1": DEADLINE.isoformat()}, admin)

        with pytest.raises(Forbidden, match="beyond deadline"):
            await SubmissionService(db_session).submit(
                thesis.id, student, _files(), now=closing_instant(DEADLINE)
            )

        assert await _submission_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_one_second_before_is_admitted(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        created = await make_thesis([student], [faculty])
        await DeadlineService(db_session).set_deadlines({"1": DEADLINE.isoformat()}, admin)
        just_before = closing_instant(DEADLINE) - datetime.timedelta(seconds=1)

        service = SubmissionService(db_session)
        submission = await service.submit(created.id, student, _files(), now=just_before)

        assert submission.phase == 1
        assert submission.submitted == just_before
        assert await _submission_count(db_session) == 1
        thesis = await service.lifecycle.get_thesis(created.id)
        assert thesis.status == ThesisStatus.FOR_CHECKING


class TestFileChecks:

    def test_no_files(self):
        with pytest.raises(BadRequest, match="At least one file"):
            SubmissionService.check_files([])

    def test_oversized_file(self):
        big = IncomingFile(original_name="scan.pdf", data=b"0" * (25 * 1024 * 1024 + 1))
        with pytest.raises(BadRequest, match="exceeds 25 MB"):
            SubmissionService.check_files([big])
