"""Unit tests for role gates and list visibility."""

import uuid

import pytest

from thesis_tracker.kernel.errors import Forbidden
from thesis_tracker.kernel.models import Account, AccountRole, Thesis
from thesis_tracker.kernel.permissions.permission_service import (
    PermissionService,
    is_query_true,
    require_author_if_student,
    require_staff,
)


def _account(role):
    return Account(id=uuid.uuid4(), email="x@example.edu", password_hash="x",
                   last_name="L", first_name="F", role=role)


@pytest.mark.parametrize("value,expected", [
    (None, False), ("", True), ("1", True), ("true", True), ("TRUE", True),
    ("0", False), ("false", False), ("no", False),
])
def test_is_query_true(value, expected):
    assert is_query_true(value) is expected


@pytest.mark.parametrize("role,all_param,expected", [
    (AccountRole.ADMINISTRATOR, None, False),
    (AccountRole.ADMINISTRATOR, "false", True),
    (AccountRole.FACULTY, None, True),
    (AccountRole.FACULTY, "true", False),
    (AccountRole.STUDENT, None, True),
    (AccountRole.STUDENT, "", False),
])
def test_restrict_to_membership(role, all_param, expected):
    assert PermissionService.restrict_to_membership(_account(role), all_param) is expected


def test_require_staff():
    require_staff(_account(AccountRole.FACULTY), "nope")
    require_staff(_account(AccountRole.ADMINISTRATOR), "nope")
    with pytest.raises(Forbidden, match="nope"):
        require_staff(_account(AccountRole.STUDENT), "nope")


def test_require_author_if_student():
    student = _account(AccountRole.STUDENT)
    outsider = _account(AccountRole.STUDENT)
    faculty = _account(AccountRole.FACULTY)
    thesis = Thesis(id=uuid.uuid4(), title="T", authors=[str(student.id)], advisers=[], panelists=[])

    require_author_if_student(student, thesis, "authors only")
    require_author_if_student(faculty, thesis, "authors only")
    with pytest.raises(Forbidden, match="authors only"):
        require_author_if_student(outsider, thesis, "authors only")


class TestListVisibleTheses:

    @pytest.mark.asyncio
    async def test_membership_and_pending(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        other = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        mine = await make_thesis([student], [faculty], title="Alpha")
        theirs = await make_thesis([other], [faculty], title="Beta")
        pending = await make_thesis([student], [faculty], title="Gamma", approved=False)

        service = PermissionService(db_session)

        listed = await service.list_visible_theses(student)
        assert [t.id for t in listed] == [mine.id]

        listed = await service.list_visible_theses(student, all_param="true")
        assert [t.id for t in listed] == [mine.id, theirs.id]

        listed = await service.list_visible_theses(admin)
        assert [t.id for t in listed] == [mine.id, theirs.id]

        listed = await service.list_visible_theses(student, show_pending="show")
        assert [t.id for t in listed] == [pending.id]

        listed = await service.list_visible_theses(faculty, show_pending="all")
        assert [t.id for t in listed] == [mine.id, theirs.id, pending.id]
