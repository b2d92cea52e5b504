"""Unit tests for the thesis lifecycle state machine."""

import uuid

import pytest

from thesis_tracker.kernel.errors import BadRequest, Forbidden, NotFound
from thesis_tracker.kernel.models import AccountRole, EventLog, EventType, MemberRole, ThesisStatus
from thesis_tracker.orchestration.state_machine import (
    ThesisStateMachine,
    can_transition,
    parse_status,
    valid_transitions,
    validate_members,
    validate_phase,
)
from sqlalchemy import select


class TestTransitionTable:

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            ("new", "for_checking"),
            ("new", "endorsed"),
            ("for_checking", "for_checking"),
            ("for_checking", "checked"),
            ("checked", "endorsed"),
            ("endorsed", "redefense"),
            ("redefense", "endorsed"),
            ("pass", "new"),
            ("fail", "for_checking"),
            ("pass", "final"),
        ],
    )
    def test_declared_transitions_are_allowed(self, from_status, to_status):
        assert can_transition(from_status, to_status)

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            ("new", "pass"),
            ("new", "final"),
            ("checked", "checked"),
            ("fail", "final"),
            ("endorsed", "new"),
        ],
    )
    def test_undeclared_transitions_are_rejected(self, from_status, to_status):
        assert not can_transition(from_status, to_status)

    def test_final_is_terminal(self):
        assert valid_transitions("final") == []

    def test_valid_transitions_from_endorsed(self):
        assert valid_transitions("endorsed") == ["fail", "pass", "redefense"]

    def test_table_has_sixteen_edges(self):
        statuses = [s.value for s in ThesisStatus]
        edges = sum(len(valid_transitions(s)) for s in statuses)
        assert edges == 16


class TestParsing:

    def test_parse_status_accepts_known(self):
        assert parse_status("checked") == ThesisStatus.CHECKED

    @pytest.mark.parametrize("value", [None, ""])
    def test_parse_status_requires_value(self, value):
        with pytest.raises(BadRequest, match="Status required"):
            parse_status(value)

    def test_parse_status_rejects_unknown(self):
        with pytest.raises(BadRequest, match="Unknown status"):
            parse_status("archived")

    @pytest.mark.parametrize("phase", [1, 2, 3, "2"])
    def test_validate_phase_accepts_range(self, phase):
        assert validate_phase(phase) == int(phase)

    @pytest.mark.parametrize("phase", [0, 4, -1, "x", None])
    def test_validate_phase_rejects_out_of_range(self, phase):
        with pytest.raises(BadRequest):
            validate_phase(phase)


class TestMemberValidation:

    def _ids(self, n):
        return [uuid.uuid4() for _ in range(n)]

    @pytest.mark.parametrize("count", [1, 4])
    def test_author_bounds_inclusive(self, count):
        ids = self._ids(count)
        assert validate_members(MemberRole.AUTHOR, ids) == [str(i) for i in ids]

    @pytest.mark.parametrize("count", [0, 5])
    def test_author_bounds_exceeded(self, count):
        with pytest.raises(BadRequest, match="Only 1-4 authors"):
            validate_members(MemberRole.AUTHOR, self._ids(count))

    def test_adviser_upper_bound(self):
        with pytest.raises(BadRequest, match="Only 1-2 advisers"):
            validate_members(MemberRole.ADVISER, self._ids(3))

    def test_panelists_may_be_empty(self):
        assert validate_members(MemberRole.PANELIST, []) == []

    def test_panelist_upper_bound(self):
        with pytest.raises(BadRequest, match="Only 0-4 panelists"):
            validate_members(MemberRole.PANELIST, self._ids(5))

    def test_duplicates_rejected(self):
        same = uuid.uuid4()
        with pytest.raises(BadRequest, match="Duplicate"):
            validate_members(MemberRole.AUTHOR, [same, same])


class TestThesisStateMachine:

    @pytest.mark.asyncio
    async def test_set_status_moves_and_logs(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty])

        machine = ThesisStateMachine(db_session)
        thesis = await machine.get_thesis(created.id)
        await machine.set_status(thesis, "for_checking", faculty)
        await db_session.flush()

        assert thesis.status == ThesisStatus.FOR_CHECKING
        assert thesis.locked is False
        events = (await db_session.execute(select(EventLog))).scalars().all()
        assert [e.event_type for e in events] == [EventType.THESIS_STATUS_CHANGED.value]
        assert events[0].payload == {"from_status": "new", "to_status": "for_checking"}

    @pytest.mark.asyncio
    async def test_final_locks(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        created = await make_thesis([student], [admin], status=ThesisStatus.PASS)

        machine = ThesisStateMachine(db_session)
        thesis = await machine.get_thesis(created.id)
        await machine.set_status(thesis, "final", admin)

        assert thesis.locked is True
        with pytest.raises(Forbidden, match="locked"):
            await machine.set_status(thesis, "new", admin)

    @pytest.mark.asyncio
    async def test_students_cannot_change_status(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty])

        machine = ThesisStateMachine(db_session)
        thesis = await machine.get_thesis(created.id)
        with pytest.raises(Forbidden):
            await machine.set_status(thesis, "for_checking", student)

    @pytest.mark.asyncio
    async def test_illegal_transition_leaves_status(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty])

        machine = ThesisStateMachine(db_session)
        thesis = await machine.get_thesis(created.id)
        with pytest.raises(BadRequest, match="new -> pass"):
            await machine.set_status(thesis, "pass", faculty)
        assert thesis.status == ThesisStatus.NEW

    @pytest.mark.asyncio
    async def test_approve_is_admin_only_noop_for_faculty(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        created = await make_thesis([student], [faculty], approved=False)

        machine = ThesisStateMachine(db_session)
        thesis = await machine.get_thesis(created.id)

        assert await machine.approve(thesis, faculty) is False
        assert thesis.approved is False
        assert await machine.approve(thesis, admin) is True
        assert thesis.approved is True

    @pytest.mark.asyncio
    async def test_update_fields_validates_before_writing(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty], title="Original")

        machine = ThesisStateMachine(db_session)
        with pytest.raises(BadRequest):
            await machine.update_fields(
                created.id,
                {"title": "Renamed", "authors": [uuid.uuid4() for _ in range(5)]},
                faculty,
            )

        thesis = await machine.get_thesis(created.id)
        assert thesis.title == "Original"
        assert thesis.authors == [str(student.id)]

    @pytest.mark.asyncio
    async def test_update_fields_rejects_bad_status_before_writing(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty], title="Original")

        machine = ThesisStateMachine(db_session)
        with pytest.raises(BadRequest):
            await machine.update_fields(created.id, {"title": "Renamed", "status": "pass"}, faculty)

        thesis = await machine.get_thesis(created.id)
        assert thesis.title == "Original"

    @pytest.mark.asyncio
    async def test_update_fields_order_of_checks(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        locked = await make_thesis([student], [faculty], locked=True)

        machine = ThesisStateMachine(db_session)
        # Role is checked before existence
        with pytest.raises(Forbidden):
            await machine.update_fields(uuid.uuid4(), {"title": "x"}, student)
        with pytest.raises(NotFound):
            await machine.update_fields(uuid.uuid4(), {"title": "x"}, faculty)
        with pytest.raises(Forbidden, match="locked"):
            await machine.update_fields(locked.id, {"title": "x"}, faculty)

    @pytest.mark.asyncio
    async def test_delete_deactivates_unapproved_and_locks_approved(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        admin = await make_account(AccountRole.ADMINISTRATOR)
        pending = await make_thesis([student], [faculty], approved=False)
        approved = await make_thesis([student], [faculty], approved=True)

        machine = ThesisStateMachine(db_session)
        with pytest.raises(Forbidden):
            await machine.delete(pending.id, faculty)

        retired = await machine.delete(pending.id, admin)
        assert retired.inactive is True
        assert retired.locked is False

        kept = await machine.delete(approved.id, admin)
        assert kept.inactive is False
        assert kept.locked is True

    @pytest.mark.asyncio
    async def test_create_requires_creator_in_group(self, db_session, make_account):
        student = await make_account(AccountRole.STUDENT)
        other = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)

        machine = ThesisStateMachine(db_session)
        with pytest.raises(BadRequest, match="part of the group"):
            await machine.create(other, title="T", authors=[student.id], advisers=[faculty.id])

        thesis = await machine.create(student, title="T", authors=[student.id], advisers=[faculty.id])
        assert thesis.approved is False
        assert thesis.phase == 1
        assert thesis.status == ThesisStatus.NEW

    @pytest.mark.asyncio
    async def test_update_fields_accepts_unchanged_status(self, db_session, make_account, make_thesis):
        student = await make_account(AccountRole.STUDENT)
        faculty = await make_account(AccountRole.FACULTY)
        created = await make_thesis([student], [faculty], status=ThesisStatus.CHECKED)

        machine = ThesisStateMachine(db_session)
        thesis = await machine.update_fields(created.id, {"title": "Renamed", "status": "checked"}, faculty)

        assert thesis.title == "Renamed"
        assert thesis.status == ThesisStatus.CHECKED
        assert thesis.locked is False
