"""Unit tests for the roster workbook builder."""

import uuid
from io import BytesIO

from openpyxl import load_workbook

from thesis_tracker.engines.export.roster_export import (
    GROUPS_SHEET_HEADERS,
    build_roster_workbook,
    workbook_bytes,
)
from thesis_tracker.kernel.models import Account, AccountRole, Thesis, ThesisStatus


def _account(last, first, role=AccountRole.STUDENT, grade=None):
    return Account(
        id=uuid.uuid4(),
        email=f"{last.lower()}@example.edu",
        password_hash="x",
        last_name=last,
        first_name=first,
        role=role,
        grade=grade,
    )


def _thesis(title, phase, authors, advisers, panelists=()):
    return Thesis(
        id=uuid.uuid4(),
        title=title,
        authors=[str(a.id) for a in authors],
        advisers=[str(a.id) for a in advisers],
        panelists=[str(a.id) for a in panelists],
        phase=phase,
        status=ThesisStatus.NEW,
    )


class TestRosterWorkbook:

    def setup_method(self):
        self.ana = _account("Reyes", "Ana", grade=1.5)
        self.ben = _account("Santos", "Ben")
        self.cruz = _account("Cruz", "Carla")
        self.adviser = _account("Garcia", "Dante", AccountRole.FACULTY)
        self.panel = _account("Lim", "Elena", AccountRole.FACULTY)
        self.theses = [
            _thesis("Alpha", 1, [self.ana, self.ben], [self.adviser], [self.panel]),
            _thesis("Beta", 2, [self.cruz], [self.adviser]),
        ]
        everyone = [self.ana, self.ben, self.cruz, self.adviser, self.panel]
        self.accounts = {str(a.id): a for a in everyone}

    def test_sheet_names(self):
        wb = build_roster_workbook(self.theses, self.accounts)
        assert wb.sheetnames == ["THSST1", "THSST2", "THSST3", "Thesis Groups"]

    def test_phase_sheets_list_authors(self):
        wb = build_roster_workbook(self.theses, self.accounts)

        rows1 = list(wb["THSST1"].iter_rows(values_only=True))
        assert rows1 == [
            ("Name", "Group", "Grade"),
            ("Reyes, Ana", 1, "1.5"),
            ("Santos, Ben", 1, "0.0"),
        ]
        rows2 = list(wb["THSST2"].iter_rows(values_only=True))
        assert rows2[1] == ("Cruz, Carla", 2, "0.0")
        assert wb["THSST3"].max_row == 1

    def test_groups_sheet(self):
        wb = build_roster_workbook(self.theses, self.accounts)
        ws = wb["Thesis Groups"]

        assert ws["A1"].value == "Thesis Information"
        assert ws["D1"].value == "Member Information"
        assert ws["I1"].value == "Adviser / Panel Information"
        assert {str(r) for r in ws.merged_cells.ranges} == {"A1:C1", "D1:H1", "I1:M1"}
        assert [c.value for c in ws[2]] == GROUPS_SHEET_HEADERS

        alpha = [c.value for c in ws[3]]
        assert alpha[:3] == [1, "Alpha", 1]
        assert [v for v in alpha[3:7] if v] == ["Reyes, Ana", "Santos, Ben"]
        assert alpha[7] == 2
        assert alpha[8] == "Garcia, Dante"
        assert alpha[9] == "Lim, Elena"

    def test_unknown_members_are_skipped(self):
        ghost = str(uuid.uuid4())
        self.theses[1].authors.append(ghost)

        wb = build_roster_workbook(self.theses, self.accounts)

        assert wb["THSST2"].max_row == 2
        assert [c.value for c in wb["Thesis Groups"][4]][7] == 1

    def test_bytes_load_back(self):
        content = workbook_bytes(build_roster_workbook(self.theses, self.accounts))

        wb = load_workbook(BytesIO(content))
        assert wb.sheetnames[-1] == "Thesis Groups"
