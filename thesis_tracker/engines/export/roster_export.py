"""
Roster Export - grading sheets and group list as an Excel workbook.

Covers every active thesis that is neither locked nor final. Sheets:

- THSST1..THSST3: one row per author of a thesis in that phase
- Thesis Groups: one row per thesis with members, adviser and panel
"""

import uuid
from io import BytesIO
from typing import Dict, List, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.models.thesis import PHASES, Thesis, ThesisStatus
from thesis_tracker.kernel.permissions.permission_service import require_administrator
from thesis_tracker.logging_config import get_logger

logger = get_logger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

PHASE_SHEET_HEADERS = ["Name", "Group", "Grade"]
GROUPS_SHEET_TITLE = "Thesis Groups"
GROUPS_HEADER_BAND = [
    ("A1:C1", "Thesis Information"),
    ("D1:H1", "Member Information"),
    ("I1:M1", "Adviser / Panel Information"),
]
GROUPS_SHEET_HEADERS = [
    "Group ID", "Title", "Thesis Stage",
    "Member 1", "Member 2", "Member 3", "Member 4", "Total Count",
    "Thesis Adviser",
    "Panel Member 1", "Panel Member 2", "Panel Member 3", "Panel Member 4",
]
MEMBER_COLUMNS = 4
DEFAULT_GRADE = "0.0"


def phase_sheet_title(phase: int) -> str:
    return f"THSST{phase}"


def _names(ids: Sequence[str], accounts: Mapping[str, Account]) -> List[str]:
    return [accounts[i].display_name for i in ids if i in accounts]


def _pad(values: List[str], width: int) -> List[str]:
    return values[:width] + [""] * max(0, width - len(values))


def _grade_cell(account: Account) -> str:
    return DEFAULT_GRADE if account.grade is None else f"{account.grade:.1f}"


def build_roster_workbook(
    theses: Sequence[Thesis],
    accounts: Mapping[str, Account],
) -> Workbook:
    """
    Build the roster workbook.

    Args:
        theses: Theses to include, in group order (group ids are 1-based
            positions in this sequence)
        accounts: Account lookup keyed by string id

    Returns:
        An openpyxl Workbook
    """
    wb = Workbook()
    header_font = Font(bold=True)

    phase_sheets = {}
    for i, phase in enumerate(PHASES):
        ws = wb.active if i == 0 else wb.create_sheet()
        ws.title = phase_sheet_title(phase)
        ws.append(PHASE_SHEET_HEADERS)
        for cell in ws[1]:
            cell.font = header_font
        phase_sheets[phase] = ws

    groups = wb.create_sheet(GROUPS_SHEET_TITLE)
    for cell_range, label in GROUPS_HEADER_BAND:
        groups.merge_cells(cell_range)
        anchor = groups[cell_range.split(":")[0]]
        anchor.value = label
        anchor.font = header_font
        anchor.alignment = Alignment(horizontal="center")
    groups.append(GROUPS_SHEET_HEADERS)
    for cell in groups[2]:
        cell.font = header_font

    for group_id, thesis in enumerate(theses, start=1):
        ws = phase_sheets.get(thesis.phase)
        if ws is not None:
            for author_id in thesis.authors:
                author = accounts.get(author_id)
                if author is None:
                    continue
                ws.append([author.display_name, group_id, _grade_cell(author)])

        members = _names(thesis.authors, accounts)
        advisers = _names(thesis.advisers, accounts)
        panel = _names(thesis.panelists, accounts)
        groups.append(
            [group_id, thesis.title, thesis.phase]
            + _pad(members, MEMBER_COLUMNS)
            + [len(members), advisers[0] if advisers else ""]
            + _pad(panel, MEMBER_COLUMNS)
        )

    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class RosterExportService:
    """Collects exportable theses and renders the roster workbook."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def exportable_theses(self) -> List[Thesis]:
        result = await self.session.execute(
            select(Thesis)
            .where(
                Thesis.inactive.is_(False),
                Thesis.locked.is_(False),
                Thesis.status != ThesisStatus.FINAL.value,
            )
            .order_by(Thesis.title, Thesis.id)
        )
        return list(result.scalars().all())

    async def _accounts_for(self, theses: Sequence[Thesis]) -> Dict[str, Account]:
        ids = {
            uuid.UUID(member)
            for thesis in theses
            for member in (*thesis.authors, *thesis.advisers, *thesis.panelists)
        }
        if not ids:
            return {}
        result = await self.session.execute(select(Account).where(Account.id.in_(ids)))
        return {str(a.id): a for a in result.scalars().all()}

    async def export(self, actor: Account, ip_address: Optional[str] = None) -> bytes:
        """
        Render the roster workbook. Administrators only.

        Returns:
            The .xlsx file content
        """
        require_administrator(actor, "Only administrators can export thesis projects.")

        theses = await self.exportable_theses()
        accounts = await self._accounts_for(theses)
        content = workbook_bytes(build_roster_workbook(theses, accounts))

        await self.event_store.log(
            event_type=EventType.EXPORT_COMPLETED,
            entity_type="thesis",
            entity_id=None,
            account_id=actor.id,
            payload={"theses": len(theses), "bytes": len(content)},
            ip_address=ip_address,
        )
        logger.info("Roster exported", extra={"theses": len(theses)})
        return content
