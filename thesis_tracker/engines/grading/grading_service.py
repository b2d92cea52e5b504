"""
Grading Service - per-student grades and thesis-level grade history.

Two separate stores:
- each student account carries its latest ``grade`` / ``remarks``
- each thesis keeps a dated history of ``ThesisGrade`` snapshots

Recording one never touches the other.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account, AccountRole
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.models.thesis import Thesis, ThesisGrade
from thesis_tracker.kernel.permissions.permission_service import require_staff
from thesis_tracker.logging_config import get_logger

logger = get_logger(__name__)


class StudentGrade(BaseModel):
    """Grade entry for one author."""

    grade: Optional[float] = None
    remarks: Optional[str] = None


class GradingService:
    """Applies grades to students and records thesis grade snapshots."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def apply_grades(
        self,
        thesis: Thesis,
        grades_by_account: Mapping[str, StudentGrade],
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> List[uuid.UUID]:
        """
        Overwrite grade and remarks of each listed student.

        Ids that are malformed, unknown or not students are skipped.
        Thesis status and phase are left alone.

        Returns:
            Ids of the accounts that were graded
        """
        require_staff(actor, "Cannot change status.")

        graded: List[uuid.UUID] = []
        for key, entry in grades_by_account.items():
            try:
                account_id = uuid.UUID(str(key))
            except ValueError:
                continue

            student = await self.session.get(Account, account_id)
            if student is None or AccountRole(student.role) != AccountRole.STUDENT:
                continue

            student.grade = entry.grade
            student.remarks = entry.remarks
            graded.append(student.id)

        if graded:
            await self.event_store.log(
                event_type=EventType.GRADES_APPLIED,
                entity_type="thesis",
                entity_id=thesis.id,
                account_id=actor.id,
                payload={"students": graded},
                ip_address=ip_address,
            )
        logger.info(
            "Grades applied",
            extra={"thesis_id": str(thesis.id), "graded": len(graded), "skipped": len(grades_by_account) - len(graded)},
        )
        return graded

    async def record_thesis_grade(
        self,
        thesis: Thesis,
        value: Optional[float],
        remarks: Optional[str],
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> ThesisGrade:
        """Append a dated grade snapshot to the thesis history."""
        require_staff(actor, "Cannot change status.")

        snapshot = ThesisGrade(
            thesis_id=thesis.id,
            graded_at=datetime.now(timezone.utc),
            value=value,
            remarks=remarks,
            graded_by=actor.id,
        )
        self.session.add(snapshot)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.GRADES_APPLIED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={"thesis_grade": value, "remarks": remarks},
            ip_address=ip_address,
        )
        return snapshot

    async def history(self, thesis_id: uuid.UUID) -> List[ThesisGrade]:
        """Thesis grade snapshots, newest first."""
        result = await self.session.execute(
            select(ThesisGrade)
            .where(ThesisGrade.thesis_id == thesis_id)
            .order_by(ThesisGrade.graded_at.desc(), ThesisGrade.id.desc())
        )
        return list(result.scalars().all())

    async def histories(self, thesis_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[ThesisGrade]]:
        """Grade histories for several theses at once, each newest first."""
        if not thesis_ids:
            return {}
        result = await self.session.execute(
            select(ThesisGrade)
            .where(ThesisGrade.thesis_id.in_(thesis_ids))
            .order_by(ThesisGrade.graded_at.desc(), ThesisGrade.id.desc())
        )
        grouped: Dict[uuid.UUID, List[ThesisGrade]] = {}
        for row in result.scalars().all():
            grouped.setdefault(row.thesis_id, []).append(row)
        return grouped
