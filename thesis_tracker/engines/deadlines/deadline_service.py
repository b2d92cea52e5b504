"""
Deadline Service - per-phase submission deadlines.

A phase may be split into sub-phases, each with its own date. Admission only
consults the closing deadline of a phase: its last sub-phase date, which
closes at the start of that day in the configured deadline timezone.
"""

import datetime
from typing import Any, Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.config import get_settings
from thesis_tracker.kernel.errors import BadRequest, InternalError
from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.deadline import SubmissionDeadline
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.models.thesis import PHASES
from thesis_tracker.kernel.permissions.permission_service import require_administrator
from thesis_tracker.logging_config import get_logger

logger = get_logger(__name__)


def parse_phase_key(key: Any) -> int:
    """Phase keys arrive as JSON object keys, i.e. strings."""
    try:
        phase = int(key)
    except (TypeError, ValueError):
        raise BadRequest(f"Invalid phase '{key}'.")
    if phase not in PHASES:
        raise BadRequest(f"Invalid phase '{key}'.")
    return phase


def parse_deadline_date(value: Any) -> datetime.date:
    """
    Parse one deadline value.

    Accepts ISO dates (``2025-01-01``) and ISO datetimes, of which only the
    date part is kept.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str) or not value:
        raise BadRequest(f"Invalid deadline '{value}'.")
    try:
        return datetime.date.fromisoformat(value[:10])
    except ValueError:
        raise BadRequest(f"Invalid deadline '{value}'.")


def deadline_zone(name: Optional[str] = None) -> ZoneInfo:
    zone_name = name or get_settings().deadline_timezone
    try:
        return ZoneInfo(zone_name)
    except ZoneInfoNotFoundError:
        raise InternalError(f"Unknown deadline timezone '{zone_name}'.")


def closing_instant(day: datetime.date, zone: Optional[ZoneInfo] = None) -> datetime.datetime:
    """The moment a deadline date closes: 00:00 of that day in ``zone``."""
    return datetime.datetime.combine(day, datetime.time.min, tzinfo=zone or deadline_zone())


class DeadlineService:
    """Reads and upserts submission deadlines."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def set_deadlines(
        self,
        entries: Mapping[Any, Any],
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> Dict[int, List[str]]:
        """
        Upsert deadlines for one or more phases.

        Each phase in ``entries`` is replaced as a whole: stored sub-phases past
        the end of its new list are removed.

        Args:
            entries: phase -> date, or phase -> list of dates where the list
                index is the sub-phase ordinal
            actor: Must be an administrator

        Returns:
            The normalized phase -> ISO dates mapping that was written

        Raises:
            Forbidden: actor is not an administrator
            BadRequest: any phase or date is invalid; nothing written in this
                request survives, since the request transaction rolls back
        """
        require_administrator(actor, "Only administrators can change deadlines.")

        written: Dict[int, List[str]] = {}
        for key, value in entries.items():
            phase = parse_phase_key(key)
            values = value if isinstance(value, list) else [value]
            if not values:
                raise BadRequest(f"No deadline given for phase {phase}.")

            dates: List[str] = []
            for subphase, raw in enumerate(values):
                day = parse_deadline_date(raw)
                await self._upsert(phase, subphase, day)
                dates.append(day.isoformat())
            await self._drop_later_subphases(phase, len(values))
            written[phase] = dates

        await self.session.flush()
        await self.event_store.log(
            event_type=EventType.DEADLINES_UPDATED,
            entity_type="deadline",
            entity_id=None,
            account_id=actor.id,
            payload={"deadlines": {str(p): d for p, d in written.items()}},
            ip_address=ip_address,
        )
        logger.info("Deadlines updated", extra={"phases": sorted(written)})
        return written

    async def _upsert(self, phase: int, subphase: int, day: datetime.date) -> SubmissionDeadline:
        result = await self.session.execute(
            select(SubmissionDeadline).where(
                SubmissionDeadline.phase == phase,
                SubmissionDeadline.subphase == subphase,
            )
        )
        deadline = result.scalar_one_or_none()
        if deadline is None:
            deadline = SubmissionDeadline(phase=phase, subphase=subphase, date=day)
            self.session.add(deadline)
        else:
            deadline.date = day
        await self.session.flush()
        return deadline

    async def _drop_later_subphases(self, phase: int, count: int) -> None:
        """A rewritten phase keeps only the sub-phases given in the request."""
        await self.session.execute(
            delete(SubmissionDeadline).where(
                SubmissionDeadline.phase == phase,
                SubmissionDeadline.subphase >= count,
            )
        )

    async def get_deadlines(self) -> Dict[int, List[str]]:
        """Phase -> ISO dates ordered by sub-phase."""
        result = await self.session.execute(
            select(SubmissionDeadline).order_by(
                SubmissionDeadline.phase,
                SubmissionDeadline.subphase,
            )
        )
        deadlines: Dict[int, List[str]] = {}
        for row in result.scalars().all():
            deadlines.setdefault(row.phase, []).append(row.date.isoformat())
        return deadlines

    async def closing_deadline(self, phase: int) -> Optional[datetime.datetime]:
        """Closing instant for ``phase``, or None when no deadline is set."""
        result = await self.session.execute(
            select(SubmissionDeadline)
            .where(SubmissionDeadline.phase == phase)
            .order_by(SubmissionDeadline.subphase.desc())
            .limit(1)
        )
        deadline = result.scalar_one_or_none()
        if deadline is None:
            return None
        return closing_instant(deadline.date)
