"""
State machine for the thesis lifecycle.

Thesis.status moves through review states declared in ``_TRANSITIONS``;
reaching ``final`` locks the record. Every lifecycle operation refuses to touch
a locked thesis. Only faculty and administrators drive transitions.
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.kernel.errors import BadRequest, Forbidden, NotFound
from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models.account import Account
from thesis_tracker.kernel.models.event_log import EventType
from thesis_tracker.kernel.models.thesis import (
    MEMBER_LIMITS,
    PHASES,
    MemberRole,
    Thesis,
    ThesisStatus,
)
from thesis_tracker.kernel.permissions.permission_service import (
    is_administrator,
    is_student,
    require_administrator,
    require_staff,
)
from thesis_tracker.logging_config import get_logger

logger = get_logger(__name__)

S = ThesisStatus

# Valid (from_status, to_status) pairs
_TRANSITIONS: Set[Tuple[str, str]] = {
    (S.NEW.value, S.FOR_CHECKING.value),
    (S.NEW.value, S.ENDORSED.value),
    (S.FOR_CHECKING.value, S.FOR_CHECKING.value),
    (S.FOR_CHECKING.value, S.CHECKED.value),
    (S.FOR_CHECKING.value, S.ENDORSED.value),
    (S.CHECKED.value, S.FOR_CHECKING.value),
    (S.CHECKED.value, S.ENDORSED.value),
    (S.ENDORSED.value, S.PASS.value),
    (S.ENDORSED.value, S.FAIL.value),
    (S.ENDORSED.value, S.REDEFENSE.value),
    (S.REDEFENSE.value, S.ENDORSED.value),
    (S.PASS.value, S.NEW.value),
    (S.FAIL.value, S.NEW.value),
    (S.PASS.value, S.FOR_CHECKING.value),
    (S.FAIL.value, S.FOR_CHECKING.value),
    (S.PASS.value, S.FINAL.value),
}

TERMINAL_STATES = {S.FINAL.value}

LOCKED_DETAIL = "Thesis is locked and cannot be edited."

_MEMBER_LABELS = {
    MemberRole.AUTHOR: "authors",
    MemberRole.ADVISER: "advisers",
    MemberRole.PANELIST: "panelists",
}


def _status_val(value: Any) -> str:
    """Safely get enum value (SQLite returns str)."""
    return value.value if hasattr(value, "value") else str(value)


def valid_transitions(from_status: str) -> List[str]:
    """Return sorted list of valid target statuses from ``from_status``."""
    return sorted({t for f, t in _TRANSITIONS if f == from_status})


def can_transition(from_status: str, to_status: str) -> bool:
    """Check whether ``from_status -> to_status`` is a declared transition."""
    return (from_status, to_status) in _TRANSITIONS


def parse_status(value: Optional[str]) -> ThesisStatus:
    """Parse a requested status, raising BadRequest for empty or unknown values."""
    if not value:
        raise BadRequest("Status required.")
    try:
        return ThesisStatus(value)
    except ValueError:
        raise BadRequest(f"Unknown status '{value}'.")


def validate_members(role: MemberRole, ids: Sequence[Any]) -> List[str]:
    """
    Check a member list against its cardinality bounds.

    Returns:
        The ids as strings, in the given order

    Raises:
        BadRequest: if the count is out of bounds or an id repeats
    """
    low, high = MEMBER_LIMITS[role]
    label = _MEMBER_LABELS[role]
    if ids is None or len(ids) < low or len(ids) > high:
        raise BadRequest(f"Only {low}-{high} {label} can be added.")
    members = [str(i) for i in ids]
    if len(set(members)) != len(members):
        raise BadRequest(f"Duplicate entries in {label}.")
    return members


def validate_phase(phase: Any) -> int:
    try:
        number = int(phase)
    except (TypeError, ValueError):
        raise BadRequest(f"Phase must be one of {list(PHASES)}.")
    if number not in PHASES:
        raise BadRequest(f"Phase must be one of {list(PHASES)}.")
    return number


class ThesisStateMachine:
    """Service for guarded thesis mutations with audit logging."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def get_thesis(self, thesis_id: uuid.UUID) -> Thesis:
        """Load an active thesis or raise NotFound."""
        result = await self.session.execute(
            select(Thesis).where(Thesis.id == thesis_id)
        )
        thesis = result.scalar_one_or_none()
        if thesis is None or thesis.inactive:
            raise NotFound("Thesis not found.")
        return thesis

    @staticmethod
    def ensure_unlocked(thesis: Thesis) -> None:
        if thesis.locked:
            raise Forbidden(LOCKED_DETAIL)

    async def open_for_change(
        self,
        thesis_id: uuid.UUID,
        actor: Account,
        detail: str = "Cannot change status.",
    ) -> Thesis:
        """Role gate, existence and lock checks shared by staff mutations, in that order."""
        require_staff(actor, detail)
        thesis = await self.get_thesis(thesis_id)
        self.ensure_unlocked(thesis)
        return thesis

    async def create(
        self,
        actor: Account,
        title: Optional[str],
        authors: Optional[Sequence[Any]],
        advisers: Optional[Sequence[Any]],
        description: Optional[str] = None,
        panelists: Optional[Sequence[Any]] = None,
        phase: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Thesis:
        """
        Create a thesis.

        Non-administrators must be part of the group they register: students
        among the authors, faculty among the advisers. Theses created by an
        administrator are approved immediately, others await approval.
        """
        if not title:
            raise BadRequest("Title is required.")
        if not authors:
            raise BadRequest("Author list is required.")
        if not advisers:
            raise BadRequest("Adviser list is required.")

        author_ids = validate_members(MemberRole.AUTHOR, authors)
        adviser_ids = validate_members(MemberRole.ADVISER, advisers)
        panelist_ids = validate_members(MemberRole.PANELIST, panelists or [])
        phase_number = validate_phase(phase if phase is not None else PHASES[0])

        actor_key = str(actor.id)
        if not is_administrator(actor):
            if is_student(actor) and actor_key not in author_ids:
                raise BadRequest("Current user must be part of the group.")
            if not is_student(actor) and actor_key not in adviser_ids:
                raise BadRequest("Current user must be part of the group.")

        thesis = Thesis(
            title=title,
            description=description,
            authors=author_ids,
            advisers=adviser_ids,
            panelists=panelist_ids,
            phase=phase_number,
            status=ThesisStatus.NEW,
            approved=is_administrator(actor),
            locked=False,
            inactive=False,
        )
        self.session.add(thesis)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.THESIS_CREATED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={"title": title, "phase": phase_number, "approved": thesis.approved},
            ip_address=ip_address,
        )
        logger.info("Thesis created", extra={"thesis_id": str(thesis.id), "approved": thesis.approved})
        return thesis

    async def set_status(
        self,
        thesis: Thesis,
        next_status: Optional[str],
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> Thesis:
        """
        Move a thesis to ``next_status``.

        Raises:
            Forbidden: actor is a student or the thesis is locked
            BadRequest: status missing, unknown, or not reachable from the current one
        """
        require_staff(actor, "Cannot change status.")
        self.ensure_unlocked(thesis)
        target = parse_status(next_status)
        from_status = self._apply_status(thesis, target)

        await self._log_status_change(thesis, from_status, actor, ip_address)
        return thesis

    def _apply_status(self, thesis: Thesis, target: ThesisStatus) -> str:
        from_status = _status_val(thesis.status)
        if not can_transition(from_status, target.value):
            logger.warning(
                "Rejected status transition",
                extra={"thesis_id": str(thesis.id), "from_status": from_status, "to_status": target.value},
            )
            raise BadRequest(f"Invalid status transition: {from_status} -> {target.value}.")

        thesis.status = target
        if target.value in TERMINAL_STATES:
            thesis.locked = True
        return from_status

    async def _log_status_change(
        self,
        thesis: Thesis,
        from_status: str,
        actor: Account,
        ip_address: Optional[str],
    ) -> None:
        to_status = _status_val(thesis.status)
        await self.event_store.log(
            event_type=EventType.THESIS_STATUS_CHANGED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={"from_status": from_status, "to_status": to_status},
            ip_address=ip_address,
        )
        if thesis.locked:
            await self.event_store.log(
                event_type=EventType.THESIS_LOCKED,
                entity_type="thesis",
                entity_id=thesis.id,
                account_id=actor.id,
                payload={"reason": "final"},
                ip_address=ip_address,
            )
        logger.info(
            "Thesis status changed",
            extra={"thesis_id": str(thesis.id), "from_status": from_status, "to_status": to_status},
        )

    async def approve(
        self,
        thesis: Thesis,
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> bool:
        """
        Approve a thesis for default listing.

        Only administrators approve; for other staff this is a no-op.

        Returns:
            True if the thesis was approved by this call
        """
        require_staff(actor, "Cannot change status.")
        self.ensure_unlocked(thesis)
        if not is_administrator(actor):
            return False

        thesis.approved = True
        await self.event_store.log(
            event_type=EventType.THESIS_APPROVED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            ip_address=ip_address,
        )
        return True

    async def update_fields(
        self,
        thesis_id: uuid.UUID,
        changes: Dict[str, Any],
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> Thesis:
        """
        Edit a thesis.

        Every change is validated before any field is written, so a rejected
        request leaves the record untouched.

        Args:
            thesis_id: The thesis
            changes: Only the fields supplied by the caller (title, description,
                authors, advisers, panelists, status, phase)
            actor: The editing account
        """
        if is_student(actor):
            raise Forbidden("Students cannot edit thesis projects and must ask for assistance from admin.")
        thesis = await self.get_thesis(thesis_id)
        self.ensure_unlocked(thesis)

        staged: Dict[str, Any] = {}
        if changes.get("title"):
            staged["title"] = changes["title"]
        if changes.get("description"):
            staged["description"] = changes["description"]
        for role in MemberRole:
            if role.value in changes and changes[role.value] is not None:
                staged[role.value] = validate_members(role, changes[role.value])
        if changes.get("phase") is not None:
            staged["phase"] = validate_phase(changes["phase"])

        target: Optional[ThesisStatus] = None
        if changes.get("status"):
            target = parse_status(changes["status"])
            from_status = _status_val(thesis.status)
            # Resending the current status is not a transition
            if target.value == from_status:
                target = None
            elif not can_transition(from_status, target.value):
                raise BadRequest(f"Invalid status transition: {from_status} -> {target.value}.")

        for field, value in staged.items():
            setattr(thesis, field, value)

        payload: Dict[str, Any] = {"fields": sorted(staged)}
        if target is not None:
            payload["from_status"] = self._apply_status(thesis, target)
            payload["to_status"] = target.value

        await self.event_store.log(
            event_type=EventType.THESIS_UPDATED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload=payload,
            ip_address=ip_address,
        )
        if thesis.locked:
            await self.event_store.log(
                event_type=EventType.THESIS_LOCKED,
                entity_type="thesis",
                entity_id=thesis.id,
                account_id=actor.id,
                payload={"reason": "final"},
                ip_address=ip_address,
            )
        return thesis

    async def delete(
        self,
        thesis_id: uuid.UUID,
        actor: Account,
        ip_address: Optional[str] = None,
    ) -> Thesis:
        """
        Retire a thesis. Administrators only.

        A thesis that was never approved is deactivated; an approved one is
        locked instead so its submissions and grades remain on record.
        """
        require_administrator(actor, "You cannot delete theses.")
        thesis = await self.get_thesis(thesis_id)

        if not thesis.approved:
            thesis.inactive = True
            event_type = EventType.THESIS_DEACTIVATED
        else:
            thesis.locked = True
            event_type = EventType.THESIS_LOCKED

        await self.event_store.log(
            event_type=event_type,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={"reason": "deleted"},
            ip_address=ip_address,
        )
        logger.info("Thesis retired", extra={"thesis_id": str(thesis.id), "event": event_type.value})
        return thesis
