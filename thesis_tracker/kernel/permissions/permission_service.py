"""
Permission service - role gates and thesis visibility.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.kernel.errors import Forbidden
from thesis_tracker.kernel.models.account import Account, AccountRole
from thesis_tracker.kernel.models.thesis import Thesis
from thesis_tracker.logging_config import get_logger

logger = get_logger(__name__)

_TRUE_QUERY_VALUES = {"", "1", "true", "yes", "on"}


class PendingFilter:
    """Values accepted by the ``showPending`` list parameter."""

    SHOW = "show"  # only theses awaiting approval
    ALL = "all"  # approved and pending


def is_query_true(value: Optional[str]) -> bool:
    """A flag-style query parameter is true when present without a falsy value."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_QUERY_VALUES


def role_of(account: Account) -> AccountRole:
    """Role as enum (SQLite returns the stored string)."""
    return AccountRole(account.role)


def is_student(account: Account) -> bool:
    return role_of(account) == AccountRole.STUDENT


def is_administrator(account: Account) -> bool:
    return role_of(account) == AccountRole.ADMINISTRATOR


def require_role(account: Account, roles: Iterable[AccountRole], detail: str) -> None:
    """Raise Forbidden unless the account holds one of ``roles``."""
    allowed = set(roles)
    if role_of(account) not in allowed:
        logger.warning(
            "Role check failed",
            extra={"account_id": str(account.id), "role": str(account.role), "detail": detail},
        )
        raise Forbidden(detail)


def require_administrator(account: Account, detail: str) -> None:
    require_role(account, {AccountRole.ADMINISTRATOR}, detail)


def require_staff(account: Account, detail: str) -> None:
    """Faculty or administrator."""
    require_role(account, {AccountRole.FACULTY, AccountRole.ADMINISTRATOR}, detail)


def require_author_if_student(account: Account, thesis: Thesis, detail: str) -> None:
    """Students may only act on theses they author; staff always may."""
    if is_student(account) and not thesis.has_author(account.id):
        raise Forbidden(detail)


class PermissionService:
    """
    Thesis visibility for list requests.

    Membership (author, adviser or panelist) limits what a requester sees
    unless they are an administrator or explicitly ask for every thesis.
    Approval state is a second, independent filter.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def restrict_to_membership(account: Account, all_param: Optional[str]) -> bool:
        """
        Whether a list request must be limited to the requester's theses.

        Administrators see everything unless they pass a falsy ``all``;
        anyone passing a true ``all`` sees everything.
        """
        if all_param is None and is_administrator(account):
            return False
        return not is_query_true(all_param)

    async def list_visible_theses(
        self,
        account: Account,
        all_param: Optional[str] = None,
        q: Optional[str] = None,
        status_filter: Optional[str] = None,
        phase: Optional[str] = None,
        show_pending: Optional[str] = None,
    ) -> List[Thesis]:
        """
        Theses the requester may list, sorted by title.

        Args:
            account: The requester
            all_param: Raw ``all`` query value
            q: Case-insensitive title substring
            status_filter: Exact status
            phase: Phase number; ignored when not a positive integer
            show_pending: ``show`` (pending only), ``all`` (no approval filter),
                anything else shows approved or never-reviewed theses

        Returns:
            List of Thesis records
        """
        conditions = [Thesis.inactive.is_(False)]

        if q:
            conditions.append(Thesis.title.icontains(q, autoescape=True))
        if status_filter:
            conditions.append(Thesis.status == status_filter)

        phase_number = _parse_positive_int(phase)
        if phase_number:
            conditions.append(Thesis.phase == phase_number)

        if show_pending == PendingFilter.SHOW:
            conditions.append(Thesis.approved.is_(False))
        elif show_pending != PendingFilter.ALL:
            conditions.append(or_(Thesis.approved.is_(True), Thesis.approved.is_(None)))

        query = select(Thesis).where(and_(*conditions)).order_by(Thesis.title, Thesis.id)
        result = await self.session.execute(query)
        theses = list(result.scalars().all())

        # Member lists are JSON arrays, matched here rather than in SQL
        if self.restrict_to_membership(account, all_param):
            theses = [t for t in theses if t.has_member(account.id)]

        return theses


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None
