"""Rally visibility and scoring authorization.

Everything here is decided from the rally roster (``RallyParticipant``).
Visibility failures are reported exactly like a missing rally so callers
cannot probe for private rallies.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import Session, select

from ..core.errors import NotFoundError, ValidationError
from ..models import Member, Privilege, Rally, RallyParticipant

RALLY_NOT_FOUND = "Rally not found"


class AccessDecision(str, Enum):
    ALLOWED = "ALLOWED"
    DENIED_AS_NOT_FOUND = "DENIED_AS_NOT_FOUND"


def find_participant(
    session: Session, rally_id: int, member_id: Optional[int]
) -> Optional[RallyParticipant]:
    if member_id is None:
        return None
    return session.exec(
        select(RallyParticipant).where(
            RallyParticipant.rally_id == rally_id,
            RallyParticipant.member_id == member_id,
        )
    ).first()


def check_rally_access(
    session: Session,
    member: Optional[Member],
    rally: Rally,
    privilege: Optional[Privilege] = None,
) -> AccessDecision:
    """Single guard for rally access.

    With no ``privilege`` this is the view check: public rallies pass,
    private ones need a roster row. With a privilege the caller's role must
    carry it, whatever the rally's visibility.
    """

    if privilege is None and rally.is_public:
        return AccessDecision.ALLOWED

    participant = find_participant(session, rally.id, member.id if member else None)
    if participant is None:
        return AccessDecision.DENIED_AS_NOT_FOUND
    if privilege is not None and not participant.role.has(privilege):
        return AccessDecision.DENIED_AS_NOT_FOUND
    return AccessDecision.ALLOWED


def _enforce(decision: AccessDecision) -> None:
    if decision is not AccessDecision.ALLOWED:
        raise NotFoundError(RALLY_NOT_FOUND)


def load_rally(session: Session, rally_id: int) -> Rally:
    rally = session.get(Rally, rally_id)
    if rally is None:
        raise NotFoundError(RALLY_NOT_FOUND)
    return rally


def can_view(session: Session, member: Optional[Member], rally: Rally) -> bool:
    return check_rally_access(session, member, rally) is AccessDecision.ALLOWED


def require_view(session: Session, member: Optional[Member], rally: Rally) -> Rally:
    _enforce(check_rally_access(session, member, rally))
    return rally


def require_master_access(session: Session, member: Optional[Member], rally: Rally) -> Rally:
    """Only the rally's organizers may change it."""

    _enforce(check_rally_access(session, member, rally, Privilege.MASTER))
    return rally


def require_scorer_role(session: Session, actor: Member, rally_id: int) -> RallyParticipant:
    """The actor must be an AIDE or ORGANIZER of ``rally_id``."""

    participant = find_participant(session, rally_id, actor.id)
    if participant is None:
        raise ValidationError("Not authorized to score for this rally")
    if not participant.role.has(Privilege.SCORER):
        raise ValidationError("Only organizers and aides can perform this operation")
    return participant


def require_scoring_access(
    session: Session, actor: Member, participant: RallyParticipant
) -> None:
    """Riders may score for themselves; scorers may score for anyone in their rally."""

    if actor.id == participant.member_id:
        return
    require_scorer_role(session, actor, participant.rally_id)


__all__ = [
    "AccessDecision",
    "RALLY_NOT_FOUND",
    "can_view",
    "check_rally_access",
    "find_participant",
    "load_rally",
    "require_master_access",
    "require_scorer_role",
    "require_scoring_access",
    "require_view",
]
