"""Rally roster rows and the role/privilege table."""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel


class Privilege(str, Enum):
    SCORER = "SCORER"
    MASTER = "MASTER"


class ParticipantRole(str, Enum):
    """Role a member holds in one rally. Roles only ever move up."""

    RIDER = "RIDER"
    AIDE = "AIDE"
    ORGANIZER = "ORGANIZER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    @property
    def privileges(self) -> FrozenSet[Privilege]:
        return ROLE_PRIVILEGES[self]

    def has(self, privilege: Privilege) -> bool:
        return privilege in ROLE_PRIVILEGES[self]


ROLE_PRIVILEGES = {
    ParticipantRole.RIDER: frozenset(),
    ParticipantRole.AIDE: frozenset({Privilege.SCORER}),
    ParticipantRole.ORGANIZER: frozenset({Privilege.SCORER, Privilege.MASTER}),
}

_ROLE_RANK = {
    ParticipantRole.RIDER: 0,
    ParticipantRole.AIDE: 1,
    ParticipantRole.ORGANIZER: 2,
}


class RallyParticipant(SQLModel, table=True):
    """A member's registration in a rally; the sole source of rally access."""

    __table_args__ = (
        UniqueConstraint("rally_id", "member_id", name="uq_rally_member"),
    )

    id: Optional[int] = ORMField(default=None, primary_key=True)
    rally_id: int = ORMField(foreign_key="rally.id", index=True)
    member_id: int = ORMField(foreign_key="member.id", index=True)
    role: ParticipantRole = ORMField(default=ParticipantRole.RIDER)

    odometer_in: Optional[int] = None
    odometer_out: Optional[int] = None
    finisher: Optional[bool] = None
    final_score: Optional[int] = None


__all__ = ["ParticipantRole", "Privilege", "ROLE_PRIVILEGES", "RallyParticipant"]
