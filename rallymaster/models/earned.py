"""Claims riders make against the rally catalog."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel


class EarnedBonusPoint(SQLModel, table=True):
    """A claimed bonus point. A scorer sets ``confirmed``."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    rally_participant_id: int = ORMField(foreign_key="rallyparticipant.id", index=True)
    bonus_point_id: int = ORMField(foreign_key="bonuspoint.id", index=True)
    odometer: Optional[int] = None
    earned_at: Optional[datetime] = None
    confirmed: bool = False


class EarnedCombination(SQLModel, table=True):
    """A claimed combination."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    rally_participant_id: int = ORMField(foreign_key="rallyparticipant.id", index=True)
    combination_id: int = ORMField(foreign_key="combination.id", index=True)
    confirmed: bool = False


__all__ = ["EarnedBonusPoint", "EarnedCombination"]
