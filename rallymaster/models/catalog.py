"""Bonus points and combinations an organizer publishes for a rally."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field as ORMField, SQLModel


class BonusPoint(SQLModel, table=True):
    """A checkpoint location worth ``points``."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    rally_id: int = ORMField(foreign_key="rally.id", index=True)
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    points: int = 0
    required: bool = False
    repeatable: bool = False
    is_start: bool = False
    is_finish: bool = False
    marker_color: Optional[str] = None
    marker_icon: Optional[str] = None


class Combination(SQLModel, table=True):
    """A set of bonus points worth extra points once completed.

    ``requires_all`` and ``num_required`` describe completion, but claims are
    always asserted by a rider or scorer; nothing derives them.
    """

    id: Optional[int] = ORMField(default=None, primary_key=True)
    rally_id: int = ORMField(foreign_key="rally.id", index=True)
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    points: int = 0
    requires_all: bool = False
    num_required: Optional[int] = None
    marker_color: Optional[str] = None
    marker_icon: Optional[str] = None


class CombinationPoint(SQLModel, table=True):
    """One bonus point that counts toward a combination."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    combination_id: int = ORMField(foreign_key="combination.id", index=True)
    bonus_point_id: int = ORMField(foreign_key="bonuspoint.id", index=True)
    required: bool = False


__all__ = ["BonusPoint", "Combination", "CombinationPoint"]
